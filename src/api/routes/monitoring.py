"""
Monitoring API Routes

Security dashboard and on-demand scheduled jobs.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.alerts import AlertLifecycleUseCase
from src.app.use_cases.monitoring import SecurityDashboard, SecurityMonitoringUseCase
from src.depends import SecurityServices, get_alert_use_case, get_services, get_unit_of_work
from src.domain.errors import Internal

router = APIRouter(
    prefix="/monitoring", tags=["Monitoring"], dependencies=[Depends(verify_admin_api_key)]
)


class JobRunResponse(BaseModel):
    job: str
    result: Optional[Any] = None


@router.get("/dashboard", response_model=SecurityDashboard)
async def get_security_dashboard(
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
    alerts: AlertLifecycleUseCase = Depends(get_alert_use_case),
):
    use_case = SecurityMonitoringUseCase(
        uow, services.monitoring_settings, alerts, clock=services.clock
    )
    return await use_case.get_security_dashboard()


@router.post("/jobs/{name}", response_model=JobRunResponse)
async def run_job(name: str, request: Request):
    """
    Run Scheduled Job Now

    Jobs: metrics_snapshot, pattern_sweep, cleanup, key_rotation, daily_report.

    Raises:
        - 404 Not Found: JOB_NOT_FOUND
        - 500 Internal Server Error: Job failed
    """
    try:
        result = await request.app.state.scheduler.run_job(name)
    except Exception as e:
        raise ServerError(Internal(f"Job {name} failed")) from e

    if result.is_err():
        error = result.error
        if error.code == "JOB_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return JobRunResponse(job=name, result=result.value)
