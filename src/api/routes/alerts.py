"""
Alert API Routes

Handles security alert listing, creation and status transitions.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.use_cases.alerts import AlertLifecycleUseCase, CreateAlertCommand
from src.depends import get_alert_use_case
from src.domain.entities import AlertStatus, SecurityAlert

router = APIRouter(
    prefix="/alerts", tags=["Alerts"], dependencies=[Depends(verify_admin_api_key)]
)


class AlertsResponse(BaseModel):
    alerts: List[SecurityAlert]


class UpdateAlertStatusRequest(BaseModel):
    """PATCH /alerts/{alert_id}/status request payload"""

    status: AlertStatus


@router.get("", response_model=AlertsResponse)
async def get_active_alerts(
    limit: int = Query(50, ge=1, le=500),
    use_case: AlertLifecycleUseCase = Depends(get_alert_use_case),
):
    """Open and investigating alerts, newest first"""
    return AlertsResponse(alerts=await use_case.get_active_alerts(limit))


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SecurityAlert)
async def create_alert(
    command: CreateAlertCommand,
    use_case: AlertLifecycleUseCase = Depends(get_alert_use_case),
):
    return await use_case.create_alert(command)


@router.patch("/{alert_id}/status", response_model=SecurityAlert)
async def update_alert_status(
    alert_id: str,
    request: UpdateAlertStatusRequest,
    use_case: AlertLifecycleUseCase = Depends(get_alert_use_case),
):
    """
    Update Alert Status

    Allowed: open -> investigating, investigating -> resolved | false_positive.

    Raises:
        - 400 Bad Request: INVALID_TRANSITION
        - 404 Not Found: ALERT_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    result = await use_case.update_alert_status(alert_id, request.status)

    if result.is_err():
        error = result.error
        if error.code == "ALERT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        if error.code in ("INVALID_TRANSITION", "INVALID_STATUS"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value
