"""
Audit API Routes

Handles audit event recording, retrieval, search and reporting.
"""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.alerts import AlertLifecycleUseCase
from src.app.use_cases.audit import (
    EventSearchFilters,
    QueryEventsUseCase,
    RecordEventCommand,
    RecordEventUseCase,
    SecurityReport,
    SecurityReportUseCase,
)
from src.app.use_cases.detection import AnomalyDetectors
from src.depends import SecurityServices, get_alert_use_case, get_services, get_unit_of_work
from src.domain.entities import AuditEvent

router = APIRouter(
    prefix="/audit", tags=["Audit"], dependencies=[Depends(verify_admin_api_key)]
)


class RecordEventResponse(BaseModel):
    """POST /audit/events response payload"""

    id: str


class AuditEventsResponse(BaseModel):
    events: List[AuditEvent]


class SearchEventsRequest(EventSearchFilters):
    """POST /audit/events/search request payload"""

    limit: int = 50


@router.post(
    "/events",
    status_code=status.HTTP_201_CREATED,
    response_model=RecordEventResponse,
)
async def record_event(
    command: RecordEventCommand,
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
    alerts: AlertLifecycleUseCase = Depends(get_alert_use_case),
):
    """
    Record Audit Event

    Scores and stores the event, then runs the inline anomaly detectors.
    Detector failures never fail the request.

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 422 Unprocessable Entity: Malformed event
        - 500 Internal Server Error: Store failure
    """
    detectors = AnomalyDetectors(uow, services.audit_settings, alerts, clock=services.clock)
    use_case = RecordEventUseCase(uow, detectors, clock=services.clock)
    event_id = await use_case.execute(command)
    return RecordEventResponse(id=event_id)


@router.get("/users/{user_id}/events", response_model=AuditEventsResponse)
async def get_user_events(
    user_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    events = await QueryEventsUseCase(uow).get_user_events(user_id, limit, offset)
    return AuditEventsResponse(events=events)


@router.get("/ips/{ip}/events", response_model=AuditEventsResponse)
async def get_ip_events(
    ip: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    events = await QueryEventsUseCase(uow).get_ip_events(ip, limit, offset)
    return AuditEventsResponse(events=events)


@router.post("/events/search", response_model=AuditEventsResponse)
async def search_events(
    request: SearchEventsRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Search Audit Events

    Best-effort search: reads one index (user, else action, else recent
    events) and filters in memory. Matches outside that candidate window
    are not returned.
    """
    filters = EventSearchFilters(**request.model_dump(exclude={"limit"}))
    events = await QueryEventsUseCase(uow).search_events(filters, request.limit)
    return AuditEventsResponse(events=events)


@router.get("/report", response_model=SecurityReport)
async def get_security_report(
    start: datetime = Query(..., description="Report start (ISO 8601)"),
    end: datetime = Query(..., description="Report end (ISO 8601)"),
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
    alerts: AlertLifecycleUseCase = Depends(get_alert_use_case),
):
    """
    Security Report

    Raises:
        - 400 Bad Request: INVALID_RANGE when start is after end
        - 500 Internal Server Error: Server error
    """
    use_case = SecurityReportUseCase(QueryEventsUseCase(uow), alerts, services.audit_settings)
    result = await use_case.execute(start, end)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_RANGE":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value
