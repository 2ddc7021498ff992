"""
Audit Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the audit domain.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from src.domain.base import as_utc
from src.domain.entities import EventOutcome, EventSource, Severity


# ============================================================================
# Command DTOs
# ============================================================================


class RecordEventCommand(BaseModel):
    """Audit event as produced by a request handler (no id, no timestamp)"""

    user_id: Optional[str] = None
    session_id: Optional[str] = None
    action: str = Field(min_length=1, max_length=100)
    resource: str = Field(min_length=1, max_length=200)
    resource_id: Optional[str] = None
    outcome: EventOutcome
    severity: Severity
    source: EventSource
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EventSearchFilters(BaseModel):
    """Filters for bounded best-effort event search"""

    user_id: Optional[str] = None
    action: Optional[str] = None
    resource: Optional[str] = None
    outcome: Optional[EventOutcome] = None
    severity: Optional[Severity] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_risk_score: Optional[int] = Field(default=None, ge=0, le=100)

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None


# ============================================================================
# Response DTOs
# ============================================================================


class ReportSummary(BaseModel):
    total_events: int
    failed_logins: int
    successful_logins: int
    data_access: int
    high_risk_events: int
    active_alerts: int


class RiskyIp(BaseModel):
    ip: str
    risk_score: int
    event_count: int


class ActiveUser(BaseModel):
    user_id: str
    event_count: int
    risk_score: int


class AlertTypeSummary(BaseModel):
    type: str
    count: int


class SecurityReport(BaseModel):
    """Response for the security report use case"""

    start_date: datetime
    end_date: datetime
    summary: ReportSummary
    top_risky_ips: List[RiskyIp]
    top_users: List[ActiveUser]
    alerts_by_type: List[AlertTypeSummary]
