"""
AuditEvent Entity

Immutable record of a security-relevant action.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import Field, SQLModel

from src.domain.base import generate_uuid, utcnow
from .enums import EventOutcome, Severity


class EventSource(SQLModel):
    """Request context the event originated from"""

    ip: str = Field(min_length=1, max_length=64)
    user_agent: Optional[str] = None
    method: str = "GET"
    path: str = "/"
    referer: Optional[str] = None


class AuditEvent(SQLModel):
    """
    AuditEvent entity - immutable log of security-relevant actions.

    Business Rules:
    - Never mutated after creation
    - risk_score derived once at creation (0-100)
    - Expires after the retention window (90 days default)
    - Indexed by user, IP and action lists that reference it by id
    """

    id: str = Field(default_factory=generate_uuid)
    timestamp: datetime = Field(default_factory=utcnow)

    user_id: Optional[str] = None
    session_id: Optional[str] = None

    action: str = Field(min_length=1, max_length=100)  # e.g., "login", "admin_delete"
    resource: str = Field(min_length=1, max_length=200)
    resource_id: Optional[str] = None

    outcome: EventOutcome
    severity: Severity
    source: EventSource
    event_metadata: Dict[str, Any] = Field(default_factory=dict)

    risk_score: int = Field(default=0, ge=0, le=100)
