"""
SecurityAlert Entity

Raised by detectors and threat patterns for human or downstream triage.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Field, SQLModel

from src.domain.base import generate_uuid, utcnow
from .enums import AlertStatus, Severity


class SecurityAlert(SQLModel):
    """
    SecurityAlert entity.

    Business Rules:
    - Created in status=open
    - Status moves open -> investigating -> resolved | false_positive
    - References audit events by id only
    - Expires after the retention window
    """

    id: str = Field(default_factory=generate_uuid)
    timestamp: datetime = Field(default_factory=utcnow)

    type: str = Field(min_length=1, max_length=100)
    severity: Severity
    title: str
    description: str

    user_id: Optional[str] = None
    source_ip: str = "unknown"
    events: List[str] = Field(default_factory=list)

    status: AlertStatus = AlertStatus.open
    alert_metadata: Dict[str, Any] = Field(default_factory=dict)
