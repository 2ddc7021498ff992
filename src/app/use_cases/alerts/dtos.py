"""
Alert Use Case DTOs (Data Transfer Objects)

Command classes for the alert domain.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.domain.entities import Severity


class CreateAlertCommand(BaseModel):
    """Input for creating a security alert"""

    type: str = Field(min_length=1, max_length=100)
    severity: Severity
    title: str = Field(min_length=1, max_length=200)
    description: str
    user_id: Optional[str] = None
    source_ip: str = "unknown"
    events: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
