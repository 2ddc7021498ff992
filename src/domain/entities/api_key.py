"""
ApiKey Entity

API credential record. The store only ever sees the SHA-256 hash of the secret.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Field, SQLModel

from src.domain.base import generate_uuid, utcnow


class ApiKey(SQLModel):
    """
    ApiKey entity.

    Business Rules:
    - `key` holds the plaintext secret only in memory; persisted records hold its hash
    - At most N active keys per user, oldest deactivated first
    - Rotated keys carry deactivate_after and stay valid until then
    - Deactivated records linger briefly for audit visibility
    """

    id: str = Field(default_factory=generate_uuid)
    key: str
    name: str = Field(min_length=1, max_length=200)
    user_id: Optional[str] = None
    permissions: List[str] = Field(default_factory=lambda: ["read"])

    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime
    last_used_at: Optional[datetime] = None
    is_active: bool = True

    # Set when a replacement was issued; key stops validating after this instant
    deactivate_after: Optional[datetime] = None
    replaced_by: Optional[str] = None

    key_metadata: Dict[str, Any] = Field(default_factory=dict)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_past_grace_period(self, now: datetime) -> bool:
        return self.deactivate_after is not None and now >= self.deactivate_after


class KeyUsageStats(SQLModel):
    """Per-key request counters"""

    key_id: str
    request_count: int = 0
    error_count: int = 0
    last_used: Optional[datetime] = None
