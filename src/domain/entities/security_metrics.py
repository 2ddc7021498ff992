"""
SecurityMetrics Entity

Point-in-time snapshot of the last hour of security activity.
"""

from datetime import datetime
from typing import List

from sqlmodel import Field, SQLModel

from src.domain.base import utcnow


class IpRisk(SQLModel):
    ip: str
    risk_score: int
    request_count: int


class AlertTypeCount(SQLModel):
    type: str
    count: int


class PerformanceMetrics(SQLModel):
    average_response_time: float = 0.0
    slow_requests: int = 0
    error_rate: float = 0.0


class SecurityMetrics(SQLModel):
    """
    SecurityMetrics snapshot.

    Business Rules:
    - Stored per 5-minute bucket, later snapshots in a bucket overwrite earlier ones
    - Retained for the metrics retention window (30 days default)
    """

    timestamp: datetime = Field(default_factory=utcnow)
    total_requests: int = 0
    failed_requests: int = 0
    blocked_requests: int = 0
    suspicious_activities: int = 0
    active_alerts: int = 0
    api_key_usage: int = 0
    unique_ips: int = 0
    top_risky_ips: List[IpRisk] = Field(default_factory=list)
    alerts_by_type: List[AlertTypeCount] = Field(default_factory=list)
    performance: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
