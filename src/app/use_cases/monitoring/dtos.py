"""
Monitoring Use Case DTOs (Data Transfer Objects)

Response classes for the security dashboard.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from src.domain.entities import HealthStatus, SecurityAlert, SecurityMetrics


class TrendPoint(BaseModel):
    timestamp: datetime
    value: float


class SecurityTrends(BaseModel):
    """Per-snapshot series over the last 24 hours, oldest first"""

    request_trend: List[TrendPoint] = Field(default_factory=list)
    error_trend: List[TrendPoint] = Field(default_factory=list)
    alert_trend: List[TrendPoint] = Field(default_factory=list)


class SystemHealth(BaseModel):
    status: HealthStatus = HealthStatus.healthy
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class SecurityDashboard(BaseModel):
    current_metrics: SecurityMetrics
    trends: SecurityTrends
    active_alerts: List[SecurityAlert]
    system_health: SystemHealth
