"""
Monitoring Use Cases

Security metrics, trends and health.
"""

from .dtos import SecurityDashboard, SecurityTrends, SystemHealth, TrendPoint
from .security_jobs import SecurityJobs
from .security_monitoring_use_case import SecurityMonitoringUseCase

__all__ = [
    "SecurityDashboard",
    "SecurityTrends",
    "SystemHealth",
    "TrendPoint",
    "SecurityJobs",
    "SecurityMonitoringUseCase",
]
