"""
Security Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AlertStatus,
    EventOutcome,
    HealthStatus,
    PatternAction,
    Severity,
    ALERT_TRANSITIONS,
)

# Export all entities
from .audit_event import AuditEvent, EventSource
from .security_alert import SecurityAlert
from .api_key import ApiKey, KeyUsageStats
from .security_metrics import (
    AlertTypeCount,
    IpRisk,
    PerformanceMetrics,
    SecurityMetrics,
)
from .threat_pattern import (
    Predicate,
    StructuralPredicate,
    TextPredicate,
    ThreatPattern,
)

__all__ = [
    # Enums
    "AlertStatus",
    "EventOutcome",
    "HealthStatus",
    "PatternAction",
    "Severity",
    "ALERT_TRANSITIONS",
    # Entities
    "AuditEvent",
    "EventSource",
    "SecurityAlert",
    "ApiKey",
    "KeyUsageStats",
    "AlertTypeCount",
    "IpRisk",
    "PerformanceMetrics",
    "SecurityMetrics",
    "Predicate",
    "StructuralPredicate",
    "TextPredicate",
    "ThreatPattern",
]
