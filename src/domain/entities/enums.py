"""
Security Service Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class EventOutcome(str, Enum):
    """Outcome of an audited action"""

    success = "success"
    failure = "failure"
    denied = "denied"


class Severity(str, Enum):
    """Severity shared by audit events, alerts and threat patterns"""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def at_least(self, other: "Severity") -> bool:
        return self.rank >= Severity(other).rank


_SEVERITY_ORDER = [Severity.low, Severity.medium, Severity.high, Severity.critical]


class AlertStatus(str, Enum):
    """Security alert lifecycle state"""

    open = "open"
    investigating = "investigating"
    resolved = "resolved"
    false_positive = "false_positive"

    @property
    def is_active(self) -> bool:
        return self in (AlertStatus.open, AlertStatus.investigating)

    @property
    def is_terminal(self) -> bool:
        return not ALERT_TRANSITIONS[self]

    def can_transition_to(self, target: "AlertStatus") -> bool:
        return AlertStatus(target) in ALERT_TRANSITIONS[self]


ALERT_TRANSITIONS = {
    AlertStatus.open: frozenset({AlertStatus.investigating}),
    AlertStatus.investigating: frozenset(
        {AlertStatus.resolved, AlertStatus.false_positive}
    ),
    AlertStatus.resolved: frozenset(),
    AlertStatus.false_positive: frozenset(),
}


class PatternAction(str, Enum):
    """Advisory response attached to a threat pattern; only alerting is enforced"""

    log = "log"
    alert = "alert"
    block = "block"


class HealthStatus(str, Enum):
    """Overall monitoring health"""

    healthy = "healthy"
    warning = "warning"
    critical = "critical"
