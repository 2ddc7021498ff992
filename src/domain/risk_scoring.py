"""
Risk Scoring

Additive, explainable 0-100 score for a single audit event.
"""

from typing import Any, Dict, Mapping, Optional

from src.domain.entities.enums import EventOutcome, Severity

MAX_RISK_SCORE = 100

OUTCOME_WEIGHTS: Dict[EventOutcome, int] = {
    EventOutcome.success: 0,
    EventOutcome.failure: 20,
    EventOutcome.denied: 30,
}

SEVERITY_WEIGHTS: Dict[Severity, int] = {
    Severity.low: 10,
    Severity.medium: 25,
    Severity.high: 50,
    Severity.critical: 80,
}

# Substring matches; every matching entry applies
ACTION_WEIGHTS: Dict[str, int] = {
    "login": 15,
    "admin": 30,
    "delete": 25,
    "export": 20,
}

METADATA_FLAG_WEIGHTS: Dict[str, int] = {
    "suspicious_activity": 40,
    "multiple_failures": 30,
    "unusual_location": 25,
}


def calculate_risk_score(
    outcome: EventOutcome,
    severity: Severity,
    action: str,
    metadata: Optional[Mapping[str, Any]] = None,
) -> int:
    """
    Calculate the risk score of an event.

    Score interpretation:
        0-30   normal operations
        31-50  monitor closely
        51-70  investigate
        71-100 alert and respond

    Args:
        outcome: Event outcome
        severity: Event severity
        action: Free-text action verb, matched by substring
        metadata: Event metadata; truthy flags add weight

    Returns:
        Integer score clamped to [0, 100]
    """
    score = OUTCOME_WEIGHTS[EventOutcome(outcome)]
    score += SEVERITY_WEIGHTS[Severity(severity)]

    for fragment, weight in ACTION_WEIGHTS.items():
        if fragment in action:
            score += weight

    metadata = metadata or {}
    for flag, weight in METADATA_FLAG_WEIGHTS.items():
        if metadata.get(flag):
            score += weight

    return min(score, MAX_RISK_SCORE)
