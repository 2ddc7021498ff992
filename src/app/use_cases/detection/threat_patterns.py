"""
Default Threat Pattern Library

Signatures and structural rules shipped with the service.
"""

from typing import List

from src.domain.entities import (
    AuditEvent,
    EventOutcome,
    PatternAction,
    Severity,
    StructuralPredicate,
    TextPredicate,
    ThreatPattern,
)

EXFILTRATION_THRESHOLD_BYTES = 10 * 1024 * 1024

SQL_INJECTION_SIGNATURE = (
    r"union\s+select|drop\s+table|exec\(|script>|<script|insert\s+into"
    r"|delete\s+from|update\s+set|information_schema"
)

XSS_SIGNATURE = r"<script[^>]*>|</script>|javascript:|on\w+\s*=|eval\(|setTimeout\(|setInterval\("


def _is_brute_force(event: AuditEvent) -> bool:
    return (
        event.action == "login"
        and event.outcome == EventOutcome.failure
        and bool(event.event_metadata.get("multiple_failures"))
    )


def _is_exfiltration(event: AuditEvent) -> bool:
    if "export" not in event.action and "download" not in event.action:
        return False
    size = event.event_metadata.get("response_size") or 0
    return isinstance(size, (int, float)) and size > EXFILTRATION_THRESHOLD_BYTES


def _is_unauthorized_admin_access(event: AuditEvent) -> bool:
    return "/admin" in event.source.path and event.outcome == EventOutcome.denied


def default_threat_patterns() -> List[ThreatPattern]:
    return [
        ThreatPattern(
            id="sql_injection",
            name="SQL Injection Attempt",
            description=(
                "Detects potential SQL injection patterns including UNION attacks, "
                "table manipulation, and code execution attempts"
            ),
            predicate=TextPredicate.compile(SQL_INJECTION_SIGNATURE),
            severity=Severity.high,
            action=PatternAction.alert,
            metadata={
                "category": "injection_attack",
                "mitigation": "parameterized_queries",
                "references": ["OWASP_A03_2021"],
            },
        ),
        ThreatPattern(
            id="xss_attempt",
            name="Cross-Site Scripting (XSS) Attempt",
            description=(
                "Detects potential XSS attacks including script injection, "
                "JavaScript URLs, and event handler injection"
            ),
            predicate=TextPredicate.compile(XSS_SIGNATURE),
            severity=Severity.high,
            action=PatternAction.alert,
            metadata={
                "category": "injection_attack",
                "attack_types": ["reflected_xss", "stored_xss", "dom_xss"],
                "mitigation": "content_security_policy",
            },
        ),
        ThreatPattern(
            id="brute_force",
            name="Brute Force Authentication Attack",
            description=(
                "Detects coordinated login attempts indicating brute force "
                "or credential stuffing attacks"
            ),
            predicate=StructuralPredicate(_is_brute_force),
            severity=Severity.high,
            action=PatternAction.block,
            metadata={
                "category": "authentication_attack",
                "indicators": ["repeated_failures", "rapid_attempts"],
                "mitigation": "account_lockout",
            },
        ),
        ThreatPattern(
            id="data_exfiltration",
            name="Potential Data Exfiltration",
            description=(
                "Detects unusual large data access patterns that may indicate "
                "data theft or unauthorized extraction"
            ),
            predicate=StructuralPredicate(_is_exfiltration),
            severity=Severity.medium,
            action=PatternAction.alert,
            metadata={
                "category": "data_protection",
                "threshold": "10MB",
                "risk_factors": ["bulk_export", "unusual_volume"],
            },
        ),
        ThreatPattern(
            id="admin_access",
            name="Unauthorized Administrative Access Attempt",
            description=(
                "Detects attempts to access administrative functions "
                "without proper authorization"
            ),
            predicate=StructuralPredicate(_is_unauthorized_admin_access),
            severity=Severity.critical,
            action=PatternAction.alert,
            metadata={
                "category": "privilege_escalation",
                "target": "administrative_functions",
                "response": "immediate_investigation",
            },
        ),
    ]
