"""
ThreatPattern Entity

Named detection rule evaluated against batches of recent audit events.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Pattern, Union

from .audit_event import AuditEvent
from .enums import PatternAction, Severity


@dataclass(frozen=True)
class StructuralPredicate:
    """Multi-field check over the raw event"""

    check: Callable[[AuditEvent], bool]


@dataclass(frozen=True)
class TextPredicate:
    """Signature tested against the JSON-serialized event"""

    regex: Pattern[str]

    @classmethod
    def compile(cls, pattern: str, flags: int = re.IGNORECASE) -> "TextPredicate":
        return cls(re.compile(pattern, flags))


Predicate = Union[StructuralPredicate, TextPredicate]


@dataclass(frozen=True)
class ThreatPattern:
    """
    ThreatPattern descriptor.

    Business Rules:
    - Matches only ever produce alerts; `action` is advisory metadata
    - Evaluated in library order, one alert per matching pattern per sweep
    """

    id: str
    name: str
    description: str
    predicate: Predicate
    severity: Severity
    action: PatternAction = PatternAction.alert
    metadata: Dict[str, Any] = field(default_factory=dict)

    def matches(self, event: AuditEvent) -> bool:
        if isinstance(self.predicate, StructuralPredicate):
            return bool(self.predicate.check(event))
        if isinstance(self.predicate, TextPredicate):
            return self.predicate.regex.search(event.model_dump_json()) is not None
        raise TypeError(f"Unsupported predicate for pattern {self.id}")
