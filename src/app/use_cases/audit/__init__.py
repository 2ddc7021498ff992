"""
Audit Use Cases

All audit-related business logic.
"""

from .dtos import EventSearchFilters, RecordEventCommand, SecurityReport
from .query_events_use_case import QueryEventsUseCase
from .record_event_use_case import RecordEventUseCase
from .security_report_use_case import SecurityReportUseCase

__all__ = [
    "EventSearchFilters",
    "RecordEventCommand",
    "SecurityReport",
    "QueryEventsUseCase",
    "RecordEventUseCase",
    "SecurityReportUseCase",
]
