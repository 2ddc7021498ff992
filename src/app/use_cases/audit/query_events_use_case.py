"""
Query Events Use Case

Index reads and bounded best-effort search over audit events.
"""

import logging
from typing import List

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent
from .dtos import EventSearchFilters

logger = logging.getLogger(__name__)

# Candidates pulled from the chosen index per requested result
SEARCH_CANDIDATE_FACTOR = 2


class QueryEventsUseCase:
    """
    Use case for reading audit events.

    Business Rules:
    - Results are newest first
    - Store failures degrade to an empty list
    - Search reads one index (user, else action, else recent) and post-filters
      in memory; matches outside the candidate window are not returned
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def get_user_events(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[AuditEvent]:
        async with self.uow:
            try:
                return await self.uow.audit_events.get_by_user(user_id, limit, offset)
            except Exception:
                logger.error(f"Failed to get user events for {user_id}", exc_info=True)
                return []

    async def get_ip_events(
        self, ip: str, limit: int = 50, offset: int = 0
    ) -> List[AuditEvent]:
        async with self.uow:
            try:
                return await self.uow.audit_events.get_by_ip(ip, limit, offset)
            except Exception:
                logger.error(f"Failed to get IP events for {ip}", exc_info=True)
                return []

    async def search_events(
        self, filters: EventSearchFilters, limit: int = 50
    ) -> List[AuditEvent]:
        """
        Search audit events.

        Args:
            filters: Search filters
            limit: Maximum number of events to return

        Returns:
            Matching events from the candidate window, newest first
        """
        window = limit * SEARCH_CANDIDATE_FACTOR
        async with self.uow:
            try:
                if filters.user_id:
                    candidates = await self.uow.audit_events.get_by_user(filters.user_id, window)
                elif filters.action:
                    candidates = await self.uow.audit_events.get_by_action(filters.action, window)
                else:
                    candidates = await self.uow.audit_events.get_recent(window)
            except Exception:
                logger.error(f"Failed to search events with {filters}", exc_info=True)
                return []

        events = [e for e in candidates if _matches(e, filters)]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]


def _matches(event: AuditEvent, filters: EventSearchFilters) -> bool:
    if filters.action and event.action != filters.action:
        return False
    if filters.resource and event.resource != filters.resource:
        return False
    if filters.outcome and event.outcome != filters.outcome:
        return False
    if filters.severity and event.severity != filters.severity:
        return False
    if filters.start_date and event.timestamp < filters.start_date:
        return False
    if filters.end_date and event.timestamp > filters.end_date:
        return False
    if filters.min_risk_score is not None and event.risk_score < filters.min_risk_score:
        return False
    return True
