"""
Threat Pattern Engine

Periodic batch matching of recent audit events against the threat pattern library.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import MonitoringSettings
from src.app.use_cases.alerts import AlertLifecycleUseCase, CreateAlertCommand
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, SecurityAlert, ThreatPattern
from .threat_patterns import default_threat_patterns

logger = logging.getLogger(__name__)

SWEEP_WINDOW = timedelta(hours=1)

# Outlives the sweep window so an event is never reported twice for one pattern
ALERTED_MARKER_TTL_SECONDS = 2 * 60 * 60

PatternMatches = List[Tuple[ThreatPattern, List[AuditEvent]]]


class ThreatPatternEngine:
    """
    Matches threat patterns against the last hour of events.

    Business Rules:
    - Every pattern is evaluated against every sampled event
    - One alert per matching pattern per sweep, never one per event
    - Events already reported for a pattern are not reported again
    - A pattern that fails to evaluate counts as no match
    - Pattern actions other than alerting are advisory only
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: MonitoringSettings,
        alerts: AlertLifecycleUseCase,
        patterns: Optional[Sequence[ThreatPattern]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.settings = settings
        self.alerts = alerts
        self.patterns = list(patterns) if patterns is not None else default_threat_patterns()
        self.clock = clock

    def evaluate(self, events: Sequence[AuditEvent]) -> PatternMatches:
        """Group matching events by pattern, in library order"""
        matches = []
        for pattern in self.patterns:
            matched = [e for e in events if self._safe_match(pattern, e)]
            if matched:
                matches.append((pattern, matched))
        return matches

    async def sweep(self) -> List[SecurityAlert]:
        """
        Run every pattern over the recent-events sample.

        Returns:
            Alerts raised by this sweep
        """
        if not self.settings.threats_enabled:
            return []

        window_start = self.clock() - SWEEP_WINDOW
        async with self.uow:
            try:
                sample = await self.uow.audit_events.get_recent(
                    self.settings.pattern_sweep_sample_size
                )
            except Exception:
                logger.error("Failed to load recent events for threat sweep", exc_info=True)
                return []

        events = [e for e in sample if e.timestamp >= window_start]

        raised = []
        for pattern, matched in self.evaluate(events):
            try:
                alert = await self._raise_pattern_alert(pattern, matched)
            except Exception:
                logger.error(f"Failed to raise alert for threat pattern {pattern.id}", exc_info=True)
                continue
            if alert is not None:
                raised.append(alert)

        logger.info(
            f"Threat pattern sweep finished: events={len(events)} alerts={len(raised)}"
        )
        return raised

    async def _raise_pattern_alert(
        self, pattern: ThreatPattern, matched: List[AuditEvent]
    ) -> Optional[SecurityAlert]:
        event_ids = [e.id for e in matched]
        async with self.uow:
            already = await self.uow.alerts.get_alerted_event_ids(pattern.id, event_ids)
        fresh = [e for e in matched if e.id not in already]
        if not fresh:
            return None

        fresh_ids = [e.id for e in fresh]
        user_ids = {e.user_id for e in fresh if e.user_id}
        alert = await self.alerts.create_alert(
            CreateAlertCommand(
                type=pattern.id,
                severity=pattern.severity,
                title=pattern.name,
                description=f"{pattern.description}. {len(fresh)} matching events detected.",
                user_id=user_ids.pop() if len(user_ids) == 1 else None,
                source_ip=fresh[0].source.ip,
                events=fresh_ids,
                metadata={
                    "pattern_id": pattern.id,
                    "event_count": len(fresh),
                    "action": pattern.action.value,
                    **pattern.metadata,
                },
            ),
            notify=False,
        )

        async with self.uow:
            await self.uow.alerts.mark_events_alerted(
                pattern.id, fresh_ids, ALERTED_MARKER_TTL_SECONDS
            )

        logger.warning(
            f"Threat pattern matched: pattern_id={pattern.id} events={len(fresh)} "
            f"alert_id={alert.id}"
        )

        if self.alerts.notifier is not None:
            await self.alerts.notifier.notify_threat(alert, pattern.id, len(fresh))
        return alert

    @staticmethod
    def _safe_match(pattern: ThreatPattern, event: AuditEvent) -> bool:
        try:
            return pattern.matches(event)
        except Exception:
            logger.error(
                f"Threat pattern {pattern.id} failed on event {event.id}", exc_info=True
            )
            return False
