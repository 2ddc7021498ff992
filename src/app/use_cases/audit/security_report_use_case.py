"""
Security Report Use Case

Aggregates audit events and active alerts over a date range.
"""

import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, List

from src.app.settings import AuditSettings
from src.app.use_cases.alerts import AlertLifecycleUseCase
from src.domain.base import as_utc
from src.domain.entities import AuditEvent, EventOutcome
from src.domain.errors import Internal, Invalid, SecurityServiceError
from src.domain.result import Result, Return
from .dtos import (
    ActiveUser,
    AlertTypeSummary,
    EventSearchFilters,
    ReportSummary,
    RiskyIp,
    SecurityReport,
)
from .query_events_use_case import QueryEventsUseCase

logger = logging.getLogger(__name__)

REPORT_EVENT_LIMIT = 10_000
REPORT_ALERT_LIMIT = 1_000
TOP_N = 10


class SecurityReportUseCase:
    """
    Use case for generating a security report.

    Business Rules:
    - Covers at most the newest REPORT_EVENT_LIMIT events in range
    - Risky IPs ranked by mean risk score, users by event count
    - Alert breakdown counts currently active alerts by type
    """

    def __init__(
        self,
        events: QueryEventsUseCase,
        alerts: AlertLifecycleUseCase,
        settings: AuditSettings,
    ):
        self.events = events
        self.alerts = alerts
        self.settings = settings

    async def execute(self, start_date: datetime, end_date: datetime) -> Result[SecurityReport]:
        """
        Execute security report use case.

        Returns:
            Result with the report, or Invalid when start_date is after end_date

        Raises:
            Internal: unexpected failure
        """
        start_date, end_date = as_utc(start_date), as_utc(end_date)
        if start_date > end_date:
            return Return.err(
                Invalid("start_date must not be after end_date", code="INVALID_RANGE")
            )

        try:
            events = await self.events.search_events(
                EventSearchFilters(start_date=start_date, end_date=end_date),
                limit=REPORT_EVENT_LIMIT,
            )
            alerts = await self.alerts.get_active_alerts(REPORT_ALERT_LIMIT)

            summary = ReportSummary(
                total_events=len(events),
                failed_logins=sum(1 for e in events if _is_login(e, EventOutcome.failure)),
                successful_logins=sum(1 for e in events if _is_login(e, EventOutcome.success)),
                data_access=sum(
                    1 for e in events if "data" in e.resource or "read" in e.action
                ),
                high_risk_events=sum(
                    1 for e in events if e.risk_score >= self.settings.risk_score_threshold
                ),
                active_alerts=sum(1 for a in alerts if a.status.is_active),
            )

            alert_types = Counter(a.type for a in alerts)
            report = SecurityReport(
                start_date=start_date,
                end_date=end_date,
                summary=summary,
                top_risky_ips=_top_risky_ips(events),
                top_users=_top_users(events),
                alerts_by_type=[
                    AlertTypeSummary(type=t, count=c) for t, c in alert_types.most_common()
                ],
            )
        except SecurityServiceError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to generate security report {start_date}..{end_date}", exc_info=True
            )
            raise Internal("Failed to generate security report") from e

        logger.info(
            f"Security report generated for {start_date.isoformat()}..{end_date.isoformat()}: "
            f"{summary.total_events} events, {summary.active_alerts} active alerts"
        )
        return Return.ok(report)


def _is_login(event: AuditEvent, outcome: EventOutcome) -> bool:
    return event.action == "login" and event.outcome == outcome


def _risk_totals(events: List[AuditEvent], key) -> Dict[str, List[int]]:
    totals: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
    for event in events:
        group = key(event)
        if group is None:
            continue
        totals[group][0] += 1
        totals[group][1] += event.risk_score
    return totals


def _top_risky_ips(events: List[AuditEvent]) -> List[RiskyIp]:
    totals = _risk_totals(events, lambda e: e.source.ip)
    ranked = [
        RiskyIp(ip=ip, event_count=count, risk_score=round(score / count))
        for ip, (count, score) in totals.items()
    ]
    ranked.sort(key=lambda r: r.risk_score, reverse=True)
    return ranked[:TOP_N]


def _top_users(events: List[AuditEvent]) -> List[ActiveUser]:
    totals = _risk_totals(events, lambda e: e.user_id)
    ranked = [
        ActiveUser(user_id=user_id, event_count=count, risk_score=round(score / count))
        for user_id, (count, score) in totals.items()
    ]
    ranked.sort(key=lambda u: u.event_count, reverse=True)
    return ranked[:TOP_N]
