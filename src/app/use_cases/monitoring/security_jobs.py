"""
Security Jobs

The periodic jobs fired by the security scheduler.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from src.app.services.scheduler import ScheduledJob
from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import AuditSettings, KeyRotationSettings, MonitoringSettings
from src.app.use_cases.alerts import AlertLifecycleUseCase, SecurityNotifier
from src.app.use_cases.audit import QueryEventsUseCase, SecurityReportUseCase
from src.app.use_cases.detection import ThreatPatternEngine
from src.app.use_cases.keys import ApiKeyUseCase, KeyRotationUseCase
from src.domain.base import utcnow
from .security_monitoring_use_case import SecurityMonitoringUseCase

logger = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60
WEEK_SECONDS = 7 * DAY_SECONDS


class SecurityJobs:
    """
    Builds a fresh unit of work and use cases for every job run.

    Business Rules:
    - metrics_snapshot: collect metrics, then raise threshold alerts
    - pattern_sweep: run the threat pattern library over the last hour
    - cleanup: expired keys, due rotated keys and old metrics snapshots
    - key_rotation: rotate every user's eligible keys
    - daily_report: report on the previous UTC day and send it to the channels
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        audit_settings: AuditSettings,
        key_settings: KeyRotationSettings,
        monitoring_settings: MonitoringSettings,
        notifier: Optional[SecurityNotifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow_factory = uow_factory
        self.audit_settings = audit_settings
        self.key_settings = key_settings
        self.monitoring_settings = monitoring_settings
        self.notifier = notifier
        self.clock = clock

    def scheduled_jobs(self) -> List[ScheduledJob]:
        return [
            ScheduledJob(
                "metrics_snapshot",
                self.monitoring_settings.metrics_interval_minutes * 60,
                self.metrics_snapshot,
            ),
            ScheduledJob(
                "pattern_sweep",
                self.monitoring_settings.pattern_sweep_interval_minutes * 60,
                self.pattern_sweep,
            ),
            ScheduledJob("cleanup", DAY_SECONDS, self.cleanup),
            ScheduledJob("key_rotation", WEEK_SECONDS, self.key_rotation),
            ScheduledJob("daily_report", DAY_SECONDS, self.daily_report),
        ]

    async def metrics_snapshot(self) -> Dict[str, Any]:
        uow = self.uow_factory()
        monitoring = SecurityMonitoringUseCase(
            uow, self.monitoring_settings, self._alerts(uow), clock=self.clock
        )
        metrics = await monitoring.collect_security_metrics()
        raised = await monitoring.check_alert_thresholds(metrics)
        return {"total_requests": metrics.total_requests, "alerts_raised": len(raised)}

    async def pattern_sweep(self) -> Dict[str, Any]:
        uow = self.uow_factory()
        engine = ThreatPatternEngine(
            uow, self.monitoring_settings, self._alerts(uow), clock=self.clock
        )
        alerts = await engine.sweep()
        return {"alerts_raised": len(alerts)}

    async def cleanup(self) -> Dict[str, Any]:
        uow = self.uow_factory()
        rotation = self._rotation(uow)
        monitoring = SecurityMonitoringUseCase(
            uow, self.monitoring_settings, self._alerts(uow), clock=self.clock
        )
        return {
            "expired_keys": await rotation.cleanup_expired_keys(),
            "rotated_keys_deactivated": await rotation.process_pending_deactivations(),
            "metrics_deleted": await monitoring.cleanup_old_metrics(),
        }

    async def key_rotation(self) -> Dict[str, Any]:
        rotated = await self._rotation(self.uow_factory()).rotate_all_keys()
        return {"rotated": rotated}

    async def daily_report(self) -> Dict[str, Any]:
        end = self.clock().replace(hour=0, minute=0, second=0, microsecond=0)
        start = end - timedelta(days=1)

        uow = self.uow_factory()
        alerts = self._alerts(uow)
        result = await SecurityReportUseCase(
            QueryEventsUseCase(uow), alerts, self.audit_settings
        ).execute(start, end)
        if result.is_err():
            raise result.error
        report = result.value

        logger.info(
            f"Daily security report generated for {start.date().isoformat()}: "
            f"{report.summary.total_events} events"
        )

        notified = 0
        if self.notifier is not None:
            notified = await self.notifier.notify_report(report.model_dump(mode="json"), "daily")
        return {"total_events": report.summary.total_events, "channels_notified": notified}

    def _alerts(self, uow: UnitOfWork) -> AlertLifecycleUseCase:
        return AlertLifecycleUseCase(uow, self.notifier, clock=self.clock)

    def _rotation(self, uow: UnitOfWork) -> KeyRotationUseCase:
        keys = ApiKeyUseCase(uow, self.key_settings, clock=self.clock)
        return KeyRotationUseCase(uow, keys, self.key_settings, clock=self.clock)
