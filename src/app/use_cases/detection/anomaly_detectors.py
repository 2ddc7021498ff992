"""
Anomaly Detectors

Sliding-window checks run inline after every recorded audit event.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import AuditSettings
from src.app.use_cases.alerts import AlertLifecycleUseCase, CreateAlertCommand
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, EventOutcome, SecurityAlert, Severity

logger = logging.getLogger(__name__)

FAILED_LOGIN_ALERT = "failed_login_attempts"
HIGH_RISK_ALERT = "high_risk_activity"
DATA_ACCESS_ALERT = "excessive_data_access"


def is_failed_login(event: AuditEvent) -> bool:
    return event.action == "login" and event.outcome == EventOutcome.failure


def is_data_access(event: AuditEvent) -> bool:
    return "read" in event.action or "export" in event.action


class AnomalyDetectors:
    """
    Inline detectors over bounded samples of recent events.

    Business Rules:
    - Brute force: >= N failed logins from one IP inside the window (high)
    - High risk: a single event at or above the risk threshold (critical if the
      event is critical, else high)
    - Data access: >= N read/export events by one user inside the window (medium)
    - Each check only reads a fixed-size sample of the relevant index, so
      bursts older than the sample can be missed
    - One failing check does not stop the others
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: AuditSettings,
        alerts: AlertLifecycleUseCase,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.settings = settings
        self.alerts = alerts
        self.clock = clock

    async def run(self, event: AuditEvent) -> List[SecurityAlert]:
        raised = []
        for check in (self.check_failed_logins, self.check_high_risk, self.check_data_access):
            try:
                alert = await check(event)
            except Exception:
                logger.error(f"Detector {check.__name__} failed for event {event.id}", exc_info=True)
                continue
            if alert is not None:
                raised.append(alert)
        return raised

    async def check_failed_logins(self, event: AuditEvent) -> Optional[SecurityAlert]:
        if not is_failed_login(event):
            return None

        window = timedelta(minutes=self.settings.failed_login_window_minutes)
        window_start = self.clock() - window

        async with self.uow:
            recent = await self.uow.audit_events.get_by_ip(
                event.source.ip, limit=self.settings.failed_login_sample_size
            )
        failures = [e for e in recent if is_failed_login(e) and e.timestamp >= window_start]

        if len(failures) < self.settings.failed_login_threshold:
            return None

        minutes = self.settings.failed_login_window_minutes
        return await self.alerts.create_alert(
            CreateAlertCommand(
                type=FAILED_LOGIN_ALERT,
                severity=Severity.high,
                title="Multiple Failed Login Attempts",
                description=(
                    f"{len(failures)} failed login attempts from IP {event.source.ip} "
                    f"in the last {minutes} minutes"
                ),
                source_ip=event.source.ip,
                events=[e.id for e in failures],
                metadata={
                    "attempt_count": len(failures),
                    "time_window": f"{minutes} minutes",
                    "threshold": self.settings.failed_login_threshold,
                    "attack_pattern": "brute_force_login",
                },
            )
        )

    async def check_high_risk(self, event: AuditEvent) -> Optional[SecurityAlert]:
        if event.risk_score < self.settings.risk_score_threshold:
            return None

        return await self.alerts.create_alert(
            CreateAlertCommand(
                type=HIGH_RISK_ALERT,
                severity=Severity.critical if event.severity == Severity.critical else Severity.high,
                title="High-Risk Activity Detected",
                description=f"High-risk activity detected: {event.action} on {event.resource}",
                user_id=event.user_id,
                source_ip=event.source.ip,
                events=[event.id],
                metadata={
                    "risk_score": event.risk_score,
                    "action": event.action,
                    "resource": event.resource,
                },
            )
        )

    async def check_data_access(self, event: AuditEvent) -> Optional[SecurityAlert]:
        if not event.user_id or not is_data_access(event):
            return None

        window = timedelta(minutes=self.settings.data_access_window_minutes)
        window_start = self.clock() - window

        async with self.uow:
            recent = await self.uow.audit_events.get_by_user(
                event.user_id, limit=self.settings.data_access_sample_size
            )
        accesses = [e for e in recent if is_data_access(e) and e.timestamp >= window_start]

        if len(accesses) < self.settings.data_access_threshold:
            return None

        minutes = self.settings.data_access_window_minutes
        return await self.alerts.create_alert(
            CreateAlertCommand(
                type=DATA_ACCESS_ALERT,
                severity=Severity.medium,
                title="Excessive Data Access",
                description=(
                    f"User {event.user_id} accessed data {len(accesses)} times "
                    f"in the last {minutes} minutes"
                ),
                user_id=event.user_id,
                source_ip=event.source.ip,
                events=[e.id for e in accesses],
                metadata={
                    "access_count": len(accesses),
                    "time_window": f"{minutes} minutes",
                    "threshold": self.settings.data_access_threshold,
                },
            )
        )
