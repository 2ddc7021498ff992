"""
Security Notifier

Decides whether and what to send to the notification channels.
"""

import logging
from typing import Any, Dict

from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.settings import MonitoringSettings
from src.domain.entities import SecurityAlert, Severity

logger = logging.getLogger(__name__)


class SecurityNotifier:
    """
    Routes alert and report payloads to every configured channel.

    Business Rules:
    - Nothing is sent when notifications are disabled
    - Alerts below the severity threshold are not sent
    - Delivery failures are logged, never raised
    """

    def __init__(self, dispatcher: INotificationDispatcher, settings: MonitoringSettings):
        self.dispatcher = dispatcher
        self.settings = settings

    def should_notify(self, severity: Severity) -> bool:
        if not self.settings.notifications_enabled:
            return False
        return Severity(severity).at_least(self.settings.notification_severity_threshold)

    async def notify_alert(self, alert: SecurityAlert) -> int:
        if not self.should_notify(alert.severity):
            return 0
        payload = {
            "kind": "security_alert",
            "alert_id": alert.id,
            "type": alert.type,
            "severity": alert.severity.value,
            "title": alert.title,
            "description": alert.description,
            "source_ip": alert.source_ip,
            "user_id": alert.user_id,
            "event_count": len(alert.events),
            "timestamp": alert.timestamp.isoformat(),
        }
        return await self._broadcast(payload)

    async def notify_threat(self, alert: SecurityAlert, pattern_id: str, event_count: int) -> int:
        if not self.should_notify(alert.severity):
            return 0
        payload = {
            "kind": "threat_detected",
            "alert_id": alert.id,
            "pattern_id": pattern_id,
            "severity": alert.severity.value,
            "title": alert.title,
            "description": alert.description,
            "event_count": event_count,
            "timestamp": alert.timestamp.isoformat(),
        }
        return await self._broadcast(payload)

    async def notify_report(self, report: Dict[str, Any], period: str) -> int:
        if not self.settings.notifications_enabled:
            return 0
        payload = {"kind": "security_report", "title": f"{period} security report", **report}
        return await self._broadcast(payload)

    async def _broadcast(self, payload: Dict[str, Any]) -> int:
        sent = 0
        for channel in self.settings.notification_channels:
            try:
                await self.dispatcher.dispatch(channel, payload)
                sent += 1
            except Exception:
                logger.error(
                    f"Failed to dispatch {payload.get('kind')} on channel {channel}",
                    exc_info=True,
                )
        return sent
