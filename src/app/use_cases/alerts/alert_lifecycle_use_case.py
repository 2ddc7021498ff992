"""
Alert Lifecycle Use Case

Creates, lists and transitions security alerts.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from src.app.services.unit_of_work import UnitOfWork
from .security_notifier import SecurityNotifier
from src.domain.base import utcnow
from src.domain.entities import AlertStatus, SecurityAlert, Severity
from src.domain.errors import Internal, Invalid, NotFound, SecurityServiceError
from src.domain.result import Result, Return
from .dtos import CreateAlertCommand

logger = logging.getLogger(__name__)


class AlertLifecycleUseCase:
    """
    Use case for the security alert lifecycle.

    Business Rules:
    - New alerts start open and join the active-alerts index
    - High and critical alerts are logged at warning level
    - open -> investigating -> resolved | false_positive; terminal states never change
    - Resolved and false-positive alerts leave the active-alerts index
    """

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: Optional[SecurityNotifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.notifier = notifier
        self.clock = clock

    async def create_alert(
        self, command: CreateAlertCommand, notify: bool = True
    ) -> SecurityAlert:
        """
        Persist a new open alert.

        Args:
            command: Alert attributes
            notify: Send the alert payload to the notification channels

        Raises:
            StoreUnavailable: store write failed
            Internal: unexpected failure
        """
        alert = SecurityAlert(
            timestamp=self.clock(),
            type=command.type,
            severity=command.severity,
            title=command.title,
            description=command.description,
            user_id=command.user_id,
            source_ip=command.source_ip,
            events=list(command.events),
            alert_metadata=dict(command.metadata),
        )

        async with self.uow:
            try:
                await self.uow.alerts.create(alert)
            except SecurityServiceError:
                logger.error(f"Failed to create security alert {alert.type}", exc_info=True)
                raise
            except Exception as e:
                logger.error(f"Failed to create security alert {alert.type}", exc_info=True)
                raise Internal("Failed to create security alert") from e

        if alert.severity in (Severity.high, Severity.critical):
            logger.warning(
                f"Security alert created: id={alert.id} type={alert.type} "
                f"severity={alert.severity.value} title={alert.title!r} "
                f"user_id={alert.user_id} source_ip={alert.source_ip}"
            )
        else:
            logger.info(f"Security alert created: id={alert.id} type={alert.type}")

        if notify and self.notifier is not None:
            await self.notifier.notify_alert(alert)

        return alert

    async def get_active_alerts(self, limit: int = 50) -> List[SecurityAlert]:
        """Open and investigating alerts, newest first. Empty on store failure."""
        async with self.uow:
            try:
                candidates = await self.uow.alerts.get_indexed(limit)
            except Exception:
                logger.error("Failed to get active alerts", exc_info=True)
                return []

        alerts = [a for a in candidates if a.status.is_active]
        return sorted(alerts, key=lambda a: a.timestamp, reverse=True)

    async def get_alert(self, alert_id: str) -> Optional[SecurityAlert]:
        async with self.uow:
            return await self.uow.alerts.get_by_id(alert_id)

    async def update_alert_status(self, alert_id: str, status: str) -> Result[SecurityAlert]:
        """
        Move an alert to a new status.

        Args:
            alert_id: Alert ID
            status: Target status value

        Returns:
            Result with the updated alert (unchanged when already in that
            status), or NotFound / Invalid

        Raises:
            StoreUnavailable: store read or write failed
            Internal: unexpected failure
        """
        try:
            target = AlertStatus(status)
        except ValueError:
            return Return.err(Invalid(f"Unknown alert status {status!r}", code="INVALID_STATUS"))

        async with self.uow:
            try:
                alert = await self.uow.alerts.get_by_id(alert_id)
                if alert is None:
                    return Return.err(
                        NotFound(f"Alert {alert_id} not found", code="ALERT_NOT_FOUND")
                    )

                previous = alert.status
                if previous == target:
                    return Return.ok(alert)

                if not previous.can_transition_to(target):
                    return Return.err(
                        Invalid(
                            f"Cannot move alert from {previous.value} to {target.value}",
                            code="INVALID_TRANSITION",
                        )
                    )

                updated = alert.model_copy(update={"status": target})
                await self.uow.alerts.update(updated)

                if target.is_terminal:
                    await self.uow.alerts.remove_from_active_index(alert_id)
            except SecurityServiceError:
                raise
            except Exception as e:
                logger.error(f"Failed to update alert status {alert_id}", exc_info=True)
                raise Internal("Failed to update alert status") from e

        logger.info(
            f"Security alert status updated: id={alert_id} "
            f"{previous.value} -> {target.value}"
        )
        return Return.ok(updated)
