"""
Record Event Use Case

Scores, persists and indexes an audit event, then runs the inline detectors.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.detection.anomaly_detectors import AnomalyDetectors
from src.domain.base import utcnow
from src.domain.entities import AuditEvent
from src.domain.errors import Internal, SecurityServiceError
from src.domain.risk_scoring import calculate_risk_score
from .dtos import RecordEventCommand

logger = logging.getLogger(__name__)


class RecordEventUseCase:
    """
    Use case for recording an audit event.

    Business Rules:
    - id, timestamp and risk_score are assigned here, once
    - Persistence failures raise; the caller must know the event was lost
    - Detector failures are logged and never fail ingestion
    """

    def __init__(
        self,
        uow: UnitOfWork,
        detectors: Optional[AnomalyDetectors] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.detectors = detectors
        self.clock = clock

    async def execute(self, command: RecordEventCommand) -> str:
        """
        Execute record event use case.

        Args:
            command: Event attributes without id or timestamp

        Returns:
            The new event ID

        Raises:
            StoreUnavailable: store write failed
            Internal: unexpected failure
        """
        event = AuditEvent(
            timestamp=self.clock(),
            user_id=command.user_id,
            session_id=command.session_id,
            action=command.action,
            resource=command.resource,
            resource_id=command.resource_id,
            outcome=command.outcome,
            severity=command.severity,
            source=command.source,
            event_metadata=dict(command.metadata),
            risk_score=calculate_risk_score(
                command.outcome, command.severity, command.action, command.metadata
            ),
        )

        async with self.uow:
            try:
                await self.uow.audit_events.create(event)
            except SecurityServiceError:
                logger.error(f"Failed to record audit event {event.action}", exc_info=True)
                raise
            except Exception as e:
                logger.error(f"Failed to record audit event {event.action}", exc_info=True)
                raise Internal("Failed to record audit event") from e

        logger.info(
            f"Audit event recorded: id={event.id} action={event.action} "
            f"resource={event.resource} outcome={event.outcome.value} "
            f"severity={event.severity.value} user_id={event.user_id} "
            f"source_ip={event.source.ip} risk_score={event.risk_score}"
        )

        if self.detectors is not None:
            try:
                await self.detectors.run(event)
            except Exception:
                logger.error(f"Failed to check security alerts for {event.id}", exc_info=True)

        return event.id
