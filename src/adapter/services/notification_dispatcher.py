import logging
from typing import Any, Dict

from src.app.services.notification_dispatcher import INotificationDispatcher

logger = logging.getLogger(__name__)


class LoggingNotificationDispatcher(INotificationDispatcher):
    """Hands payloads to the log stream; delivery integrations tail it"""

    async def dispatch(self, channel: str, payload: Dict[str, Any]) -> None:
        logger.warning(
            f"Notification [{channel}] {payload.get('kind', 'message')}: "
            f"{payload.get('title', '')} severity={payload.get('severity', '-')}"
        )
