from abc import ABC, abstractmethod
from typing import Any, Dict


class INotificationDispatcher(ABC):
    """
    Outbound notification interface - application layer

    The security core decides whether and what to send; delivery over
    email, chat or pager belongs to the implementation.
    """

    @abstractmethod
    async def dispatch(self, channel: str, payload: Dict[str, Any]) -> None:
        """Deliver a payload on a named channel"""
        pass
