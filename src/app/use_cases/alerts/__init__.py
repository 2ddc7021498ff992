"""
Alert Use Cases

Security alert lifecycle business logic.
"""

from .alert_lifecycle_use_case import AlertLifecycleUseCase
from .dtos import CreateAlertCommand
from .security_notifier import SecurityNotifier

__all__ = [
    "AlertLifecycleUseCase",
    "CreateAlertCommand",
    "SecurityNotifier",
]
