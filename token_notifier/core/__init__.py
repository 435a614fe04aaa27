"""Expiration evaluation and notification scheduling core."""

from .cycle import CycleReport, NotificationCycle
from .errors import ConfigurationError, NotifierError, StoreError, TokenNotifierError
from .evaluator import days_remaining, is_due
from .models import Token

__all__ = [
    "ConfigurationError",
    "CycleReport",
    "NotificationCycle",
    "NotifierError",
    "StoreError",
    "Token",
    "TokenNotifierError",
    "days_remaining",
    "is_due",
]
