"""Expiration evaluation: decides whether a token is due for a notification.

A token is due when it is within ``threshold_days`` of expiring (or already
expired) and has not been notified yet today. The ``last_notified < today``
guard limits alerts to one per calendar day per token, regardless of how often
the check cycle runs within that day. It does not mean "never renotify":
tokens inside the window, including expired ones, are alerted once every day
until they are removed or renewed.
"""

from __future__ import annotations

from datetime import date


def days_remaining(today: date, expires_at: date) -> int:
    """Whole days until expiry; negative once the token has expired."""
    return (expires_at - today).days


def is_due(
    today: date,
    expires_at: date,
    last_notified: date | None,
    threshold_days: int,
) -> bool:
    """Return True when a notification should be sent for this token today.

    ``threshold_days = 0`` notifies only on or after the expiration date.
    """
    if days_remaining(today, expires_at) > threshold_days:
        return False
    return last_notified is None or last_notified < today
