"""Human-readable alert text for due tokens."""

from __future__ import annotations

from datetime import date

from .evaluator import days_remaining
from .models import Token


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def render_message(token: Token, today: date) -> str:
    """Render the notification text for ``token`` as of ``today``."""
    remaining = days_remaining(today, token.expires_at)
    expires = token.expires_at.isoformat()

    if remaining < 0:
        overdue = _plural(-remaining, "day")
        return f"🚨 Token '{token.name}' has EXPIRED on {expires} ({overdue} overdue)!"
    if remaining == 0:
        return f"🚨 Token '{token.name}' expires TODAY ({expires})!"
    return f"⚠️ Token '{token.name}' will expire in {_plural(remaining, 'day')} (on {expires})."
