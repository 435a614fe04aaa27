"""Calendar date helpers and clock sources.

All evaluation happens on calendar dates in UTC. Both the store and the
evaluator use the same timezone so "today" is unambiguous.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol, runtime_checkable

from instrukt_ai_logging import get_logger

from token_notifier.constants import DATE_FORMAT

logger = get_logger(__name__)


@runtime_checkable
class Clock(Protocol):
    """Source of the current calendar date."""

    def today(self) -> date:
        """Return the current date."""
        ...


class SystemClock:
    """Wall clock truncated to the UTC calendar date."""

    def today(self) -> date:
        return datetime.now(timezone.utc).date()


class FixedClock:
    """Clock pinned to a given date (tests, dry runs)."""

    def __init__(self, day: date) -> None:
        self.day = day

    def today(self) -> date:
        return self.day

    def advance(self, days: int = 1) -> None:
        """Move the pinned date forward by whole days."""
        self.day = self.day + timedelta(days=days)


def parse_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD date.

    Raises:
        ValueError: If the value is not a valid calendar date in that format.
    """
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except (ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid date {value!r}: expected YYYY-MM-DD") from exc


def parse_stored_date(value: object) -> date | None:
    """Parse a date column, tolerating legacy timestamp values.

    Older databases stored ``last_notified`` as ``YYYY-MM-DD HH:MM:SS``; only
    the date part is kept.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        logger.warning("unexpected stored date type", value=repr(value), type=type(value).__name__)
        return None

    head = value.strip()[:10]
    try:
        return datetime.strptime(head, DATE_FORMAT).date()
    except ValueError:
        logger.warning("failed to parse stored date", value=value)
        return None


def format_date(value: date | None) -> str | None:
    """Serialize a date to its stored ISO form."""
    if value is None:
        return None
    return value.strftime(DATE_FORMAT)
