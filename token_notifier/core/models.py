"""Data model for tracked tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping

from typing_extensions import TypedDict

from .dates import format_date, parse_stored_date


class TokenRow(TypedDict):
    """Serialized token as stored in the ``tokens`` table."""

    name: str
    expires_at: str
    last_notified: str | None


@dataclass(frozen=True)
class Token:
    """A named credential with a known expiration date."""

    name: str
    expires_at: date
    last_notified: date | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Token name must not be empty")
        if not isinstance(self.expires_at, date):
            raise ValueError("expires_at must be a date")
        if self.last_notified is not None and not isinstance(self.last_notified, date):
            raise ValueError("last_notified must be a date or None")

    def to_dict(self) -> TokenRow:
        return {
            "name": self.name,
            "expires_at": format_date(self.expires_at),
            "last_notified": format_date(self.last_notified),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Token:
        """Build a token from a database row.

        Raises:
            ValueError: If ``expires_at`` is missing or unparseable.
        """
        expires_at = parse_stored_date(data.get("expires_at"))
        if expires_at is None:
            raise ValueError(f"Token {data.get('name')!r} has no valid expires_at")
        return cls(
            name=str(data.get("name") or ""),
            expires_at=expires_at,
            last_notified=parse_stored_date(data.get("last_notified")),
        )
