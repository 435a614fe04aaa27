"""Protocol definitions for the collaborators of the notification cycle."""

from datetime import date
from typing import Protocol, Sequence, runtime_checkable

from .models import Token


@runtime_checkable
class TokenStore(Protocol):
    """Persisted token set the cycle reads from and writes back to.

    Implementations must provide read-your-writes consistency between
    successive calls within one cycle and serialize writes per token name.
    """

    async def list_all(self) -> Sequence[Token]:
        """Return a snapshot of all tracked tokens.

        Raises:
            StoreError: If the token set cannot be read
        """
        ...

    async def set_last_notified(self, name: str, day: date) -> None:
        """Record that ``name`` was notified on ``day``.

        Raises:
            StoreError: If the update fails or the token no longer exists
        """
        ...


@runtime_checkable
class Notifier(Protocol):
    """Outbound message delivery with explicit success or failure."""

    async def send(self, message: str) -> None:
        """Deliver a rendered message.

        Raises:
            NotifierError: If delivery failed
        """
        ...
