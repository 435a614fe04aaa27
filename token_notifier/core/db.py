"""Database manager for the token notifier - persists tracked tokens."""

from datetime import date
from pathlib import Path
from typing import Optional

import aiosqlite
from instrukt_ai_logging import get_logger

from .dates import format_date
from .errors import StoreError
from .models import Token

logger = get_logger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS tokens (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    expires_at TEXT NOT NULL,
    last_notified TEXT
);
"""


class Db:
    """SQLite-backed token store."""

    def __init__(self, db_path: str) -> None:
        """Initialize database.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._db: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Open the connection and create the tokens table if missing."""
        parent = Path(self.db_path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self.db_path)
            self._db.row_factory = aiosqlite.Row
            await self._db.executescript(_SCHEMA)
            await self._db.commit()
        except (OSError, aiosqlite.Error) as exc:
            await self.close()
            raise StoreError(f"Cannot open token database {self.db_path}: {exc}") from exc

    @property
    def is_open(self) -> bool:
        return self._db is not None

    @property
    def conn(self) -> aiosqlite.Connection:
        """Get database connection, asserting it's initialized.

        Raises:
            RuntimeError: If database not initialized
        """
        if self._db is None:
            raise RuntimeError("Database not initialized - call initialize() first")
        return self._db

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    async def add_token(self, name: str, expires_at: date) -> Token:
        """Insert a token, replacing any existing record with the same name.

        Replacing clears ``last_notified`` so a renewed token starts fresh.
        """
        token = Token(name=name.strip(), expires_at=expires_at)
        try:
            await self.conn.execute(
                "INSERT OR REPLACE INTO tokens (name, expires_at, last_notified) "
                "VALUES (:name, :expires_at, :last_notified)",
                token.to_dict(),
            )
            await self.conn.commit()
        except aiosqlite.Error as exc:
            raise StoreError(f"Failed to add token {token.name!r}: {exc}") from exc
        logger.info("token added", name=token.name, expires_at=format_date(token.expires_at))
        return token

    async def remove_token(self, name: str) -> bool:
        """Delete a token by name. Returns False if it did not exist."""
        name = name.strip()
        try:
            cursor = await self.conn.execute("DELETE FROM tokens WHERE name = ?", (name,))
            await self.conn.commit()
        except aiosqlite.Error as exc:
            raise StoreError(f"Failed to remove token {name!r}: {exc}") from exc
        removed = cursor.rowcount > 0
        logger.info("token removed", name=name, found=removed)
        return removed

    async def get_token(self, name: str) -> Optional[Token]:
        """Get a token by name, or None if not tracked."""
        try:
            cursor = await self.conn.execute(
                "SELECT name, expires_at, last_notified FROM tokens WHERE name = ?",
                (name,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError(f"Failed to read token {name!r}: {exc}") from exc

        if not row:
            return None
        return Token.from_dict(dict(row))

    async def list_all(self) -> list[Token]:
        """Return all tracked tokens, soonest expiry first.

        Rows with an unparseable ``expires_at`` are skipped with a warning.
        """
        try:
            cursor = await self.conn.execute(
                "SELECT name, expires_at, last_notified FROM tokens ORDER BY expires_at, name"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(f"Failed to list tokens: {exc}") from exc

        tokens: list[Token] = []
        for row in rows:
            try:
                tokens.append(Token.from_dict(dict(row)))
            except ValueError as exc:
                logger.warning("skipping malformed token row", name=row["name"], error=str(exc))
        return tokens

    async def set_last_notified(self, name: str, day: date) -> None:
        """Record the date a notification was delivered for ``name``."""
        try:
            cursor = await self.conn.execute(
                "UPDATE tokens SET last_notified = ? WHERE name = ?",
                (format_date(day), name),
            )
            await self.conn.commit()
        except aiosqlite.Error as exc:
            raise StoreError(f"Failed to update last_notified for {name!r}: {exc}") from exc

        if cursor.rowcount == 0:
            raise StoreError(f"Token {name!r} no longer exists")
