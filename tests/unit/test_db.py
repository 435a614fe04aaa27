"""Unit tests for the SQLite token store."""

from datetime import date
from pathlib import Path

import aiosqlite
import pytest

from token_notifier.core.db import Db
from token_notifier.core.errors import StoreError
from token_notifier.core.protocols import TokenStore


@pytest.fixture
async def db(tmp_path: Path):
    store = Db(str(tmp_path / "nested" / "tokens.db"))
    await store.initialize()
    yield store
    await store.close()


@pytest.mark.unit
async def test_db_satisfies_token_store_protocol(db: Db) -> None:
    assert isinstance(db, TokenStore)


@pytest.mark.unit
async def test_add_list_and_remove(db: Db) -> None:
    await db.add_token("later", date(2025, 6, 1))
    await db.add_token("sooner", date(2025, 2, 1))

    tokens = await db.list_all()
    assert [t.name for t in tokens] == ["sooner", "later"]
    assert all(t.last_notified is None for t in tokens)

    assert await db.remove_token("sooner") is True
    assert await db.remove_token("sooner") is False
    assert [t.name for t in await db.list_all()] == ["later"]


@pytest.mark.unit
async def test_remove_ignores_surrounding_whitespace(db: Db) -> None:
    await db.add_token(" npm ", date(2025, 6, 1))

    assert await db.remove_token("npm ") is True
    assert await db.list_all() == []


@pytest.mark.unit
async def test_set_last_notified_is_visible_to_next_read(db: Db) -> None:
    await db.add_token("github", date(2025, 1, 16))

    await db.set_last_notified("github", date(2025, 1, 15))

    token = await db.get_token("github")
    assert token is not None
    assert token.last_notified == date(2025, 1, 15)


@pytest.mark.unit
async def test_set_last_notified_for_missing_token_raises(db: Db) -> None:
    with pytest.raises(StoreError, match="no longer exists"):
        await db.set_last_notified("ghost", date(2025, 1, 15))


@pytest.mark.unit
async def test_readding_token_replaces_record_and_clears_last_notified(db: Db) -> None:
    await db.add_token("github", date(2025, 1, 16))
    await db.set_last_notified("github", date(2025, 1, 15))

    await db.add_token("github", date(2026, 1, 16))

    tokens = await db.list_all()
    assert len(tokens) == 1
    assert tokens[0].expires_at == date(2026, 1, 16)
    assert tokens[0].last_notified is None


@pytest.mark.unit
async def test_reads_legacy_rows_and_skips_malformed(db: Db) -> None:
    await db.conn.execute(
        "INSERT INTO tokens (name, expires_at, last_notified) VALUES (?, ?, ?)",
        ("legacy", "2025-01-20", "2025-01-14 08:30:00"),
    )
    await db.conn.execute(
        "INSERT INTO tokens (name, expires_at) VALUES (?, ?)",
        ("broken", "next tuesday"),
    )
    await db.conn.commit()

    tokens = await db.list_all()

    assert [t.name for t in tokens] == ["legacy"]
    assert tokens[0].last_notified == date(2025, 1, 14)


@pytest.mark.unit
async def test_get_missing_token_returns_none(db: Db) -> None:
    assert await db.get_token("nope") is None


@pytest.mark.unit
async def test_uninitialized_db_raises() -> None:
    store = Db("/tmp/never-opened.db")
    with pytest.raises(RuntimeError, match="not initialized"):
        await store.list_all()


@pytest.mark.unit
async def test_sqlite_errors_are_wrapped(db: Db) -> None:
    await db.conn.execute("DROP TABLE tokens")
    await db.conn.commit()

    with pytest.raises(StoreError, match="Failed to list tokens"):
        await db.list_all()
    with pytest.raises(StoreError):
        await db.set_last_notified("github", date(2025, 1, 15))


@pytest.mark.unit
async def test_data_persists_across_connections(tmp_path: Path) -> None:
    path = str(tmp_path / "tokens.db")
    first = Db(path)
    await first.initialize()
    await first.add_token("github", date(2025, 1, 16))
    await first.close()

    async with aiosqlite.connect(path) as conn:
        cursor = await conn.execute("SELECT name, expires_at, last_notified FROM tokens")
        rows = await cursor.fetchall()

    assert rows == [("github", "2025-01-16", None)]
