"""Pytest configuration for token notifier tests."""

import logging
from dataclasses import replace
from datetime import date
from typing import Sequence

import pytest

try:
    import instrukt_ai_logging

    def _noop_configure_logging(*_args, **_kwargs):  # type: ignore[no-untyped-def]
        return None

    instrukt_ai_logging.configure_logging = _noop_configure_logging  # type: ignore[assignment]
    logging.getLogger("token_notifier").handlers.clear()
    logging.getLogger().handlers.clear()
except Exception:
    pass

from token_notifier.core.errors import NotifierError, StoreError  # noqa: E402
from token_notifier.core.models import Token  # noqa: E402


def pytest_collection_modifyitems(config, items):
    """Set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))


class InMemoryTokenStore:
    """Dict-backed TokenStore for cycle and daemon tests."""

    def __init__(self, tokens: Sequence[Token] = ()) -> None:
        self.tokens: dict[str, Token] = {token.name: token for token in tokens}
        self.fail_list = False
        self.fail_updates_for: set[str] = set()
        self.list_calls = 0

    def add(self, name: str, expires_at: date, last_notified: date | None = None) -> Token:
        token = Token(name=name, expires_at=expires_at, last_notified=last_notified)
        self.tokens[name] = token
        return token

    async def list_all(self) -> list[Token]:
        self.list_calls += 1
        if self.fail_list:
            raise StoreError("store unreachable")
        return list(self.tokens.values())

    async def set_last_notified(self, name: str, day: date) -> None:
        if name in self.fail_updates_for:
            raise StoreError(f"write failed for {name}")
        if name not in self.tokens:
            raise StoreError(f"Token {name!r} no longer exists")
        self.tokens[name] = replace(self.tokens[name], last_notified=day)


class RecordingNotifier:
    """Notifier that records messages and fails on demand."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.fail_when: set[str] = set()

    async def send(self, message: str) -> None:
        if any(marker in message for marker in self.fail_when):
            raise NotifierError("delivery rejected")
        self.sent.append(message)


@pytest.fixture
def store() -> InMemoryTokenStore:
    return InMemoryTokenStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def today() -> date:
    return date(2025, 1, 15)
