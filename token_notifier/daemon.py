"""Notification daemon: runs the notification cycle on a fixed interval.

The first cycle runs immediately on start; afterwards one cycle runs per
interval. Shutdown is cooperative: the stop event is honoured between cycles,
so an in-progress cycle always completes before the daemon exits.
"""

from __future__ import annotations

import asyncio
import signal
from datetime import date, timedelta
from typing import AsyncIterator

from instrukt_ai_logging import get_logger

from token_notifier.config import NotifierSettings, require_telegram
from token_notifier.core.cycle import CycleReport, NotificationCycle
from token_notifier.core.dates import Clock, SystemClock
from token_notifier.core.db import Db
from token_notifier.core.errors import ConfigurationError
from token_notifier.core.protocols import Notifier
from token_notifier.notifications import TelegramNotifier

logger = get_logger(__name__)

_STOP_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class IntervalScheduler:
    """Ordered trigger source: fire now, then once every ``interval``.

    Waiting between triggers ends early when ``stop_event`` is set, in which
    case iteration stops.
    """

    def __init__(self, interval: timedelta) -> None:
        if interval.total_seconds() <= 0:
            raise ConfigurationError(f"Check interval must be positive, got {interval.total_seconds()}s")
        self.interval = interval

    async def ticks(self, stop_event: asyncio.Event) -> AsyncIterator[int]:
        tick = 0
        while not stop_event.is_set():
            yield tick
            tick += 1
            if await self._wait(stop_event):
                return

    async def _wait(self, stop_event: asyncio.Event) -> bool:
        """Sleep one interval; return True if stopped while waiting."""
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self.interval.total_seconds())
        except TimeoutError:
            return False
        return True


class DaemonLoop:
    """Drive the notification cycle until told to stop."""

    def __init__(self, cycle: NotificationCycle, clock: Clock | None = None) -> None:
        self.cycle = cycle
        self.clock = clock or SystemClock()

    async def run(self, interval: timedelta, threshold_days: int, stop_event: asyncio.Event) -> int:
        """Run cycles until ``stop_event`` is set. Returns the number of cycles run.

        Raises:
            ConfigurationError: If interval or threshold are invalid (before any cycle runs).
        """
        if threshold_days < 0:
            raise ConfigurationError(f"Notification threshold must be >= 0, got {threshold_days}")
        scheduler = IntervalScheduler(interval)

        logger.info(
            "notification daemon started",
            interval_s=interval.total_seconds(),
            threshold_days=threshold_days,
        )

        cycles = 0
        async for _ in scheduler.ticks(stop_event):
            today = self.clock.today()
            try:
                await self.cycle.run_cycle(today, threshold_days)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.exception("notification cycle failed; waiting for next interval", error=str(exc))
            cycles += 1

        logger.info("notification daemon stopped", cycles=cycles)
        return cycles


class StoreOpeningCycle(NotificationCycle):
    """Notification cycle that opens its database on demand.

    An unreachable store fails the cycle with ``StoreError`` instead of the
    daemon start, so the open is retried on the next interval.
    """

    def __init__(self, db: Db, notifier: Notifier, *, notifier_timeout_s: float) -> None:
        super().__init__(db, notifier, notifier_timeout_s=notifier_timeout_s)
        self.db = db

    async def run_cycle(self, today: date, threshold_days: int, *, dry_run: bool = False) -> CycleReport:
        if not self.db.is_open:
            await self.db.initialize()
            logger.info("token database opened", path=self.db.db_path)
        return await super().run_cycle(today, threshold_days, dry_run=dry_run)


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    """Set the stop event on SIGINT/SIGTERM."""

    def signal_handler(signum: int) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s signal, finishing current cycle...", sig_name)
        stop_event.set()

    loop = asyncio.get_running_loop()
    for signum in _STOP_SIGNALS:
        loop.add_signal_handler(signum, signal_handler, signum)


def _remove_signal_handlers() -> None:
    loop = asyncio.get_running_loop()
    for signum in _STOP_SIGNALS:
        loop.remove_signal_handler(signum)


async def run_daemon(settings: NotifierSettings, *, stop_event: asyncio.Event | None = None) -> int:
    """Build the Telegram notifier and run until stopped.

    The database is opened by the first cycle; failures to open it are logged
    and retried every interval.

    Raises:
        ConfigurationError: On missing credentials or invalid settings.
    """
    bot_token, chat_id = require_telegram(settings)
    owns_signals = stop_event is None
    if stop_event is None:
        stop_event = asyncio.Event()
        _install_signal_handlers(stop_event)

    notifier = TelegramNotifier(bot_token, chat_id, timeout_s=settings.notifier_timeout_seconds)
    db = Db(settings.database_path)
    try:
        cycle = StoreOpeningCycle(db, notifier, notifier_timeout_s=settings.notifier_timeout_seconds)
        loop = DaemonLoop(cycle)
        await loop.run(
            timedelta(seconds=settings.check_interval_seconds),
            settings.notification_threshold_days,
            stop_event,
        )
    finally:
        await db.close()
        if owns_signals:
            _remove_signal_handlers()
    return 0
