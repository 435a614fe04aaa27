"""One evaluation pass over all tracked tokens.

The cycle reads a snapshot of the token set, decides per token whether a
notification is due, delivers it through the notifier and records the
delivery date on success. Tokens are processed one at a time and in
isolation: a failure for one token is logged, counted and never stops the
remaining tokens from being evaluated.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date

from instrukt_ai_logging import get_logger

from token_notifier.constants import DEFAULT_NOTIFIER_TIMEOUT_SECONDS

from .errors import NotifierError, StoreError
from .evaluator import days_remaining, is_due
from .messages import render_message
from .models import Token
from .protocols import Notifier, TokenStore

logger = get_logger(__name__)


@dataclass
class CycleReport:
    """Outcome of a single notification cycle."""

    today: date
    evaluated: int = 0
    due: int = 0
    notified: int = 0
    failed: int = 0
    dry_run: bool = False
    notified_names: list[str] = field(default_factory=list)
    failed_names: list[str] = field(default_factory=list)

    def summary(self) -> str:
        prefix = "[dry run] " if self.dry_run else ""
        return (
            f"{prefix}{self.today.isoformat()}: evaluated={self.evaluated} due={self.due} "
            f"notified={self.notified} failed={self.failed}"
        )


class NotificationCycle:
    """Evaluate all tokens once and notify the ones that are due."""

    def __init__(
        self,
        store: TokenStore,
        notifier: Notifier,
        *,
        notifier_timeout_s: float = DEFAULT_NOTIFIER_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.notifier_timeout_s = notifier_timeout_s

    async def run_cycle(self, today: date, threshold_days: int, *, dry_run: bool = False) -> CycleReport:
        """Run one pass for ``today``.

        Raises:
            StoreError: If the token set cannot be read at all.
        """
        tokens = await self.store.list_all()
        report = CycleReport(today=today, dry_run=dry_run)

        for token in tokens:
            report.evaluated += 1
            if not is_due(today, token.expires_at, token.last_notified, threshold_days):
                continue

            report.due += 1
            if dry_run:
                logger.info(
                    "token due (dry run)",
                    name=token.name,
                    days_remaining=days_remaining(today, token.expires_at),
                )
                continue

            try:
                delivered = await self._process_token(token, today)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.exception("unexpected error processing token", name=token.name, error=str(exc))
                delivered = False

            if delivered:
                report.notified += 1
                report.notified_names.append(token.name)
            else:
                report.failed += 1
                report.failed_names.append(token.name)

        logger.info(
            "notification cycle finished",
            today=today.isoformat(),
            evaluated=report.evaluated,
            due=report.due,
            notified=report.notified,
            failed=report.failed,
            dry_run=dry_run,
        )
        return report

    async def _process_token(self, token: Token, today: date) -> bool:
        """Notify about one due token and record the delivery.

        Returns False when delivery or the follow-up store update failed; the
        token keeps its previous ``last_notified`` and is retried next cycle.
        """
        message = render_message(token, today)

        try:
            async with asyncio.timeout(self.notifier_timeout_s):
                await self.notifier.send(message)
        except TimeoutError:
            logger.warning("notification timed out", name=token.name, timeout_s=self.notifier_timeout_s)
            return False
        except NotifierError as exc:
            logger.warning("notification delivery failed; will retry", name=token.name, error=str(exc))
            return False

        try:
            await self.store.set_last_notified(token.name, today)
        except StoreError as exc:
            logger.error(
                "notification sent but store update failed",
                name=token.name,
                error=str(exc),
            )
            return False

        logger.info("token notified", name=token.name, expires_at=token.expires_at.isoformat())
        return True
