"""token-notifier: track token expiration dates and alert via Telegram."""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path
from typing import Sequence

from instrukt_ai_logging import get_logger

from token_notifier import __version__
from token_notifier.config import NotifierSettings, load_env_file, load_settings, require_telegram
from token_notifier.core.cycle import CycleReport, NotificationCycle
from token_notifier.core.dates import SystemClock, parse_date
from token_notifier.core.db import Db
from token_notifier.core.errors import ConfigurationError, TokenNotifierError
from token_notifier.core.evaluator import days_remaining
from token_notifier.core.models import Token
from token_notifier.daemon import run_daemon
from token_notifier.logging_config import setup_logging
from token_notifier.notifications import TelegramNotifier

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="token-notifier",
        description="Track token expiration dates and send Telegram alerts before they expire.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--db", default=None, help="Path to the SQLite token database.")
    parser.add_argument("--config", type=Path, default=None, help="Optional YAML settings file.")
    parser.add_argument("--log-level", default=None, help="Log level override (e.g. DEBUG).")

    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Add a new token to track.")
    add.add_argument("name", help="Unique token name.")
    add.add_argument("expires_at", help="Expiration date (YYYY-MM-DD).")

    remove = sub.add_parser("remove", help="Remove a token from tracking.")
    remove.add_argument("name", help="Token name.")

    sub.add_parser("list", help="List all tracked tokens.")

    check = sub.add_parser("check", help="Run a single notification cycle now.")
    check.add_argument("--dry-run", action="store_true", help="Report due tokens without sending.")

    sub.add_parser("daemon", help="Start the notification daemon.")
    return parser


def format_token_table(tokens: Sequence[Token], today: date) -> str:
    """Render tracked tokens as a fixed-width table."""
    lines = [
        "Tracked Tokens:",
        f"{'Name':<20} {'Expires':<15} {'Days Left':<10} {'Last Notified'}",
        "-" * 60,
    ]
    for token in tokens:
        last = token.last_notified.isoformat() if token.last_notified else "Never"
        remaining = days_remaining(today, token.expires_at)
        lines.append(f"{token.name:<20} {token.expires_at.isoformat():<15} {remaining:<10} {last}")
    return "\n".join(lines)


def format_report(report: CycleReport) -> str:
    lines = [report.summary()]
    if report.notified_names:
        lines.append("Notified: " + ", ".join(report.notified_names))
    if report.failed_names:
        lines.append("Failed: " + ", ".join(report.failed_names))
    return "\n".join(lines)


async def _add(settings: NotifierSettings, name: str, raw_expires_at: str) -> int:
    expires_at = parse_date(raw_expires_at)
    if not name.strip():
        raise ValueError("Token name must not be empty")

    db = Db(settings.database_path)
    await db.initialize()
    try:
        token = await db.add_token(name, expires_at)
    finally:
        await db.close()
    print(f"Token '{token.name}' added successfully!")
    return EXIT_OK


async def _remove(settings: NotifierSettings, name: str) -> int:
    name = name.strip()
    db = Db(settings.database_path)
    await db.initialize()
    try:
        removed = await db.remove_token(name)
    finally:
        await db.close()

    if not removed:
        print(f"Token '{name}' not found.", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Token '{name}' removed successfully!")
    return EXIT_OK


async def _list(settings: NotifierSettings) -> int:
    db = Db(settings.database_path)
    await db.initialize()
    try:
        tokens = await db.list_all()
    finally:
        await db.close()
    print(format_token_table(tokens, SystemClock().today()))
    return EXIT_OK


async def _check(settings: NotifierSettings, dry_run: bool) -> int:
    if dry_run:
        notifier = TelegramNotifier("", "")
    else:
        bot_token, chat_id = require_telegram(settings)
        notifier = TelegramNotifier(bot_token, chat_id, timeout_s=settings.notifier_timeout_seconds)

    db = Db(settings.database_path)
    await db.initialize()
    try:
        cycle = NotificationCycle(db, notifier, notifier_timeout_s=settings.notifier_timeout_seconds)
        report = await cycle.run_cycle(
            SystemClock().today(),
            settings.notification_threshold_days,
            dry_run=dry_run,
        )
    finally:
        await db.close()

    print(format_report(report))
    return EXIT_FAILURE if report.failed else EXIT_OK


async def _dispatch(args: argparse.Namespace, settings: NotifierSettings) -> int:
    if args.command == "add":
        return await _add(settings, args.name, args.expires_at)
    if args.command == "remove":
        return await _remove(settings, args.name)
    if args.command == "list":
        return await _list(settings)
    if args.command == "check":
        return await _check(settings, args.dry_run)
    if args.command == "daemon":
        print("Starting token expiration notifier daemon...")
        print(f"Checking every {settings.check_interval_seconds} seconds")
        print(f"Notification threshold: {settings.notification_threshold_days} days")
        return await run_daemon(settings)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_env_file()
    setup_logging(level=args.log_level)

    try:
        settings = load_settings(config_path=args.config, overrides={"database_path": args.db})
        return asyncio.run(_dispatch(args, settings))
    except ConfigurationError as e:
        logger.error("configuration error", error=str(e))
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except TokenNotifierError as e:
        logger.error("command failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
