"""Outbound notification delivery."""

from .telegram import TelegramNotifier, send_telegram_message

__all__ = ["TelegramNotifier", "send_telegram_message"]
