"""Telegram delivery for token expiration alerts."""

from __future__ import annotations

import httpx
from instrukt_ai_logging import get_logger

from token_notifier.constants import (
    DEFAULT_NOTIFIER_TIMEOUT_SECONDS,
    TELEGRAM_API_BASE,
    TELEGRAM_MESSAGE_MAX_LENGTH,
)
from token_notifier.core.errors import NotifierError

logger = get_logger(__name__)


async def send_telegram_message(
    bot_token: str,
    chat_id: str,
    content: str,
    *,
    timeout_s: float = DEFAULT_NOTIFIER_TIMEOUT_SECONDS,
    api_base: str = TELEGRAM_API_BASE,
) -> str:
    """Send a text message through the Bot API and return its message_id.

    Raises:
        NotifierError: On transport errors, HTTP errors or a non-ok API reply.
    """
    if not bot_token:
        raise NotifierError("Missing Telegram bot token")
    if not chat_id:
        raise NotifierError("Missing Telegram chat id")

    message = content or ""
    if not message.strip():
        raise NotifierError("Notification content is empty")

    text = message[:TELEGRAM_MESSAGE_MAX_LENGTH]
    if len(message) > TELEGRAM_MESSAGE_MAX_LENGTH:
        logger.warning("message truncated", original_len=len(message), max_len=TELEGRAM_MESSAGE_MAX_LENGTH)

    try:
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            response = await client.post(
                f"{api_base}/bot{bot_token}/sendMessage",
                data={
                    "chat_id": chat_id,
                    "text": text,
                    "disable_web_page_preview": "true",
                },
            )
    except httpx.HTTPError as exc:
        raise NotifierError(f"Telegram request failed: {exc.__class__.__name__}: {exc}") from exc

    if response.status_code >= 400:
        try:
            payload = response.json()
            detail = payload.get("description") or response.text[:200]
        except ValueError:
            detail = response.text[:200]
        raise NotifierError(f"Telegram send failed (HTTP {response.status_code}): {detail}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise NotifierError(
            f"Telegram returned non-JSON (HTTP {response.status_code}): {response.text[:200]}"
        ) from exc

    if not payload.get("ok"):
        detail = payload.get("description") or "telegram api error"
        raise NotifierError(f"Telegram send failed: {detail}")

    result = payload.get("result") or {}
    message_id = result.get("message_id")
    logger.info("telegram message sent", chat_id=chat_id, message_id=message_id)
    return str(message_id)


class TelegramNotifier:
    """Notifier that posts every alert to a single Telegram chat."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        timeout_s: float = DEFAULT_NOTIFIER_TIMEOUT_SECONDS,
    ) -> None:
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.timeout_s = timeout_s

    async def send(self, message: str) -> None:
        await send_telegram_message(self.bot_token, self.chat_id, message, timeout_s=self.timeout_s)
