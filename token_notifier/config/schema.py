from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from token_notifier.constants import (
    DEFAULT_CHECK_INTERVAL_SECONDS,
    DEFAULT_DB_PATH,
    DEFAULT_NOTIFIER_TIMEOUT_SECONDS,
    DEFAULT_THRESHOLD_DAYS,
)


class NotifierSettings(BaseModel):
    """Validated runtime settings for the notifier daemon and CLI."""

    model_config = ConfigDict(extra="allow")

    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    notification_threshold_days: int = Field(default=DEFAULT_THRESHOLD_DAYS, ge=0)
    check_interval_seconds: int = Field(default=DEFAULT_CHECK_INTERVAL_SECONDS, gt=0)
    notifier_timeout_seconds: float = Field(default=DEFAULT_NOTIFIER_TIMEOUT_SECONDS, gt=0)
    database_path: str = DEFAULT_DB_PATH

    @field_validator("telegram_bot_token", "telegram_chat_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        """Treat empty strings from .env files as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("database_path must not be empty")
        return v
