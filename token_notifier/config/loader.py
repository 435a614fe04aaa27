"""Settings loading: .env file, optional YAML file, then environment variables."""

import os
import re
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import load_dotenv
from instrukt_ai_logging import get_logger
from pydantic import ValidationError

from token_notifier.config.schema import NotifierSettings
from token_notifier.core.errors import ConfigurationError

logger = get_logger(__name__)

ENV_PATH_VAR = "TOKEN_NOTIFIER_ENV_PATH"
CONFIG_PATH_VAR = "TOKEN_NOTIFIER_CONFIG_PATH"

# Environment variable -> settings field
ENV_FIELDS: dict[str, str] = {
    "TELEGRAM_BOT_TOKEN": "telegram_bot_token",
    "TELEGRAM_CHAT_ID": "telegram_chat_id",
    "NOTIFICATION_THRESHOLD_DAYS": "notification_threshold_days",
    "CHECK_INTERVAL_SECONDS": "check_interval_seconds",
    "NOTIFIER_TIMEOUT_SECONDS": "notifier_timeout_seconds",
    "TOKEN_NOTIFIER_DB_PATH": "database_path",
}


def expand_env_vars(config: object) -> object:
    """Recursively replace ${VAR} patterns with environment variable values."""
    if isinstance(config, dict):
        return {k: expand_env_vars(v) for k, v in config.items()}
    if isinstance(config, list):
        return [expand_env_vars(item) for item in config]
    if isinstance(config, str):

        def replace_env_var(match: re.Match[str]) -> str:
            return os.getenv(match.group(1), match.group(0))

        return re.sub(r"\$\{([^}]+)\}", replace_env_var, config)
    return config


def load_env_file(path: Optional[Path] = None) -> None:
    """Load a .env file (defaults to ./.env) without overriding real env vars."""
    if path is None:
        env_override = os.getenv(ENV_PATH_VAR)
        path = Path(env_override).expanduser() if env_override else Path.cwd() / ".env"
    if path.exists():
        load_dotenv(path)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read config file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return expand_env_vars(raw)  # type: ignore[return-value]


def load_settings(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, object]] = None,
) -> NotifierSettings:
    """Resolve settings from YAML, environment and explicit overrides.

    Precedence (lowest first): model defaults, YAML file, environment
    variables, ``overrides`` (CLI flags).

    Raises:
        ConfigurationError: If any value is invalid.
    """
    source = os.environ if env is None else env

    if config_path is None and source.get(CONFIG_PATH_VAR):
        config_path = Path(source[CONFIG_PATH_VAR]).expanduser()

    values: dict[str, object] = {}
    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
        values.update(_read_yaml(config_path))

    for env_name, field_name in ENV_FIELDS.items():
        raw = source.get(env_name)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = NotifierSettings.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e

    if settings.model_extra:
        logger.warning("unknown config keys ignored", keys=sorted(settings.model_extra))
    return settings


def require_telegram(settings: NotifierSettings) -> tuple[str, str]:
    """Return (bot_token, chat_id) or raise when either is missing."""
    if not settings.telegram_bot_token:
        raise ConfigurationError("TELEGRAM_BOT_TOKEN environment variable not set")
    if not settings.telegram_chat_id:
        raise ConfigurationError("TELEGRAM_CHAT_ID environment variable not set")
    return settings.telegram_bot_token, settings.telegram_chat_id


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "settings"
        parts.append(f"{loc}: {item.get('msg')}")
    return "Invalid configuration: " + "; ".join(parts)
