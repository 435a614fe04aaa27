"""Constants shared across the token notifier."""

# Storage
DEFAULT_DB_PATH = "token_notifier.db"
DATE_FORMAT = "%Y-%m-%d"

# Scheduling defaults (user-configurable)
DEFAULT_THRESHOLD_DAYS = 1
DEFAULT_CHECK_INTERVAL_SECONDS = 3600
DEFAULT_NOTIFIER_TIMEOUT_SECONDS = 10.0

# Telegram Bot API
TELEGRAM_API_BASE = "https://api.telegram.org"
TELEGRAM_MESSAGE_MAX_LENGTH = 4000  # Bot API limit is 4096, keep headroom
