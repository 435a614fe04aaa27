"""Token notifier logging configuration.

Uses the shared InstruktAI logging standard (`instrukt_ai_logging`). Logs are
written to the canonical per-app location
(`$XDG_STATE_HOME/instrukt-ai/token-notifier/token-notifier.log`).
Level is controlled by `TOKEN_NOTIFIER_LOG_LEVEL`.
"""

from __future__ import annotations

import os
from typing import Optional

from instrukt_ai_logging import configure_logging

APP_NAME = "token_notifier"
LOG_LEVEL_ENV = "TOKEN_NOTIFIER_LOG_LEVEL"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure token notifier logging.

    Args:
        level: Optional override for `TOKEN_NOTIFIER_LOG_LEVEL`.
    """
    if level:
        os.environ[LOG_LEVEL_ENV] = level.upper()

    configure_logging(APP_NAME)
