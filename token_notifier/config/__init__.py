"""Configuration management.

Settings are resolved explicitly by the entrypoints (no import-time globals):

    from token_notifier.config import load_settings
    settings = load_settings()
"""

from token_notifier.config.loader import load_env_file, load_settings, require_telegram
from token_notifier.config.schema import NotifierSettings

__all__ = ["NotifierSettings", "load_env_file", "load_settings", "require_telegram"]
