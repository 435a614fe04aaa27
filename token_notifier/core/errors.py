"""Exception taxonomy for the token notifier."""


class TokenNotifierError(Exception):
    """Base class for token notifier failures."""


class StoreError(TokenNotifierError):
    """Raised when reading or writing the persisted token set fails."""


class NotifierError(TokenNotifierError):
    """Raised when a notification could not be delivered."""


class ConfigurationError(TokenNotifierError):
    """Raised when threshold, interval or credentials are invalid."""
