"""Allow ``python -m token_notifier``."""

from token_notifier.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
