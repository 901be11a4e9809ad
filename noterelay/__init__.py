"""noterelay — forward Telegram messages to a notes API."""

__version__ = "0.3.0"
