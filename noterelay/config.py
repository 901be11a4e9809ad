"""noterelay configuration management."""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger("noterelay.config")


class RelaySettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Telegram
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token")
    user_id: Optional[int] = Field(default=None, description="Only messages from this Telegram user are relayed")

    # Notes backend (Blinko)
    api_url: str = Field(default="https://blink.example.com", description="Notes API base URL")
    api_token: str = Field(default="", description="Notes API bearer token")
    note_type: int = Field(default=0, description="Note type sent on upsert (0 = flash note)")

    # Feature switches
    enable_ai: bool = Field(default=False, description="Summarize shared links with an LLM")
    enable_jina: bool = Field(default=False, description="Extract shared links with Jina Reader")
    enable_telegraph: bool = Field(default=False, description="Publish extracted articles to Telegraph")

    # OpenAI-compatible endpoint
    openai_url: str = Field(default="https://api.openai.com/v1", description="OpenAI-compatible base URL")
    openai_key: str = Field(default="", description="OpenAI API key")
    openai_model: str = Field(default="gpt-3.5-turbo", description="Chat model used for summaries")
    summary_language: str = Field(default="English", description="Language the summary is written in")
    summary_max_chars: int = Field(default=4000, description="Content is truncated to this many chars before summarizing")

    # Jina Reader
    jina_token: str = Field(default="", description="Jina Reader API token")
    jina_keep_images: bool = Field(default=False, description="Keep images in extracted content")

    # Telegraph
    telegraph_short_name: str = Field(default="noterelay", description="Telegraph account short name")
    telegraph_access_token: Optional[str] = Field(default=None, description="Reuse an existing Telegraph account")

    # Outbound calls
    retry_max_attempts: int = Field(default=3, description="Attempts per outbound call")
    retry_base_delay: float = Field(default=1.0, description="Seconds; wait after attempt n is n * base delay")
    http_timeout: float = Field(default=60.0, description="Per-request timeout in seconds")

    # Logging
    log_file: str = Field(default="~/noterelay.log", description="Main log file")
    error_log_file: str = Field(default="error.log", description="ERROR-level log file")

    model_config = {"env_prefix": "NOTERELAY_", "env_file": ".env", "extra": "ignore"}


def load_settings() -> RelaySettings:
    """Load settings from environment."""
    settings = RelaySettings()

    if not settings.api_token:
        logger.warning("NOTERELAY_API_TOKEN is empty — the notes API will likely reject uploads.")
    if settings.api_url and not settings.api_url.startswith("https://"):
        logger.warning(
            f"Notes API URL {settings.api_url} is not https — the bearer token "
            "will be sent in clear text."
        )

    return settings
