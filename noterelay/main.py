"""noterelay — Main entry point."""

import asyncio
import logging
import os

from .config import RelaySettings, load_settings
from .communication.telegram import TelegramChannel
from .relay import NoteRelay

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("noterelay")


def setup_logging(settings: RelaySettings, debug: bool = False):
    """Console + main log file + ERROR-only error log."""
    formatter = logging.Formatter(LOG_FORMAT)

    error_handler = logging.FileHandler(os.path.expanduser(settings.error_log_file), encoding="utf-8")
    error_handler.setLevel(logging.ERROR)

    handlers = [
        logging.StreamHandler(),                                                          # stderr (console)
        logging.FileHandler(os.path.expanduser(settings.log_file), encoding="utf-8"),     # main log
        error_handler,                                                                    # errors only
    ]
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=logging.INFO, handlers=handlers, force=True)
    if debug:
        logging.getLogger("noterelay").setLevel(logging.DEBUG)
    # httpx logs every request at INFO, including URLs with the bot token
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run(settings: RelaySettings | None = None):
    """Main run loop."""
    settings = settings or load_settings()

    if not settings.telegram_bot_token:
        logger.error("No Telegram bot token configured. Set NOTERELAY_TELEGRAM_BOT_TOKEN.")
        return
    if settings.user_id is None:
        logger.error("No owner configured. Set NOTERELAY_USER_ID to your Telegram user id.")
        return

    relay = NoteRelay.from_settings(settings)
    channel = TelegramChannel(relay, settings.telegram_bot_token, settings.user_id)

    try:
        await channel.start()
        logger.info("noterelay is running. Press Ctrl+C to stop.")
        while channel.running:
            await asyncio.sleep(1)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}", exc_info=True)
    finally:
        await channel.stop()


def main():
    """Entry point."""
    settings = load_settings()
    setup_logging(settings)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Stopped.")


if __name__ == "__main__":
    main()
