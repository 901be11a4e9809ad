"""Telegram channel adapter."""

import logging
from typing import Optional

from telegram import BotCommand, Message, Update
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from ..relay import IncomingFile, NoteRelay
from ..retry import RetryExecutor, exponential_backoff
from .entities import styled_text_from_message
from .errors import classify_error

logger = logging.getLogger("noterelay.telegram")

STATUS_SAVING = "⏳ Received, saving..."
STATUS_SAVED = "✅ Saved"
STATUS_FAILED = "❌ Save failed"


class TelegramChannel:
    """Telegram bot adapter for noterelay.

    Only messages from ``owner_id`` are relayed; everything else is logged
    and dropped without a reply.
    """

    def __init__(self, relay: NoteRelay, bot_token: str, owner_id: int):
        self.relay = relay
        self.bot_token = bot_token
        self.owner_id = owner_id
        self.app: Optional[Application] = None
        self.running = False

    def _register_handlers(self):
        """Register all command and message handlers."""
        self.app.add_handler(CommandHandler("start", self._cmd_start))
        self.app.add_handler(CommandHandler("help", self._cmd_help))
        # Everything else from the owner becomes a note, including other commands
        # and captioned media; /start and /help are matched above first
        self.app.add_handler(MessageHandler(
            filters.TEXT | filters.CAPTION | filters.PHOTO | filters.Document.ALL,
            self._handle_message,
        ))
        # Error handler
        self.app.add_error_handler(self._handle_error)

    async def start(self):
        """Start the Telegram bot."""
        self.app = Application.builder().token(self.bot_token).build()

        self._register_handlers()

        logger.info("Starting Telegram bot...")
        # getMe can time out on a flaky network
        init_retry = RetryExecutor(max_attempts=5, base_delay=2.0, backoff=exponential_backoff, logger=logger)
        await init_retry.run(self.app.initialize)
        await self.app.start()
        await self.app.updater.start_polling(allowed_updates=["message"])

        # Register bot commands menu (the "/" button in Telegram)
        await self.app.bot.set_my_commands([
            BotCommand("start", "Check the bot is listening"),
            BotCommand("help", "What gets saved"),
        ])

        self.running = True
        logger.info(f"Telegram bot started, relaying messages from user {self.owner_id}.")

    async def stop(self):
        """Stop the Telegram bot."""
        self.running = False
        if self.app:
            # start() may have failed part way; only undo what actually ran
            if self.app.updater and self.app.updater.running:
                await self.app.updater.stop()
            if self.app.running:
                await self.app.stop()
            await self.app.shutdown()
            logger.info("Telegram bot stopped.")

    def _is_owner(self, update: Update) -> bool:
        user = update.effective_user
        return user is not None and user.id == self.owner_id

    # ── Message handlers ─────────────────────────────────────

    async def _handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Relay text, photos and documents to the notes server."""
        msg = update.message
        if not msg:
            return
        if not self._is_owner(update):
            user = update.effective_user
            logger.info(f"Ignoring message from unauthorized user {user.id if user else 'unknown'}")
            return

        logger.info(f"Message {msg.message_id}: text={len(msg.text or msg.caption or '')} chars, "
                    f"document={bool(msg.document)}, photo={bool(msg.photo)}")

        status = await msg.reply_text(STATUS_SAVING, do_quote=True)

        try:
            result = await self.relay.relay(styled_text_from_message(msg), self._collect_files(msg))
        except Exception as e:
            logger.error(f"Error relaying message {msg.message_id}: {e}", exc_info=True)
            await self._set_status(msg, status, classify_error(e))
            return

        await self._set_status(msg, status, STATUS_SAVED if result.saved else STATUS_FAILED)

    def _collect_files(self, msg: Message) -> list[IncomingFile]:
        """Describe the message's document or largest photo for the relay."""
        if msg.document:
            doc = msg.document
            return [IncomingFile(
                file_name=doc.file_name or doc.file_unique_id,
                mime_type=doc.mime_type or "application/octet-stream",
                size=doc.file_size or 0,
                download=lambda: self._download(doc),
            )]
        if msg.photo:
            # Telegram sends several sizes; the last one is the largest
            photo = msg.photo[-1]
            return [IncomingFile(
                file_name=f"{photo.file_unique_id}.jpg",
                mime_type="image/jpeg",
                size=photo.file_size or 0,
                download=lambda: self._download(photo),
            )]
        return []

    @staticmethod
    async def _download(media) -> bytearray:
        tg_file = await media.get_file()
        return await tg_file.download_as_bytearray()

    async def _set_status(self, msg: Message, status: Message, text: str):
        """Edit the status reply; send a new reply if the edit fails."""
        try:
            await status.edit_text(text)
        except TelegramError as e:
            logger.warning(f"Could not edit status message: {e}")
            await msg.reply_text(text)

    # ── Commands ─────────────────────────────────────────────

    async def _cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not self._is_owner(update):
            return
        await update.message.reply_text("👋 Ready. Send me text, links, photos or files and I'll save them as notes.")

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not self._is_owner(update):
            return
        lines = [
            "Everything you send is saved as a note:",
            "• text keeps its formatting (bold, links, code...)",
            "• photos and documents become attachments",
        ]
        if self.relay.reader:
            lines.append("• a message that is just a link saves the article")
        if self.relay.summarizer:
            lines.append("• articles are summarized by AI")
        if self.relay.publisher:
            lines.append("• full articles are published to Telegraph")
        await update.message.reply_text("\n".join(lines))

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Log errors raised outside the message handler's own try block."""
        logger.error(f"Telegram error: {context.error}", exc_info=context.error)
