"""noterelay core — turns one incoming message into one note."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from .communication.entities import StyledText, has_formatting
from .communication.markdown import MarkdownSerializer
from .config import RelaySettings
from .errors import EntityValidationError, FileTooLargeError
from .llm.summary import Summarizer
from .notes import Attachment, NoteResult, NotesClient
from .retry import RetryExecutor, is_transient_error
from .tools.telegraph import TelegraphPublisher
from .tools.web_fetch import JinaReader, ReadResult, is_single_url

logger = logging.getLogger("noterelay.relay")

# Telegram Bot API file download limit: 20MB
MAX_DOWNLOAD_BYTES = 20 * 1024 * 1024


@dataclass
class IncomingFile:
    """A file attached to the message, not yet downloaded."""
    file_name: str
    mime_type: str
    size: int
    download: Callable[[], Awaitable[bytes]]


def compose_note(article: ReadResult, summary: Optional[str] = None, page_url: Optional[str] = None) -> str:
    """Build note content for a shared link.

    With a summary the note is the summary plus a source link, otherwise the
    full extracted article. A Telegraph link is appended when available.
    """
    if summary:
        parts = [summary, f"[{article.title}]({article.url})"]
    else:
        parts = [article.markdown]
    if page_url:
        parts.append(f"[Full text on Telegraph]({page_url})")
    return "\n\n".join(parts)


class NoteRelay:
    """Render, enrich, upload and save.

    Reader, summarizer and publisher are optional; when one is missing its
    step is skipped.
    """

    def __init__(
        self,
        notes: NotesClient,
        reader: Optional[JinaReader] = None,
        summarizer: Optional[Summarizer] = None,
        publisher: Optional[TelegraphPublisher] = None,
        serializer: Optional[MarkdownSerializer] = None,
        retry: Optional[RetryExecutor] = None,
    ):
        self.notes = notes
        self.reader = reader
        self.summarizer = summarizer
        self.publisher = publisher
        self.serializer = serializer or MarkdownSerializer()
        self._retry = retry or RetryExecutor(logger=logger, should_retry=is_transient_error)

    @classmethod
    def from_settings(cls, settings: RelaySettings) -> "NoteRelay":
        """Wire up clients according to the feature switches in settings."""
        def make_retry(name: str) -> RetryExecutor:
            return RetryExecutor(
                max_attempts=settings.retry_max_attempts,
                base_delay=settings.retry_base_delay,
                logger=logging.getLogger(f"noterelay.{name}"),
                should_retry=is_transient_error,
            )

        notes = NotesClient(
            settings.api_url,
            settings.api_token,
            note_type=settings.note_type,
            timeout=settings.http_timeout,
            retry=make_retry("notes"),
        )

        reader = None
        if settings.enable_jina:
            reader = JinaReader(
                token=settings.jina_token,
                keep_images=settings.jina_keep_images,
                timeout=settings.http_timeout,
                retry=make_retry("tools.web_fetch"),
            )

        summarizer = None
        if settings.enable_ai:
            if not settings.openai_key:
                logger.warning("AI summaries enabled but NOTERELAY_OPENAI_KEY is empty.")
            from .llm.openai import OpenAIProvider
            provider = OpenAIProvider(
                api_key=settings.openai_key,
                chat_model=settings.openai_model,
                base_url=settings.openai_url,
                timeout=max(settings.http_timeout, 120.0),
                retry=make_retry("llm.openai"),
            )
            summarizer = Summarizer(
                provider,
                language=settings.summary_language,
                max_chars=settings.summary_max_chars,
            )

        publisher = None
        if settings.enable_telegraph:
            publisher = TelegraphPublisher(
                short_name=settings.telegraph_short_name,
                access_token=settings.telegraph_access_token,
                retry=make_retry("tools.telegraph"),
            )

        if (summarizer or publisher) and not reader:
            logger.warning("Summaries/Telegraph need the reader; set NOTERELAY_ENABLE_JINA=true.")

        return cls(notes, reader=reader, summarizer=summarizer, publisher=publisher,
                   retry=make_retry("relay"))

    def render_content(self, styled: StyledText) -> str:
        """Markdown when the text carries formatting, raw text otherwise.

        Malformed entities fall back to the raw text; the message is still
        worth saving.
        """
        if not has_formatting(styled):
            return styled.text
        try:
            return self.serializer.serialize(styled)
        except EntityValidationError as e:
            logger.warning(f"Entity conversion failed, saving raw text: {e}")
            return styled.text

    async def enrich_url(self, url: str) -> Optional[str]:
        """Read, summarize and publish a shared link.

        Returns None when the reader is disabled or failed. Summary and
        Telegraph failures only drop their part of the note.
        """
        if not self.reader:
            return None

        try:
            article = await self.reader.read(url)
        except Exception as e:
            logger.error(f"Link enrichment failed for {url}: {type(e).__name__}: {e}", exc_info=True)
            return None

        summary = None
        if self.summarizer:
            try:
                summary = await self.summarizer.summarize(article.markdown)
            except Exception as e:
                logger.error(f"Summary skipped for {url}: {type(e).__name__}: {e}")

        page_url = None
        if self.publisher:
            try:
                page_url = await self.publisher.publish(article.title, article.content, source_url=article.url)
            except Exception as e:
                logger.error(f"Telegraph publish skipped for {url}: {type(e).__name__}: {e}", exc_info=True)

        return compose_note(article, summary, page_url)

    async def upload(self, incoming: IncomingFile) -> Attachment:
        """Download a Telegram file and upload it to the notes server."""
        if incoming.size > MAX_DOWNLOAD_BYTES:
            raise FileTooLargeError(incoming.size, MAX_DOWNLOAD_BYTES)

        data = bytes(await self._retry.run(incoming.download))
        logger.info(f"Downloaded {incoming.file_name}: {len(data)} bytes")
        return await self.notes.upload_file(incoming.file_name, data, incoming.mime_type)

    async def relay(self, styled: StyledText, files: Sequence[IncomingFile] = ()) -> NoteResult:
        """Save one message as a note and return the upsert result."""
        content = self.render_content(styled)

        if is_single_url(styled.text):
            enriched = await self.enrich_url(styled.text.strip())
            if enriched:
                content = enriched

        attachments = [await self.upload(f) for f in files]

        return await self.notes.upsert_note(content, attachments)
