"""Publish long articles as Telegraph pages."""

import html
import logging
from typing import Optional

from telegraph.aio import Telegraph

from ..communication.formatting import markdown_to_telegraph_html
from ..retry import RetryExecutor, is_transient_error

logger = logging.getLogger("noterelay.tools.telegraph")

# Telegraph rejects titles longer than this
MAX_TITLE_LENGTH = 256


class TelegraphPublisher:
    """Create Telegraph pages from Markdown.

    The account is created lazily on first publish unless an access token
    is supplied, and reused for every later page.
    """

    def __init__(
        self,
        short_name: str = "noterelay",
        access_token: Optional[str] = None,
        author_name: Optional[str] = None,
        retry: Optional[RetryExecutor] = None,
        client: Optional[Telegraph] = None,
    ):
        self.short_name = short_name
        self.author_name = author_name or short_name
        self._telegraph = client or Telegraph(access_token=access_token)
        self._has_account = bool(access_token)
        self._retry = retry or RetryExecutor(logger=logger, should_retry=is_transient_error)

    async def _ensure_account(self):
        if self._has_account:
            return
        await self._telegraph.create_account(short_name=self.short_name, author_name=self.author_name)
        self._has_account = True
        logger.info(f"Telegraph account created ({self.short_name})")

    async def publish(self, title: str, markdown: str, source_url: Optional[str] = None) -> str:
        """Create a page and return its public URL."""
        title = (title or "Untitled").strip()[:MAX_TITLE_LENGTH]
        html_content = markdown_to_telegraph_html(markdown)
        if source_url:
            html_content += f'<p><a href="{html.escape(source_url)}">Source</a></p>'

        async def _create() -> str:
            await self._ensure_account()
            response = await self._telegraph.create_page(
                title=title,
                html_content=html_content,
                author_name=self.author_name,
                author_url=source_url,
            )
            return response["url"]

        url = await self._retry.run(_create)
        logger.info(f"Telegraph page published: {url}")
        return url
