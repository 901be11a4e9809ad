"""Web fetch: extract readable content from a URL through Jina Reader."""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from ..errors import ReaderError
from ..retry import RetryExecutor, is_transient_error

logger = logging.getLogger("noterelay.tools.web_fetch")

JINA_READER_URL = "https://r.jina.ai/"

_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)


def is_single_url(text: Optional[str]) -> bool:
    """True when the whole message is one http(s) URL."""
    if not text:
        return False
    return bool(_URL_RE.match(text.strip()))


@dataclass
class ReadResult:
    title: str
    content: str
    url: str

    @property
    def markdown(self) -> str:
        """Title heading, body, and a link back to the source."""
        return f"# {self.title}\n\n{self.content}\n\n[{self.title}]({self.url})"


class JinaReader:
    """Client for the Jina Reader API (``GET https://r.jina.ai/<url>``)."""

    def __init__(
        self,
        token: str = "",
        keep_images: bool = False,
        base_url: str = JINA_READER_URL,
        timeout: float = 60.0,
        retry: Optional[RetryExecutor] = None,
    ):
        self.token = token
        self.keep_images = keep_images
        self.base_url = base_url
        self.timeout = timeout
        self._retry = retry or RetryExecutor(logger=logger, should_retry=is_transient_error)

    def _get_headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if not self.keep_images:
            headers["X-Retain-Images"] = "none"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def read(self, url: str) -> ReadResult:
        """Fetch ``url`` through the reader and return its title, body and canonical URL.

        Raises:
            ReaderError: the reader answered without usable content.
            httpx.HTTPError: the request failed on every attempt.
        """
        url = url.strip()
        if not url.startswith(("http://", "https://")):
            raise ReaderError("URL must start with http:// or https://")

        async def _get() -> dict:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                resp = await client.get(f"{self.base_url}{url}", headers=self._get_headers())
                resp.raise_for_status()
                return resp.json()

        try:
            payload = await self._retry.run(_get)
        except Exception as e:
            logger.error(f"Error reading URL {url}: {type(e).__name__}: {e}")
            raise

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or not data.get("content"):
            raise ReaderError(f"Reader returned no content for {url}")

        result = ReadResult(
            title=(data.get("title") or url).strip(),
            content=data["content"],
            url=data.get("url") or url,
        )
        logger.info(f"Read {url}: {result.title!r} ({len(result.content)} chars)")
        return result
