"""Tests for the Jina Reader client and URL detection."""

import httpx
import pytest

from noterelay.errors import ReaderError
from noterelay.tools.web_fetch import JinaReader, ReadResult, is_single_url

from .conftest import make_response


def _reader_body(title="Example", content="Body text", url="https://example.com/post"):
    return {"code": 200, "data": {"title": title, "content": content, "url": url}}


# ── is_single_url ───────────────────────────────────────────

class TestIsSingleUrl:
    @pytest.mark.parametrize("text", [
        "https://example.com",
        "http://example.com/a?b=c",
        "  https://example.com/post  ",
        "HTTPS://EXAMPLE.COM",
    ])
    def test_single_url(self, text):
        assert is_single_url(text)

    @pytest.mark.parametrize("text", [
        None,
        "",
        "see https://example.com",
        "https://a.com https://b.com",
        "ftp://example.com",
        "example.com",
    ])
    def test_not_single_url(self, text):
        assert not is_single_url(text)


# ── ReadResult ──────────────────────────────────────────────

def test_read_result_markdown():
    result = ReadResult(title="Title", content="Body", url="https://e.com")
    assert result.markdown == "# Title\n\nBody\n\n[Title](https://e.com)"


# ── JinaReader ──────────────────────────────────────────────

class TestJinaReader:
    @pytest.mark.asyncio
    async def test_read_success(self, fast_retry, mock_httpx):
        mock_httpx.get.return_value = make_response(200, _reader_body(), method="GET")

        result = await JinaReader(retry=fast_retry).read("https://example.com/post")

        assert result == ReadResult("Example", "Body text", "https://example.com/post")
        assert mock_httpx.get.call_args.args[0] == "https://r.jina.ai/https://example.com/post"

    def test_default_headers_drop_images(self):
        headers = JinaReader()._get_headers()
        assert headers["X-Retain-Images"] == "none"
        assert headers["Accept"] == "application/json"
        assert "Authorization" not in headers

    def test_headers_with_token_and_images(self):
        headers = JinaReader(token="jina", keep_images=True)._get_headers()
        assert headers["Authorization"] == "Bearer jina"
        assert "X-Retain-Images" not in headers

    @pytest.mark.asyncio
    async def test_missing_title_and_url_default_to_input(self, fast_retry, mock_httpx):
        mock_httpx.get.return_value = make_response(200, {"data": {"content": "Body"}}, method="GET")

        result = await JinaReader(retry=fast_retry).read("https://e.com/x")

        assert result.title == "https://e.com/x"
        assert result.url == "https://e.com/x"

    @pytest.mark.asyncio
    async def test_empty_content_raises(self, fast_retry, mock_httpx):
        mock_httpx.get.return_value = make_response(200, _reader_body(content=""), method="GET")

        with pytest.raises(ReaderError):
            await JinaReader(retry=fast_retry).read("https://e.com")

    @pytest.mark.asyncio
    async def test_missing_data_raises(self, fast_retry, mock_httpx):
        mock_httpx.get.return_value = make_response(200, {"code": 422}, method="GET")

        with pytest.raises(ReaderError):
            await JinaReader(retry=fast_retry).read("https://e.com")

    @pytest.mark.asyncio
    async def test_rejects_non_http_url(self, mock_httpx):
        with pytest.raises(ReaderError):
            await JinaReader().read("file:///etc/passwd")
        mock_httpx.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_retries_timeouts(self, fast_retry, mock_httpx):
        mock_httpx.get.side_effect = [
            httpx.ReadTimeout("slow"),
            make_response(200, _reader_body(), method="GET"),
        ]

        result = await JinaReader(retry=fast_retry).read("https://example.com/post")

        assert result.title == "Example"
        assert mock_httpx.get.call_count == 2

    @pytest.mark.asyncio
    async def test_not_found_not_retried(self, fast_retry, mock_httpx):
        mock_httpx.get.return_value = make_response(404, method="GET")

        with pytest.raises(httpx.HTTPStatusError):
            await JinaReader(retry=fast_retry).read("https://e.com")
        assert mock_httpx.get.call_count == 1
