"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from noterelay.retry import RetryExecutor, is_transient_error


def make_response(status_code: int = 200, json_data=None, text: str = "", method: str = "POST",
                  url: str = "https://notes.example.test/api") -> httpx.Response:
    """Real httpx.Response bound to a request, so raise_for_status() works."""
    request = httpx.Request(method, url)
    if json_data is not None:
        return httpx.Response(status_code, json=json_data, request=request)
    return httpx.Response(status_code, text=text, request=request)


@pytest.fixture
def no_sleep():
    """Sleep stand-in that records requested delays instead of waiting."""
    delays: list[float] = []

    async def _sleep(seconds: float):
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


@pytest.fixture
def fast_retry(no_sleep):
    """Production retry policy without real waiting."""
    return RetryExecutor(sleep=no_sleep, should_retry=is_transient_error)


@pytest.fixture
def mock_httpx():
    """Patch httpx.AsyncClient; yields the client used inside ``async with``."""
    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = AsyncMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client_cls.return_value = mock_client
        mock_client.client_cls = mock_client_cls
        yield mock_client
