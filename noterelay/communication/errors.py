"""Error classification for user-facing messages."""

import asyncio

import httpx

from ..errors import FileTooLargeError, NotesAPIError


def classify_error(e: Exception) -> str:
    """Classify an exception that escaped the relay into a short chat message.

    Reader, summary and formatting failures never get here; the relay falls
    back to saving what it has. The full exception goes to the log; the user
    only sees this string.
    """
    # 1: Relay-level errors
    if isinstance(e, FileTooLargeError):
        return "⚠️ File too large (max 20 MB for download)."
    if isinstance(e, NotesAPIError):
        return "⚠️ Notes server returned an unexpected response. Save failed."

    # 2: httpx HTTP status errors (notes API, Telegram file download)
    if isinstance(e, httpx.HTTPStatusError):
        code = e.response.status_code
        if code == 429:
            return "⚠️ Rate limited. Please wait a moment and try again."
        if code in (401, 403):
            return "⚠️ Authentication error. Check the API token."
        if code == 413:
            return "⚠️ File too large for the notes server."
        if 500 <= code < 600:
            return "⚠️ Server is having issues. Please try again later."
        return f"⚠️ Server returned HTTP {code}. Please try again later."

    # 3-4: Network / timeout errors
    if isinstance(e, httpx.ConnectError):
        return "⚠️ Cannot connect to the server. Please check connectivity and try again."
    if isinstance(e, (httpx.TimeoutException, asyncio.TimeoutError)):
        return "⚠️ Request timed out. Please try again."

    # 5: Unexpected response shape
    if isinstance(e, (KeyError, IndexError, ValueError)):
        return "⚠️ Unexpected response format. Please try again."

    # 6: Fallback, with the type name
    type_name = type(e).__name__
    return f"⚠️ Something went wrong ({type_name}). Check logs for details."
