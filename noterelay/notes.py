"""Blinko notes API client.

Two endpoints are used:
  POST /api/file/upload     multipart "file" → {filePath, fileName, type, size}
  POST /api/v1/note/upsert  {content, type, attachments} → {id, ...}
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

import httpx

from .errors import NotesAPIError
from .retry import RetryExecutor, is_transient_error

logger = logging.getLogger("noterelay.notes")


@dataclass
class Attachment:
    path: str
    name: str
    type: str
    size: int


@dataclass
class NoteResult:
    id: Optional[int]
    raw: dict

    @property
    def saved(self) -> bool:
        return self.id is not None


class NotesClient:
    """Upload files and upsert notes on a Blinko-compatible server."""

    def __init__(
        self,
        api_url: str,
        api_token: str,
        note_type: int = 0,
        timeout: float = 60.0,
        retry: Optional[RetryExecutor] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_token = api_token
        self.note_type = note_type
        self.timeout = timeout
        self._retry = retry or RetryExecutor(logger=logger, should_retry=is_transient_error)

    def _get_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_token}"}

    async def upload_file(self, filename: str, data: bytes, content_type: str = "application/octet-stream") -> Attachment:
        """Upload one file and return the attachment record for a note.

        Raises:
            NotesAPIError: the server answered without a file path.
        """
        async def _post() -> dict:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.api_url}/api/file/upload",
                    files={"file": (filename, data, content_type)},
                    headers=self._get_headers(),
                )
                resp.raise_for_status()
                return resp.json()

        try:
            body = await self._retry.run(_post)
        except Exception as e:
            logger.error(f"Error uploading file {filename}: {type(e).__name__}: {e}")
            raise

        if not isinstance(body, dict) or not body.get("filePath"):
            raise NotesAPIError(f"Upload of {filename} returned no filePath: {str(body)[:200]}")

        attachment = Attachment(
            path=body["filePath"],
            name=body.get("fileName") or filename,
            type=body.get("type") or content_type,
            size=int(body.get("size") or len(data)),
        )
        logger.info(f"Uploaded {attachment.name} → {attachment.path} ({attachment.size} bytes)")
        return attachment

    async def upsert_note(self, content: str, attachments: Optional[list[Attachment]] = None) -> NoteResult:
        """Create a note. ``NoteResult.id`` is None when the server stored nothing."""
        payload = {
            "content": content,
            "type": self.note_type,
            "attachments": [asdict(a) for a in attachments or []],
        }

        async def _post() -> dict:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.api_url}/api/v1/note/upsert",
                    json=payload,
                    headers=self._get_headers(),
                )
                resp.raise_for_status()
                return resp.json()

        try:
            body = await self._retry.run(_post)
        except Exception as e:
            logger.error(f"Error sending note to API: {type(e).__name__}: {e}")
            raise

        if not isinstance(body, dict):
            raise NotesAPIError(f"Upsert returned non-object body: {str(body)[:200]}")

        result = NoteResult(id=body.get("id"), raw=body)
        if result.saved:
            logger.info(f"Note saved: id={result.id} ({len(content)} chars, {len(payload['attachments'])} attachments)")
        else:
            logger.warning(f"Upsert returned no id: {str(body)[:200]}")
        return result

    async def ping(self) -> bool:
        """True when the API base URL answers at all (any status below 500)."""
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                resp = await client.get(self.api_url, headers=self._get_headers())
            return resp.status_code < 500
        except httpx.HTTPError as e:
            logger.warning(f"Notes API unreachable: {type(e).__name__}: {e}")
            return False
