"""OpenAI-compatible provider (OpenAI, Groq, Together, etc.)."""

import logging
from typing import Optional

import httpx

from ..retry import RetryExecutor, is_transient_error
from .provider import (
    ChatMessage,
    ChatResponse,
    LLMAuthError,
    LLMBadRequestError,
    LLMEmptyResponseError,
    LLMProvider,
    LLMRateLimitError,
)

logger = logging.getLogger("noterelay.llm.openai")


def _raise_typed(e: httpx.HTTPStatusError):
    """Re-raise an HTTP status error as the matching LLM exception."""
    code = e.response.status_code
    detail = e.response.text[:200]
    if code == 429:
        raise LLMRateLimitError(f"Rate limited: {detail}") from e
    if code in (401, 403):
        raise LLMAuthError(f"HTTP {code}: {detail}") from e
    if code == 400:
        raise LLMBadRequestError(detail) from e
    raise e


class OpenAIProvider(LLMProvider):
    """OpenAI-compatible API provider.

    Works with any OpenAI-compatible endpoint:
    - OpenAI: https://api.openai.com/v1
    - Groq:   https://api.groq.com/openai/v1
    - Together: https://api.together.xyz/v1
    """

    def __init__(
        self,
        api_key: str,
        chat_model: str = "gpt-3.5-turbo",
        base_url: str = "https://api.openai.com/v1",
        provider_name: str = "openai",
        timeout: float = 120.0,
        retry: Optional[RetryExecutor] = None,
    ):
        self.api_key = api_key
        self.chat_model = chat_model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._provider_name = provider_name
        self._retry = retry or RetryExecutor(logger=logger, should_retry=is_transient_error)

    @property
    def name(self) -> str:
        return self._provider_name

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat(
        self,
        messages: list[ChatMessage],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> ChatResponse:
        model = model or self.chat_model
        body: dict = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
        }
        if max_tokens and max_tokens > 0:
            body["max_tokens"] = max_tokens

        logger.debug(f"Request: model={model}, messages={len(messages)}")

        async def _post() -> dict:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=body,
                    headers=self._get_headers(),
                )
                resp.raise_for_status()
                return resp.json()

        try:
            data = await self._retry.run(_post)
        except httpx.HTTPStatusError as e:
            _raise_typed(e)

        if not isinstance(data, dict):
            raise LLMEmptyResponseError(f"{self.name} returned a non-object body (model={model})")

        choices = data.get("choices") or []
        content = ""
        if choices:
            content = (choices[0].get("message") or {}).get("content") or ""
        if not content.strip():
            raise LLMEmptyResponseError(f"{self.name} returned no content (model={model})")

        usage = data.get("usage") or {}
        return ChatResponse(
            content=content,
            model=data.get("model", model),
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
        )
