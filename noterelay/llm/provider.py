"""Chat-completion interface used for link summaries.

``Summarizer`` only needs one call, ``chat()``, so any endpoint that can
answer a system + user prompt can back it. ``OpenAIProvider`` is the one
implementation shipped.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


# ════════════════════════════════════════════════════════
# Provider errors. Raised after the retry executor gives up,
# so the relay can drop the summary and keep the article.
# ════════════════════════════════════════════════════════

class LLMError(Exception):
    """Base class for summary provider errors."""
    pass

class LLMRateLimitError(LLMError):
    """429 on every attempt."""
    pass

class LLMAuthError(LLMError):
    """401/403: the API key was refused."""
    pass

class LLMBadRequestError(LLMError):
    """400: usually an unknown model name or an oversized article."""
    pass

class LLMEmptyResponseError(LLMError):
    """The completion had no text, or the body was not a completion at all."""
    pass


@dataclass
class ChatMessage:
    role: str           # 'system' or 'user' for summaries
    content: str


@dataclass
class ChatResponse:
    content: str
    model: str
    input_tokens: int = 0     # logged with each summary
    output_tokens: int = 0


class LLMProvider(ABC):
    """Something that turns a prompt into one completion."""

    @abstractmethod
    async def chat(
        self,
        messages: list[ChatMessage],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> ChatResponse:
        """Return the completion for ``messages``.

        ``model=None`` means the provider's configured model. Raises an
        ``LLMError`` subclass when no usable text comes back.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Short label used in log lines."""
        ...
