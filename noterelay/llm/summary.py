"""Article summarization prompt."""

import logging

from .provider import ChatMessage, LLMProvider

logger = logging.getLogger("noterelay.llm.summary")

TRUNCATION_MARKER = "...(content truncated)"

SUMMARY_SYSTEM_PROMPT = """Write a clear, well-structured summary of the web page content you are given. Highlight what matters and leave nothing important out.

Structure:
1. The first line is a short title in '# Title' form.
2. Then one sentence that captures the core of the whole page.
3. Then summarize each main section in the order the page presents it.

Focus:
- Identify the key facts, themes, arguments and conclusions.
- Keep any important data or findings.
- Cover every important aspect of the page.

Style:
- Stay objective and neutral; no opinions.
- Use plain, concise language and avoid jargon.
- Keep the length proportionate: complete but not verbose.
- Do not end with another summary; the one-sentence overview already serves that purpose.
- Write the summary in {language}."""


def truncate_content(content: str, max_chars: int) -> str:
    """Cut content to ``max_chars`` and mark that it was cut."""
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + TRUNCATION_MARKER


class Summarizer:
    """Produce Markdown summaries of extracted articles."""

    def __init__(
        self,
        provider: LLMProvider,
        language: str = "English",
        max_chars: int = 4000,
        max_tokens: int = 2000,
        temperature: float = 0.7,
    ):
        self.provider = provider
        self.language = language
        self.max_chars = max_chars
        self.max_tokens = max_tokens
        self.temperature = temperature

    def build_messages(self, content: str) -> list[ChatMessage]:
        truncated = truncate_content(content, self.max_chars)
        return [
            ChatMessage(role="system", content=SUMMARY_SYSTEM_PROMPT.format(language=self.language)),
            ChatMessage(role="user", content=f"Summarize the following content:\n\n{truncated}"),
        ]

    async def summarize(self, content: str) -> str:
        try:
            response = await self.provider.chat(
                self.build_messages(content),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.error(
                f"Summary failed ({type(e).__name__}: {e}), content length {len(content)}",
                exc_info=True,
            )
            raise
        logger.info(f"Summary generated: {len(content)} → {len(response.content)} chars "
                    f"({response.input_tokens} in / {response.output_tokens} out tokens)")
        return response.content.strip()
