"""Communication sub-core — Telegram message handling.

- Entities: StyledText model built from Telegram text + entity spans
- Markdown: entity spans → escaped Markdown for notes
- Formatting: Markdown → Telegraph HTML for long-form pages
- Errors: exception → short user-facing message
- Telegram: the bot channel itself (imported directly, not re-exported)
"""

from .entities import EntitySpan, StyledText, has_formatting, styled_text_from_message
from .markdown import MarkdownSerializer, escape_markdown_v2, message_to_markdown, to_markdown

__all__ = [
    # Entities
    "EntitySpan",
    "StyledText",
    "has_formatting",
    "styled_text_from_message",
    # Markdown
    "MarkdownSerializer",
    "escape_markdown_v2",
    "message_to_markdown",
    "to_markdown",
]
