"""Telegram entities → Markdown serializer.

Telegram delivers formatting as (type, offset, length) spans over plain text.
This module turns those spans back into Markdown for the notes backend:

  bold → **t**         italic → _t_          underline → __t__
  strikethrough → ~~t~~  code → `t`          pre → ```lang\\nt\\n```
  spoiler → ||t||      url/text_link → [t](url)
  text_mention → [t](tg://user?id=N)        blockquote → >line per line

Mentions, hashtags, commands, emails etc. render as their plain text, as
does any span type Telegram adds later.

Spans nest. Inner spans are rendered first and their output becomes the
text of the enclosing span, so bold around italic gives **_t_**. Plain text
between spans goes through the escaper.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from telegram.helpers import escape_markdown

from ..errors import EntityValidationError
from .entities import EntitySpan, StyledText, styled_text_from_message, validate_span

# (text, entity_type) → escaped text
Escaper = Callable[[str, Optional[str]], str]

# Entity types whose contents use the restricted escaping rules
_VERBATIM_TYPES = ("code", "pre")


def escape_markdown_v2(text: str, entity_type: Optional[str] = None) -> str:
    """Escape Markdown metacharacters using Telegram's MarkdownV2 rules.

    Inside ``code``/``pre`` only backtick and backslash are escaped. For
    ``text_link`` (link targets) only ``)`` and backslash are escaped.
    """
    return escape_markdown(text, version=2, entity_type=entity_type)


def no_escape(text: str, entity_type: Optional[str] = None) -> str:
    return text


@dataclass
class SpanNode:
    span: EntitySpan
    children: list["SpanNode"] = field(default_factory=list)


def build_span_tree(styled: StyledText) -> list[SpanNode]:
    """Arrange spans into a nesting tree.

    Spans are ordered by start, longer first; spans with identical ranges
    keep their original order, the later one nesting inside the earlier.

    Raises:
        EntityValidationError: a span is out of range, lacks metadata, or
            partially overlaps another span.
    """
    total = styled.utf16_length
    ordered = sorted(
        enumerate(styled.entities),
        key=lambda pair: (pair[1].offset, -pair[1].length, pair[0]),
    )

    roots: list[SpanNode] = []
    stack: list[SpanNode] = []
    for _, span in ordered:
        validate_span(span, total)
        while stack and stack[-1].span.end <= span.offset:
            stack.pop()
        if stack and span.end > stack[-1].span.end:
            parent = stack[-1].span
            raise EntityValidationError(
                f"{span.type} span [{span.offset}, {span.end}) overlaps "
                f"{parent.type} span [{parent.offset}, {parent.end}) without nesting"
            )
        node = SpanNode(span)
        (stack[-1].children if stack else roots).append(node)
        stack.append(node)
    return roots


class MarkdownSerializer:
    """Render StyledText as Markdown."""

    def __init__(self, escaper: Escaper = escape_markdown_v2, mention_scheme: str = "tg"):
        self._escape = escaper
        self.mention_scheme = mention_scheme

    def serialize(self, styled: StyledText) -> str:
        roots = build_span_tree(styled)
        return self._render_range(styled, 0, styled.utf16_length, roots, None)

    def render_span(self, span: EntitySpan, text: str, styled: StyledText) -> str:
        """Wrap already-rendered ``text`` according to ``span.type``."""
        kind = span.type
        if kind == "bold":
            return f"**{text}**"
        if kind == "italic":
            return f"_{text}_"
        if kind == "underline":
            return f"__{text}__"
        if kind == "strikethrough":
            return f"~~{text}~~"
        if kind == "code":
            return f"`{text}`"
        if kind == "pre":
            return f"```{span.language or ''}\n{text}\n```"
        if kind == "spoiler":
            return f"||{text}||"
        if kind in ("url", "text_link"):
            # url entities have no metadata; the span text is the address
            target = span.url or styled.slice(span.offset, span.end)
            return f"[{text}]({self._escape(target, 'text_link')})"
        if kind == "text_mention":
            return f"[{text}]({self.mention_scheme}://user?id={span.user_id})"
        if kind in ("blockquote", "expandable_blockquote"):
            return ">" + text.replace("\n", "\n>")
        return text

    def _render_range(
        self,
        styled: StyledText,
        start: int,
        end: int,
        children: list[SpanNode],
        context_type: Optional[str],
    ) -> str:
        escape_type = context_type if context_type in _VERBATIM_TYPES else None
        parts = []
        pos = start
        for child in children:
            span = child.span
            if span.offset > pos:
                parts.append(self._escape(styled.slice(pos, span.offset), escape_type))
            inner = self._render_range(styled, span.offset, span.end, child.children, span.type)
            parts.append(self.render_span(span, inner, styled))
            pos = span.end
        if pos < end:
            parts.append(self._escape(styled.slice(pos, end), escape_type))
        return "".join(parts)


_default_serializer = MarkdownSerializer()


def to_markdown(styled: StyledText) -> str:
    return _default_serializer.serialize(styled)


def message_to_markdown(message) -> str:
    """Serialize a telegram.Message's text or caption with its entities."""
    return to_markdown(styled_text_from_message(message))
