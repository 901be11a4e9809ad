"""Styled-text model: base string plus entity spans.

Offsets and lengths are in UTF-16 code units, the unit Telegram uses for
MessageEntity. ``StyledText.slice()`` does the conversion so callers never
index the Python string with Telegram offsets directly.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..errors import EntityValidationError

# Span types that wrap their text in markup
STYLE_TYPES = frozenset({
    "bold", "italic", "underline", "strikethrough", "code", "pre", "spoiler",
    "url", "text_link", "text_mention", "blockquote", "expandable_blockquote",
})

# Span types that carry meaning but render as plain text
PASSTHROUGH_TYPES = frozenset({
    "mention", "custom_emoji", "hashtag", "cashtag", "bot_command",
    "phone_number", "email",
})


@dataclass(frozen=True)
class EntitySpan:
    type: str
    offset: int
    length: int
    url: Optional[str] = None
    language: Optional[str] = None
    user_id: Optional[int] = None

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass
class StyledText:
    text: str
    entities: list[EntitySpan] = field(default_factory=list)

    @property
    def utf16_length(self) -> int:
        return len(self.text.encode("utf-16-le")) // 2

    def slice(self, start: int, end: int) -> str:
        """Return the substring covering UTF-16 units [start, end)."""
        raw = self.text.encode("utf-16-le")[start * 2:end * 2]
        try:
            return raw.decode("utf-16-le")
        except UnicodeDecodeError as e:
            raise EntityValidationError(
                f"Range [{start}, {end}) splits a surrogate pair"
            ) from e


def validate_span(span: EntitySpan, text_length: int):
    """Raise EntityValidationError if the span can't be rendered."""
    if span.offset < 0 or span.length <= 0:
        raise EntityValidationError(
            f"{span.type} span has invalid range offset={span.offset} length={span.length}"
        )
    if span.end > text_length:
        raise EntityValidationError(
            f"{span.type} span [{span.offset}, {span.end}) exceeds text length {text_length}"
        )
    if span.type == "text_link" and not span.url:
        raise EntityValidationError("text_link span has no url")
    if span.type == "text_mention" and span.user_id is None:
        raise EntityValidationError("text_mention span has no user id")


def _entity_type(entity) -> str:
    # python-telegram-bot uses a str enum for MessageEntity.type
    value = getattr(entity.type, "value", entity.type)
    return str(value)


def span_from_entity(entity) -> EntitySpan:
    """Convert a telegram.MessageEntity (or anything shaped like one)."""
    user = getattr(entity, "user", None)
    return EntitySpan(
        type=_entity_type(entity),
        offset=entity.offset,
        length=entity.length,
        url=getattr(entity, "url", None),
        language=getattr(entity, "language", None),
        user_id=user.id if user is not None else None,
    )


def styled_text_from_message(message) -> StyledText:
    """Build StyledText from a telegram.Message.

    Uses ``text``/``entities`` when the message has text, otherwise the
    caption of a photo or document. Returns empty text for anything else.
    """
    if message.text:
        text = message.text
        entities = message.entities or ()
    elif message.caption:
        text = message.caption
        entities = message.caption_entities or ()
    else:
        return StyledText(text="")
    return StyledText(text=text, entities=[span_from_entity(e) for e in entities])


def has_formatting(styled: StyledText) -> bool:
    """True when any span changes how the text looks.

    Auto-detected links, mentions and hashtags don't count; a message with
    only those reads the same as plain text.
    """
    return any(s.type in STYLE_TYPES and s.type != "url" for s in styled.entities)
