"""Tests for the Telegram entities → Markdown serializer."""

import pytest

from noterelay.communication.entities import EntitySpan, StyledText
from noterelay.communication.markdown import (
    MarkdownSerializer,
    build_span_tree,
    escape_markdown_v2,
    no_escape,
    to_markdown,
)
from noterelay.errors import EntityValidationError


def span(kind: str, offset: int, length: int, **kwargs) -> EntitySpan:
    return EntitySpan(type=kind, offset=offset, length=length, **kwargs)


def render(text: str, *spans: EntitySpan, **serializer_kwargs) -> str:
    return MarkdownSerializer(**serializer_kwargs).serialize(StyledText(text, list(spans)))


# ── Plain text ──────────────────────────────────────────────

class TestPlainText:
    def test_no_entities_returns_text(self):
        assert render("hello world") == "hello world"

    def test_no_entities_escapes_metacharacters(self):
        assert render("1.5 + x!") == escape_markdown_v2("1.5 + x!")
        assert render("1.5 + x!") == "1\\.5 \\+ x\\!"

    def test_empty_text(self):
        assert render("") == ""


# ── Single styles ───────────────────────────────────────────

class TestTemplates:
    def test_bold_full_range(self):
        assert render("hello", span("bold", 0, 5)) == "**hello**"

    def test_bold_inside_sentence(self):
        assert render("say hello now", span("bold", 4, 5)) == "say **hello** now"

    def test_italic(self):
        assert render("hi", span("italic", 0, 2)) == "_hi_"

    def test_underline(self):
        assert render("hi", span("underline", 0, 2)) == "__hi__"

    def test_strikethrough(self):
        assert render("hi", span("strikethrough", 0, 2)) == "~~hi~~"

    def test_spoiler(self):
        assert render("secret", span("spoiler", 0, 6)) == "||secret||"

    def test_inline_code_keeps_metacharacters(self):
        assert render("a_b.c", span("code", 0, 5)) == "`a_b.c`"

    def test_inline_code_escapes_backtick(self):
        assert render("a`b", span("code", 0, 3)) == "`a\\`b`"

    def test_pre_with_language(self):
        text = "print(1)"
        assert render(text, span("pre", 0, len(text), language="python")) == "```python\nprint(1)\n```"

    def test_pre_without_language(self):
        assert render("x = 1", span("pre", 0, 5)) == "```\nx = 1\n```"

    def test_blockquote_two_lines(self):
        assert render("a\nb", span("blockquote", 0, 3)) == ">a\n>b"

    def test_expandable_blockquote(self):
        assert render("a\nb", span("expandable_blockquote", 0, 3)) == ">a\n>b"

    def test_text_link(self):
        assert render("click", span("text_link", 0, 5, url="https://example.com")) == "[click](https://example.com)"

    def test_text_link_url_escapes_paren(self):
        result = render("x", span("text_link", 0, 1, url="https://e.com/a)b"))
        assert result == "[x](https://e.com/a\\)b)"

    def test_url_entity_uses_span_text_as_target(self):
        text = "https://example.com"
        assert render(text, span("url", 0, len(text))) == "[https://example\\.com](https://example.com)"

    def test_text_mention(self):
        assert render("Bob", span("text_mention", 0, 3, user_id=42)) == "[Bob](tg://user?id=42)"

    def test_text_mention_custom_scheme(self):
        result = render("Bob", span("text_mention", 0, 3, user_id=42), mention_scheme="app")
        assert result == "[Bob](app://user?id=42)"


# ── Pass-through ────────────────────────────────────────────

class TestPassThrough:
    @pytest.mark.parametrize("kind", [
        "mention", "custom_emoji", "hashtag", "cashtag", "bot_command", "phone_number", "email",
    ])
    def test_known_passthrough_types(self, kind):
        text = "#tag.v2"
        assert render(text, span(kind, 0, len(text))) == render(text)

    def test_unknown_type_matches_unstyled(self):
        text = "future_type!"
        assert render(text, span("sparkle", 0, len(text))) == render(text)

    def test_unknown_type_keeps_inner_styles(self):
        assert render("ab", span("sparkle", 0, 2), span("bold", 0, 1)) == "**a**b"


# ── Nesting ─────────────────────────────────────────────────

class TestNesting:
    def test_bold_containing_italic_renders_inner_first(self):
        # Regression: inner (italic) must wrap before outer (bold)
        assert render("text", span("bold", 0, 4), span("italic", 0, 4)) == "**_text_**"

    def test_same_range_later_span_is_inner(self):
        assert render("text", span("italic", 0, 4), span("bold", 0, 4)) == "_**text**_"

    def test_inner_listed_before_outer(self):
        assert render("some text", span("italic", 5, 4), span("bold", 0, 9)) == "**some _text_**"

    def test_blockquote_with_bold_line(self):
        assert render("a\nb", span("blockquote", 0, 3), span("bold", 2, 1)) == ">a\n>**b**"

    def test_link_with_bold_label(self):
        result = render("go", span("text_link", 0, 2, url="https://e.com"), span("bold", 0, 2))
        assert result == "[**go**](https://e.com)"

    def test_adjacent_spans(self):
        assert render("ab", span("bold", 0, 1), span("italic", 1, 1)) == "**a**_b_"

    def test_text_between_children_is_escaped(self):
        assert render("a.b.c", span("bold", 0, 5), span("italic", 0, 1), span("italic", 4, 1)) == "**_a_\\.b\\._c_**"

    def test_build_span_tree_structure(self):
        styled = StyledText("some text", [span("italic", 5, 4), span("bold", 0, 9)])
        roots = build_span_tree(styled)
        assert len(roots) == 1
        assert roots[0].span.type == "bold"
        assert [c.span.type for c in roots[0].children] == ["italic"]


# ── UTF-16 offsets ──────────────────────────────────────────

class TestUTF16:
    def test_emoji_before_span(self):
        # 😀 is two UTF-16 code units
        assert render("😀 hi", span("bold", 3, 2)) == "😀 **hi**"

    def test_span_covering_emoji(self):
        assert render("a😀b", span("italic", 1, 2)) == "a_😀_b"

    def test_span_splitting_surrogate_pair_is_rejected(self):
        with pytest.raises(EntityValidationError):
            render("😀", span("bold", 0, 1))


# ── Escaper injection ───────────────────────────────────────

class TestEscaper:
    def test_no_escape(self):
        assert render("1.5 + x!", escaper=no_escape) == "1.5 + x!"

    def test_escaper_receives_entity_context(self):
        calls = []

        def recording(text, entity_type=None):
            calls.append((text, entity_type))
            return text

        render("run ls now", span("code", 4, 2), escaper=recording)
        assert ("run ", None) in calls
        assert ("ls", "code") in calls
        assert (" now", None) in calls

    def test_link_target_escaped_as_text_link(self):
        calls = []

        def recording(text, entity_type=None):
            calls.append((text, entity_type))
            return text

        render("x", span("text_link", 0, 1, url="https://e.com"), escaper=recording)
        assert ("https://e.com", "text_link") in calls


# ── Validation ──────────────────────────────────────────────

class TestValidation:
    def test_partial_overlap_rejected(self):
        with pytest.raises(EntityValidationError, match="overlaps"):
            render("abcdef", span("bold", 0, 4), span("italic", 2, 4))

    def test_out_of_range_rejected(self):
        with pytest.raises(EntityValidationError, match="exceeds"):
            render("abc", span("bold", 1, 5))

    def test_negative_offset_rejected(self):
        with pytest.raises(EntityValidationError):
            render("abc", span("bold", -1, 2))

    def test_zero_length_rejected(self):
        with pytest.raises(EntityValidationError):
            render("abc", span("bold", 1, 0))

    def test_text_link_without_url_rejected(self):
        with pytest.raises(EntityValidationError, match="url"):
            render("abc", span("text_link", 0, 3))

    def test_text_mention_without_user_rejected(self):
        with pytest.raises(EntityValidationError, match="user"):
            render("abc", span("text_mention", 0, 3))

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            render("abc", span("bold", 0, 9))


# ── Determinism ─────────────────────────────────────────────

def test_serialization_is_deterministic():
    styled = StyledText(
        "Read the docs at home.",
        [span("bold", 0, 4), span("text_link", 9, 4, url="https://docs.example"), span("italic", 17, 4)],
    )
    assert to_markdown(styled) == to_markdown(styled)
    assert to_markdown(styled) == "**Read** the [docs](https://docs.example) at _home_\\."
