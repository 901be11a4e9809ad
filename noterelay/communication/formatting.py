"""Markdown to Telegraph HTML converter.

Telegraph pages accept a limited HTML subset:
  <p>, <br>, <h3>, <h4>, <b>, <i>, <u>, <s>, <code>, <pre>,
  <a href="url">, <img src="url">, <blockquote>, <ul>/<ol>/<li>, <hr>

This module converts the Markdown produced by the reader and the
summarizer into that subset so long articles can be published as pages.
"""

import html as _html
import re


def _escape(text: str) -> str:
    """Escape HTML special characters in plain text segments."""
    return _html.escape(text, quote=True)


_HEADER_RE = re.compile(r'^(#{1,6})\s+(.+)$')
_BULLET_RE = re.compile(r'^\s*[-*+]\s+(.+)$')
_NUMBERED_RE = re.compile(r'^\s*\d+[.)]\s+(.+)$')
_RULE_RE = re.compile(r'^\s*([-*_])(\s*\1){2,}\s*$')


def markdown_to_telegraph_html(text: str) -> str:
    """Convert markdown-formatted text to Telegraph-safe HTML.

    Handles:
    - # / ## headers → <h3>, ### and deeper → <h4>
    - ```code blocks``` and tables → <pre>
    - > quotes → <blockquote>
    - -/* and 1. lists → <ul>/<ol>
    - consecutive lines → one <p> joined with <br>
    - **bold**, _italic_, ~~strike~~, `code`, [text](url), ![alt](src)

    Text outside of these patterns is HTML-escaped for safety.
    """
    if not text:
        return ""

    result = []
    paragraph: list[str] = []
    lines = text.split('\n')
    i = 0

    def flush_paragraph():
        if paragraph:
            result.append('<p>' + '<br>'.join(paragraph) + '</p>')
            paragraph.clear()

    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        # Code block: ```...```
        if stripped.startswith('```'):
            flush_paragraph()
            code_lines = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith('```'):
                code_lines.append(lines[i])
                i += 1
            # Skip closing ```
            if i < len(lines):
                i += 1
            code_content = _escape('\n'.join(code_lines))
            result.append(f'<pre>{code_content}</pre>')
            continue

        # Markdown table: monospace block, separator rows dropped
        if stripped.startswith('|') and '|' in stripped[1:]:
            flush_paragraph()
            table_lines = []
            while i < len(lines) and lines[i].strip().startswith('|'):
                if not re.match(r'^\|[\s\-:|]+\|$', lines[i].strip()):
                    table_lines.append(lines[i])
                i += 1
            if table_lines:
                table_text = _escape('\n'.join(table_lines))
                result.append(f'<pre>{table_text}</pre>')
            continue

        if not stripped:
            flush_paragraph()
            i += 1
            continue

        header = _HEADER_RE.match(stripped)
        if header:
            flush_paragraph()
            tag = 'h3' if len(header.group(1)) <= 2 else 'h4'
            result.append(f'<{tag}>{_format_inline(header.group(2))}</{tag}>')
            i += 1
            continue

        if _RULE_RE.match(stripped):
            flush_paragraph()
            result.append('<hr>')
            i += 1
            continue

        if stripped.startswith('>'):
            flush_paragraph()
            quote_lines = []
            while i < len(lines) and lines[i].strip().startswith('>'):
                quote_lines.append(_format_inline(lines[i].strip()[1:].lstrip()))
                i += 1
            result.append('<blockquote>' + '<br>'.join(quote_lines) + '</blockquote>')
            continue

        for pattern, tag in ((_BULLET_RE, 'ul'), (_NUMBERED_RE, 'ol')):
            if pattern.match(line):
                flush_paragraph()
                items = []
                while i < len(lines):
                    m = pattern.match(lines[i])
                    if not m:
                        break
                    items.append(f'<li>{_format_inline(m.group(1))}</li>')
                    i += 1
                result.append(f'<{tag}>' + ''.join(items) + f'</{tag}>')
                break
        else:
            paragraph.append(_format_inline(stripped))
            i += 1

    flush_paragraph()
    return ''.join(result)


def _format_inline(text: str) -> str:
    """Apply inline markdown formatting to a single line."""
    # Protect code spans first
    segments = []
    code_pattern = re.compile(r'`([^`]+)`')
    last_end = 0

    for match in code_pattern.finditer(text):
        if match.start() > last_end:
            segments.append(('text', text[last_end:match.start()]))
        segments.append(('code', match.group(1)))
        last_end = match.end()

    if last_end < len(text):
        segments.append(('text', text[last_end:]))

    parts = []
    for seg_type, seg_text in segments:
        if seg_type == 'code':
            parts.append(f'<code>{_escape(seg_text)}</code>')
        else:
            parts.append(_format_text_segment(seg_text))

    return ''.join(parts)


def _format_text_segment(text: str) -> str:
    """Apply images, links, bold, italic, underline, strikethrough to a text segment."""
    text = _escape(text)

    # Images before links: ![alt](src) would otherwise match as a link
    text = re.sub(r'!\[([^\]]*)\]\(([^)\s]+)\)', r'<img src="\2">', text)

    text = re.sub(
        r'\[([^\]]+)\]\(([^)\s]+)\)',
        r'<a href="\2">\1</a>',
        text
    )

    # Bold: **text**; __text__ is underline in the serializer's dialect
    text = re.sub(r'\*\*(.+?)\*\*', r'<b>\1</b>', text)
    text = re.sub(r'__(.+?)__', r'<u>\1</u>', text)

    # Italic: *text* or _text_ (but not inside words like file_name)
    text = re.sub(r'(?<!\w)\*([^*]+?)\*(?!\w)', r'<i>\1</i>', text)
    text = re.sub(r'(?<!\w)_([^_]+?)_(?!\w)', r'<i>\1</i>', text)

    text = re.sub(r'~~(.+?)~~', r'<s>\1</s>', text)

    return text
