"""Incremental line tokenizer: complete lines in, markup events out.

The render pipeline only depends on the two protocols below. LineTokenizer
and InlineParser are the default implementations; any object with the same
methods can be passed to StreamdownRenderer instead.

Inline spans are parsed with markdown-it-py. The ``entity`` rule is turned
off so text reaches the renderer still entity-encoded; decoding is the
renderer's job (and inline code must stay literal).
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from markdown_it import MarkdownIt
from markdown_it.token import Token

from streamdown.events import (
    BlockquoteEnd,
    BlockquoteLine,
    BlockquoteStart,
    Bold,
    BoldItalic,
    Code,
    CodeBlockEnd,
    CodeBlockLine,
    CodeBlockStart,
    EmptyLine,
    Footnote,
    Heading,
    HorizontalRule,
    Image,
    InlineElement,
    InlineElements,
    Italic,
    Link,
    ListBullet,
    ListEnd,
    ListItem,
    Newline,
    ParseEvent,
    Strikeout,
    TableEnd,
    TableHeader,
    TableRow,
    TableSeparator,
    Text,
    ThinkBlockEnd,
    ThinkBlockLine,
    ThinkBlockStart,
    Underline,
)

logger = logging.getLogger(__name__)


class Tokenizer(Protocol):
    """Turns complete lines into markup events.

    parse_line() receives one line without its trailing newline and returns
    the events for it, in order. finalize() closes any construct still open
    at end of stream.
    """

    def parse_line(self, line: str) -> list[ParseEvent]: ...

    def finalize(self) -> list[ParseEvent]: ...


class InlineTokenizer(Protocol):
    """Splits one run of inline markup into inline elements."""

    def parse(self, text: str) -> list[InlineElement]: ...


# ─── Inline parsing ──────────────────────────────────────────────────────────

_FOOTNOTE_RE = re.compile(r"\[\^[^\]\s]+\]")


def _split_footnotes(text: str) -> list[InlineElement]:
    out: list[InlineElement] = []
    pos = 0
    for m in _FOOTNOTE_RE.finditer(text):
        if m.start() > pos:
            out.append(Text(text[pos:m.start()]))
        out.append(Footnote(m.group(0)))
        pos = m.end()
    if pos < len(text):
        out.append(Text(text[pos:]))
    return out


class InlineParser:
    """markdown-it-py backed inline span parser.

    Bold, italic, bold-italic, strikeout (~~), code spans, links, images,
    <u>underline</u> and [^n] footnote markers are recognized. Anything
    unbalanced stays literal text.
    """

    def __init__(self) -> None:
        self._md = MarkdownIt("commonmark").enable("strikethrough").disable("entity")

    def parse(self, text: str) -> list[InlineElement]:
        if not text:
            return []
        tokens = self._md.parseInline(text)
        children: list[Token] = []
        for tok in tokens:
            children.extend(tok.children or [])
        return _coalesce(self._walk(children))

    def _walk(self, children: list[Token]) -> list[InlineElement]:
        out: list[InlineElement] = []
        strong = em = strike = underline = 0
        link_url: str | None = None
        link_text: list[str] = []

        def emit(content: str) -> None:
            if link_url is not None:
                link_text.append(content)
                return
            if not content:
                return
            if underline:
                out.append(Underline(content))
            elif strong and em:
                out.append(BoldItalic(content))
            elif strong:
                out.append(Bold(content))
            elif em:
                out.append(Italic(content))
            elif strike:
                out.append(Strikeout(content))
            else:
                out.extend(_split_footnotes(content))

        for tok in children:
            kind = tok.type
            if kind == "text":
                emit(tok.content)
            elif kind == "strong_open":
                strong += 1
            elif kind == "strong_close":
                strong = max(strong - 1, 0)
            elif kind == "em_open":
                em += 1
            elif kind == "em_close":
                em = max(em - 1, 0)
            elif kind == "s_open":
                strike += 1
            elif kind == "s_close":
                strike = max(strike - 1, 0)
            elif kind == "code_inline":
                if link_url is not None:
                    link_text.append(tok.content)
                else:
                    out.append(Code(tok.content))
            elif kind == "link_open":
                link_url = str(tok.attrGet("href") or "")
                link_text = []
            elif kind == "link_close":
                if link_url is not None:
                    out.append(Link("".join(link_text), link_url))
                link_url = None
                link_text = []
            elif kind == "image":
                if link_url is not None:
                    link_text.append(tok.content)
                else:
                    out.append(Image(tok.content, str(tok.attrGet("src") or "")))
            elif kind in ("softbreak", "hardbreak"):
                emit(" ")
            elif kind == "html_inline":
                tag = tok.content.strip().lower()
                if tag == "<u>":
                    underline += 1
                elif tag == "</u>":
                    underline = max(underline - 1, 0)
                else:
                    emit(tok.content)
            else:
                logger.debug("inline token %s rendered as text", kind)
                emit(tok.content)

        return out


def _coalesce(elements: list[InlineElement]) -> list[InlineElement]:
    """Merge runs of adjacent elements of the same plain-span type."""
    merged: list[InlineElement] = []
    mergeable = (Text, Bold, Italic, BoldItalic, Strikeout, Underline)
    for el in elements:
        prev = merged[-1] if merged else None
        if prev is not None and type(prev) is type(el) and isinstance(el, mergeable):
            merged[-1] = type(el)(prev.text + el.text)
        else:
            merged.append(el)
    return merged


# ─── Block parsing ───────────────────────────────────────────────────────────

_FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})\s*([\w+#.-]*)")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
_HR_RE = re.compile(r"^\s{0,3}([-*_])(?:\s*\1){2,}\s*$")
_PLUS_EXPAND_RE = re.compile(r"^(\s*)\+---\s+(.*)$")
_BULLET_RE = re.compile(r"^(\s*)([-*+])\s+(.*)$")
_ORDERED_RE = re.compile(r"^(\s*)(\d+)[.)]\s+(.*)$")
_QUOTE_RE = re.compile(r"^\s{0,3}((?:>\s?)+)(.*)$")
_TABLE_SEP_RE = re.compile(r"^\s*\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?\s*$")
_THINK_OPEN = "<think>"
_THINK_CLOSE = "</think>"

_BULLETS = {
    "-": ListBullet.DASH,
    "*": ListBullet.ASTERISK,
    "+": ListBullet.PLUS,
}


def _split_cells(line: str) -> tuple[str, ...]:
    body = line.strip()
    if body.startswith("|"):
        body = body[1:]
    if body.endswith("|") and not body.endswith("\\|"):
        body = body[:-1]
    cells = re.split(r"(?<!\\)\|", body)
    return tuple(c.strip().replace("\\|", "|") for c in cells)


class LineTokenizer:
    """Line-at-a-time markdown block recognizer.

    Tracks just enough state to group lines into code blocks, think blocks,
    tables, lists and blockquotes. Every other non-empty line is a paragraph
    line and comes out as InlineElements followed by Newline.
    """

    def __init__(self, inline: InlineTokenizer | None = None) -> None:
        self._inline = inline or InlineParser()
        self._fence: str | None = None
        self._in_think = False
        self._in_table = False
        self._in_list = False
        self._in_quote = False

    def parse_line(self, line: str) -> list[ParseEvent]:
        line = line.rstrip("\r")

        if self._fence is not None:
            return self._code_line(line)
        if self._in_think:
            if line.strip() == _THINK_CLOSE:
                self._in_think = False
                return [ThinkBlockEnd()]
            return [ThinkBlockLine(line)]

        events: list[ParseEvent] = []
        stripped = line.strip()

        if self._in_table:
            if stripped.startswith("|"):
                if _TABLE_SEP_RE.match(stripped):
                    return [TableSeparator()]
                return [TableRow(_split_cells(stripped))]
            self._in_table = False
            events.append(TableEnd())

        quote = _QUOTE_RE.match(line)
        if self._in_quote and quote is None:
            self._in_quote = False
            events.append(BlockquoteEnd())
        if quote is not None:
            if not self._in_quote:
                self._in_quote = True
                events.extend(self._close_list())
                events.append(BlockquoteStart(depth=quote.group(1).count(">")))
            events.append(BlockquoteLine(quote.group(2)))
            return events

        item = self._list_item(line)
        if self._in_list and item is None:
            events.extend(self._close_list())
        if item is not None:
            self._in_list = True
            events.append(item)
            return events

        if not stripped:
            events.append(EmptyLine())
            return events

        fence = _FENCE_RE.match(line)
        if fence is not None:
            self._fence = fence.group(1)
            events.append(CodeBlockStart(language=fence.group(2) or None))
            return events

        if stripped == _THINK_OPEN:
            self._in_think = True
            events.append(ThinkBlockStart())
            return events

        heading = _HEADING_RE.match(line)
        if heading is not None:
            events.append(Heading(level=len(heading.group(1)), content=heading.group(2)))
            return events

        if _HR_RE.match(line):
            events.append(HorizontalRule())
            return events

        if stripped.startswith("|") and stripped.count("|") >= 2:
            self._in_table = True
            events.append(TableHeader(_split_cells(stripped)))
            return events

        events.append(InlineElements(tuple(self._inline.parse(line))))
        events.append(Newline())
        return events

    def finalize(self) -> list[ParseEvent]:
        events: list[ParseEvent] = []
        if self._fence is not None:
            self._fence = None
            events.append(CodeBlockEnd())
        if self._in_think:
            self._in_think = False
            events.append(ThinkBlockEnd())
        if self._in_table:
            self._in_table = False
            events.append(TableEnd())
        if self._in_quote:
            self._in_quote = False
            events.append(BlockquoteEnd())
        events.extend(self._close_list())
        return events

    def _code_line(self, line: str) -> list[ParseEvent]:
        fence = self._fence
        stripped = line.strip()
        if fence and stripped.startswith(fence[0] * len(fence)) and not stripped.strip(fence[0]):
            self._fence = None
            return [CodeBlockEnd()]
        return [CodeBlockLine(line)]

    def _close_list(self) -> list[ParseEvent]:
        if not self._in_list:
            return []
        self._in_list = False
        return [ListEnd()]

    def _list_item(self, line: str) -> ListItem | None:
        # Rules like "- - -" and "***" are not list items.
        if _HR_RE.match(line):
            return None
        m = _PLUS_EXPAND_RE.match(line)
        if m is not None:
            return ListItem(
                indent=len(m.group(1)) // 2, bullet=ListBullet.PLUS_EXPAND, content=m.group(2)
            )
        m = _BULLET_RE.match(line)
        if m is not None:
            return ListItem(
                indent=len(m.group(1)) // 2, bullet=_BULLETS[m.group(2)], content=m.group(3)
            )
        m = _ORDERED_RE.match(line)
        if m is not None:
            return ListItem(
                indent=len(m.group(1)) // 2,
                bullet=ListBullet.ORDERED,
                content=m.group(3),
                number=int(m.group(2)),
            )
        return None
