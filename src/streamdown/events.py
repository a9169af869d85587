"""Markup event vocabulary produced by the tokenizer.

// The class IS the type: renderers dispatch on the event class, never on a
// string tag. Every event is a frozen value; the render pipeline only reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ─── Inline elements ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InlineElement:
    """Base class for one inline span."""


@dataclass(frozen=True)
class Text(InlineElement):
    text: str


@dataclass(frozen=True)
class Bold(InlineElement):
    text: str


@dataclass(frozen=True)
class Italic(InlineElement):
    text: str


@dataclass(frozen=True)
class BoldItalic(InlineElement):
    text: str


@dataclass(frozen=True)
class Underline(InlineElement):
    text: str


@dataclass(frozen=True)
class Strikeout(InlineElement):
    text: str


@dataclass(frozen=True)
class Code(InlineElement):
    text: str


@dataclass(frozen=True)
class Link(InlineElement):
    text: str
    url: str


@dataclass(frozen=True)
class Image(InlineElement):
    alt: str
    url: str


@dataclass(frozen=True)
class Footnote(InlineElement):
    """Footnote reference; text is the literal marker, e.g. "[^1]"."""

    text: str


# ─── Block events ────────────────────────────────────────────────────────────


class ListBullet(Enum):
    """Bullet kind of a list item."""

    DASH = "-"
    ASTERISK = "*"
    PLUS = "+"
    PLUS_EXPAND = "+---"
    ORDERED = "ordered"


@dataclass(frozen=True)
class ParseEvent:
    """Base class for all tokenizer events."""


@dataclass(frozen=True)
class TextEvent(ParseEvent):
    text: str


@dataclass(frozen=True)
class InlineCode(ParseEvent):
    text: str


@dataclass(frozen=True)
class BoldEvent(ParseEvent):
    text: str


@dataclass(frozen=True)
class ItalicEvent(ParseEvent):
    text: str


@dataclass(frozen=True)
class BoldItalicEvent(ParseEvent):
    text: str


@dataclass(frozen=True)
class UnderlineEvent(ParseEvent):
    text: str


@dataclass(frozen=True)
class StrikeoutEvent(ParseEvent):
    text: str


@dataclass(frozen=True)
class LinkEvent(ParseEvent):
    text: str
    url: str


@dataclass(frozen=True)
class ImageEvent(ParseEvent):
    alt: str
    url: str


@dataclass(frozen=True)
class FootnoteEvent(ParseEvent):
    text: str


@dataclass(frozen=True)
class InlineElements(ParseEvent):
    """A paragraph line already split into inline spans."""

    elements: tuple[InlineElement, ...]


@dataclass(frozen=True)
class Heading(ParseEvent):
    level: int
    content: str


@dataclass(frozen=True)
class CodeBlockStart(ParseEvent):
    language: str | None = None


@dataclass(frozen=True)
class CodeBlockLine(ParseEvent):
    line: str


@dataclass(frozen=True)
class CodeBlockEnd(ParseEvent):
    pass


@dataclass(frozen=True)
class ListItem(ParseEvent):
    """One list item. number is set only for ORDERED bullets."""

    indent: int
    bullet: ListBullet
    content: str
    number: int | None = None


@dataclass(frozen=True)
class ListEnd(ParseEvent):
    pass


@dataclass(frozen=True)
class TableHeader(ParseEvent):
    cells: tuple[str, ...]


@dataclass(frozen=True)
class TableRow(ParseEvent):
    cells: tuple[str, ...]


@dataclass(frozen=True)
class TableSeparator(ParseEvent):
    pass


@dataclass(frozen=True)
class TableEnd(ParseEvent):
    pass


@dataclass(frozen=True)
class BlockquoteStart(ParseEvent):
    depth: int = 1


@dataclass(frozen=True)
class BlockquoteLine(ParseEvent):
    text: str


@dataclass(frozen=True)
class BlockquoteEnd(ParseEvent):
    pass


@dataclass(frozen=True)
class ThinkBlockStart(ParseEvent):
    pass


@dataclass(frozen=True)
class ThinkBlockLine(ParseEvent):
    text: str


@dataclass(frozen=True)
class ThinkBlockEnd(ParseEvent):
    pass


@dataclass(frozen=True)
class HorizontalRule(ParseEvent):
    pass


@dataclass(frozen=True)
class EmptyLine(ParseEvent):
    pass


@dataclass(frozen=True)
class Newline(ParseEvent):
    pass
