"""Unit tests for tokenizer.py - line events and inline span parsing."""

import pytest

from streamdown.events import (
    BlockquoteEnd,
    BlockquoteLine,
    BlockquoteStart,
    Bold,
    Code,
    CodeBlockEnd,
    CodeBlockLine,
    CodeBlockStart,
    EmptyLine,
    Footnote,
    Heading,
    HorizontalRule,
    Image,
    InlineElements,
    Italic,
    Link,
    ListBullet,
    ListEnd,
    ListItem,
    Newline,
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
from streamdown.tokenizer import InlineParser, LineTokenizer


def _feed(lines):
    tok = LineTokenizer()
    events = []
    for line in lines:
        events.extend(tok.parse_line(line))
    events.extend(tok.finalize())
    return events


# ─── InlineParser ────────────────────────────────────────────────────────────


class TestInlineParser:
    @pytest.fixture
    def parser(self):
        return InlineParser()

    def test_plain(self, parser):
        assert parser.parse("hello world") == [Text("hello world")]

    def test_emphasis(self, parser):
        assert parser.parse("a **b** *c*") == [Text("a "), Bold("b"), Text(" "), Italic("c")]

    def test_code_and_strike(self, parser):
        assert parser.parse("`x` ~~y~~") == [Code("x"), Text(" "), Strikeout("y")]

    def test_link_and_image(self, parser):
        assert parser.parse("[t](http://u) ![alt](i.png)") == [
            Link("t", "http://u"),
            Text(" "),
            Image("alt", "i.png"),
        ]

    def test_image_inside_link_becomes_link_text(self, parser):
        assert parser.parse("[![logo](l.png)](http://u)") == [Link("logo", "http://u")]

    def test_underline(self, parser):
        assert parser.parse("<u>under</u>") == [Underline("under")]

    def test_footnote(self, parser):
        assert parser.parse("see[^1] more") == [Text("see"), Footnote("[^1]"), Text(" more")]

    def test_entities_left_encoded(self, parser):
        assert parser.parse("a &amp; b") == [Text("a &amp; b")]

    def test_empty(self, parser):
        assert parser.parse("") == []


# ─── LineTokenizer ───────────────────────────────────────────────────────────


def test_paragraph_line():
    assert _feed(["plain"]) == [InlineElements((Text("plain"),)), Newline()]


def test_empty_line():
    assert _feed([""]) == [EmptyLine()]


@pytest.mark.parametrize(
    "line, level, content",
    [("# Title", 1, "Title"), ("### Sub", 3, "Sub"), ("## Closed ##", 2, "Closed")],
)
def test_heading(line, level, content):
    assert _feed([line]) == [Heading(level=level, content=content)]


def test_hashtag_without_space_is_text():
    events = _feed(["#hashtag"])
    assert isinstance(events[0], InlineElements)


def test_code_block():
    assert _feed(["```python", "# not a heading", "", "```"]) == [
        CodeBlockStart(language="python"),
        CodeBlockLine("# not a heading"),
        CodeBlockLine(""),
        CodeBlockEnd(),
    ]


def test_code_block_without_language():
    assert _feed(["~~~", "x", "~~~"]) == [CodeBlockStart(), CodeBlockLine("x"), CodeBlockEnd()]


def test_unclosed_code_block_closed_by_finalize():
    assert _feed(["```", "x"]) == [CodeBlockStart(), CodeBlockLine("x"), CodeBlockEnd()]


@pytest.mark.parametrize(
    "line, expected",
    [
        ("- a", ListItem(0, ListBullet.DASH, "a")),
        ("  * b", ListItem(1, ListBullet.ASTERISK, "b")),
        ("+ c", ListItem(0, ListBullet.PLUS, "c")),
        ("+--- d", ListItem(0, ListBullet.PLUS_EXPAND, "d")),
        ("12. e", ListItem(0, ListBullet.ORDERED, "e", number=12)),
        ("    1) f", ListItem(2, ListBullet.ORDERED, "f", number=1)),
    ],
)
def test_list_items(line, expected):
    tok = LineTokenizer()
    assert tok.parse_line(line) == [expected]


def test_list_end_before_following_paragraph():
    events = _feed(["- a", "- b", "after"])
    assert events[:3] == [
        ListItem(0, ListBullet.DASH, "a"),
        ListItem(0, ListBullet.DASH, "b"),
        ListEnd(),
    ]
    assert events[-1] == Newline()


@pytest.mark.parametrize("line", ["---", "***", "- - -", "___"])
def test_horizontal_rule_not_list(line):
    assert _feed([line]) == [HorizontalRule()]


def test_table():
    assert _feed(["| a | b |", "|---|:--:|", "| 1 | 2 |", ""]) == [
        TableHeader(("a", "b")),
        TableSeparator(),
        TableRow(("1", "2")),
        TableEnd(),
        EmptyLine(),
    ]


def test_table_closed_by_finalize():
    assert _feed(["| a |"])[-1] == TableEnd()


def test_blockquote():
    assert _feed(["> hi", "> more", "after"]) == [
        BlockquoteStart(depth=1),
        BlockquoteLine("hi"),
        BlockquoteLine("more"),
        BlockquoteEnd(),
        InlineElements((Text("after"),)),
        Newline(),
    ]


def test_nested_blockquote_depth():
    assert _feed([">> deep"])[:2] == [BlockquoteStart(depth=2), BlockquoteLine("deep")]


def test_think_block():
    assert _feed(["<think>", "**raw** text", "</think>"]) == [
        ThinkBlockStart(),
        ThinkBlockLine("**raw** text"),
        ThinkBlockEnd(),
    ]


def test_finalize_closes_everything_once():
    tok = LineTokenizer()
    tok.parse_line("> quote")
    assert tok.finalize() == [BlockquoteEnd()]
    assert tok.finalize() == []


def test_carriage_return_stripped():
    assert _feed(["# Title\r"]) == [Heading(level=1, content="Title")]
