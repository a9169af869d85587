"""Unit tests for text.py - display width, escape-aware splitting and wrapping."""

import re

import pytest

from streamdown.colors import OSC8_CLOSE, osc8_open
from streamdown.text import (
    HARD_SPACE,
    WrappedText,
    simple_wrap,
    split_text,
    strip_ansi,
    text_wrap,
    visible_length,
)

_CSI_RE = re.compile(r"\x1b\[[0-9;]*m")

BOLD = "\x1b[1m"
RESET = "\x1b[0m"


# ─── visible_length ──────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", 0),
        ("hello", 5),
        ("日本語", 6),
        ("é", 1),
    ],
)
def test_visible_length_plain(text, expected):
    assert visible_length(text) == expected


def test_visible_length_skips_csi():
    assert visible_length(BOLD + "hi" + RESET) == 2
    assert visible_length("\x1b[38;2;255;0;0mred\x1b[0m") == 3


def test_visible_length_skips_osc_hyperlink():
    link = osc8_open("https://example.com/path") + "docs" + OSC8_CLOSE
    assert visible_length(link) == 4


def test_visible_length_unknown_escape_counts_next_char():
    assert visible_length("\x1bX") == 1
    assert visible_length("a\x1b(b") == 3


def test_visible_length_erase_sequences_terminate():
    assert visible_length("\x1b[2Kab\x1b[Hc\x1b[2J") == 3


@pytest.mark.parametrize(
    "text",
    [
        BOLD + "bold" + RESET + " plain",
        "\x1b[3m\x1b[1mboth" + RESET + RESET,
        osc8_open("https://x.io") + "\x1b[36mlink" + RESET + OSC8_CLOSE,
        "wide 日本 " + BOLD + "字" + RESET,
    ],
)
def test_strip_ansi_preserves_visible_length(text):
    assert visible_length(strip_ansi(text)) == visible_length(text)
    assert "\x1b" not in strip_ansi(text)


# ─── split_text ──────────────────────────────────────────────────────────────


def test_split_text_on_whitespace():
    assert split_text("one  two\tthree\nfour") == ["one", "two", "three", "four"]


def test_split_text_fuses_escapes_to_words():
    words = split_text(BOLD + "bold" + RESET + " plain")
    assert words == [BOLD + "bold" + RESET, "plain"]


def test_split_text_glues_standalone_escape_to_previous_word():
    assert split_text("word " + RESET + " next") == ["word" + RESET, "next"]


def test_split_text_open_escape_attaches_to_last_word():
    assert split_text("word \x1b[1") == ["word\x1b[1"]


def test_split_text_keeps_hyperlink_whole():
    link = osc8_open("https://x.io/a b") + "site" + OSC8_CLOSE
    words = split_text("see " + link)
    assert words[0] == "see"
    assert "".join(words[1:]).endswith(OSC8_CLOSE)


def test_split_text_empty():
    assert split_text("") == []
    assert split_text("   ") == []


# ─── simple_wrap ─────────────────────────────────────────────────────────────


def test_simple_wrap_greedy():
    assert simple_wrap("the quick brown fox", 10) == ["the quick", "brown fox"]


def test_simple_wrap_long_word_own_line():
    lines = simple_wrap("a supercalifragilistic b", 5)
    assert lines == ["a", "supercalifragilistic", "b"]


def test_simple_wrap_never_exceeds_width_except_long_words():
    text = "lorem ipsum dolor sit amet consectetur adipiscing elit sed do"
    for width in range(1, 30):
        for line in simple_wrap(text, width):
            assert len(line) <= width or " " not in line


def test_simple_wrap_zero_width_returns_input():
    assert simple_wrap("a b c", 0) == ["a b c"]


def test_simple_wrap_empty_is_one_empty_line():
    assert simple_wrap("", 10) == [""]


# ─── text_wrap ───────────────────────────────────────────────────────────────


def test_text_wrap_zero_width_yields_no_lines():
    assert text_wrap("some words", 0, "> ", "  ").is_empty()


def test_text_wrap_empty_text():
    assert text_wrap("", 10) == WrappedText.empty()


def test_text_wrap_measures_visible_width():
    text = BOLD + "bold words here" + RESET + " plain"
    wrapped = text_wrap(text, 10)
    assert [strip_ansi(line) for line in wrapped] == ["bold words", "here plain"]


def test_text_wrap_never_splits_csi():
    text = " ".join("\x1b[3{}mword{}\x1b[0m".format(i % 8, i) for i in range(12))
    wrapped = text_wrap(text, 17)
    assert len(wrapped) > 1
    found = []
    for line in wrapped:
        # Whatever remains after removing whole sequences has no stray ESC.
        assert "\x1b" not in _CSI_RE.sub("", line)
        found.extend(_CSI_RE.findall(line))
    assert found == _CSI_RE.findall(text)


def test_text_wrap_prefixes():
    wrapped = text_wrap("aaa bbb ccc", 9, "> ", "  ")
    assert list(wrapped) == ["> aaa bbb", "  ccc"]


def test_text_wrap_prefix_width_excludes_escapes():
    prefix = "\x1b[36m•\x1b[0m "
    wrapped = text_wrap("aaa bbb ccc", 9, prefix, "  ")
    assert [strip_ansi(line) for line in wrapped] == ["• aaa bbb", "  ccc"]


def test_text_wrap_wide_glyphs():
    wrapped = text_wrap("日本 日本 日本", 9)
    assert list(wrapped) == ["日本 日本", "日本"]


def test_text_wrap_oversized_word_gets_own_line():
    wrapped = text_wrap("a abcdefghij b", 4)
    assert list(wrapped) == ["a", "abcdefghij", "b"]


def test_text_wrap_never_breaks_hard_space():
    text = "ab c" + HARD_SPACE + "d" + HARD_SPACE + "e f"
    assert list(text_wrap(text, 4)) == ["ab", "c d e", "f"]


def test_text_wrap_preserves_word_sequence():
    text = "streaming " + BOLD + "markdown" + RESET + " renders as tokens arrive from the model"
    wrapped = text_wrap(text, 12, "* ", "  ")
    words = []
    for line in wrapped:
        words.extend(line[2:].split(" "))
    assert words == split_text(text)
