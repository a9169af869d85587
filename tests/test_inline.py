"""Unit tests for inline.py - inline span rendering."""

from streamdown.colors import OSC8_CLOSE, UNDERLINE_OFF, UNDERLINE_ON, osc8_open
from streamdown.events import (
    Bold,
    BoldItalic,
    Code,
    Footnote,
    Image,
    InlineElement,
    Link,
    Text,
)
from streamdown.inline import render_element, render_inline_content, render_inline_elements
from streamdown.text import strip_ansi


def test_bold_and_italic(theme):
    out = render_inline_content("**bold** and *italic*", theme)
    assert out == theme.bold.apply("bold") + " and " + theme.italic.apply("italic")


def test_plain_text_is_unstyled(theme):
    assert render_inline_content("just words", theme) == "just words"


def test_entities_decoded_in_text(theme):
    assert render_inline_content("fish &amp; chips &lt;3", theme) == "fish & chips <3"


def test_entities_decoded_in_bold(theme):
    assert render_inline_content("**a &amp; b**", theme) == theme.bold.apply("a & b")


def test_code_is_not_decoded(theme):
    out = render_inline_content("`a &amp; b`", theme)
    assert out == theme.code.apply("a &amp; b")


def test_bold_italic_nests_bold_inside_italic(theme):
    out = render_element(BoldItalic("both"), theme)
    assert out == theme.italic.apply(theme.bold.apply("both"))


def test_triple_emphasis_parses_as_bold_italic(theme):
    out = render_inline_content("***both***", theme)
    assert out == theme.italic.apply(theme.bold.apply("both"))


def test_strikethrough(theme):
    assert render_inline_content("~~gone~~", theme) == theme.strikethrough.apply("gone")


def test_underline_uses_fixed_codes(theme):
    assert render_inline_content("<u>under</u>", theme) == UNDERLINE_ON + "under" + UNDERLINE_OFF


def test_link(theme):
    out = render_inline_content("[site](https://x.io)", theme)
    expected = (
        osc8_open("https://x.io")
        + theme.link.apply("site")
        + OSC8_CLOSE
        + " "
        + theme.link_url.apply("(https://x.io)")
    )
    assert out == expected
    assert strip_ansi(out) == "site (https://x.io)"


def test_image_placeholder(theme):
    assert render_inline_content("![a cat](cat.png)", theme) == "[\U0001f5bc a cat]"


def test_footnote_is_literal(theme):
    assert render_element(Footnote("[^1]"), theme) == "[^1]"
    assert render_inline_content("see[^1]", theme) == "see[^1]"


def test_unbalanced_emphasis_stays_literal(theme):
    assert render_inline_content("**oops", theme) == "**oops"


def test_unknown_element_renders_nothing(theme):
    assert render_element(InlineElement(), theme) == ""


def test_render_inline_elements(theme):
    elements = [Text("a "), Bold("b"), Text(" "), Code("c"), Text(" "), Link("d", "u"), Image("e", "f")]
    out = render_inline_elements(elements, theme)
    assert strip_ansi(out) == "a b c d (u)[\U0001f5bc e]"


def test_empty_content(theme):
    assert render_inline_content("", theme) == ""
