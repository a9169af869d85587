"""Inline span rendering: one run of inline markup → one styled string."""

from __future__ import annotations

import html
from collections.abc import Iterable

from streamdown.colors import IMAGE_MARKER, OSC8_CLOSE, UNDERLINE_OFF, UNDERLINE_ON, osc8_open
from streamdown.events import (
    Bold,
    BoldItalic,
    Code,
    Footnote,
    Image,
    InlineElement,
    Italic,
    Link,
    Strikeout,
    Text,
    Underline,
)
from streamdown.text import HARD_SPACE
from streamdown.theme import Theme
from streamdown.tokenizer import InlineParser, InlineTokenizer

_default_parser: InlineParser | None = None


def _parser() -> InlineParser:
    global _default_parser
    if _default_parser is None:
        _default_parser = InlineParser()
    return _default_parser


def decode_entities(text: str) -> str:
    """Decode HTML entities (&amp;, &lt;, &#39; ...)."""
    return html.unescape(text)


def render_element(element: InlineElement, theme: Theme, hard_spaces: bool = False) -> str:
    """Render one inline element.

    With hard_spaces, spaces inside inline code become HARD_SPACE so a later
    text_wrap keeps the span literal.
    """
    if isinstance(element, Text):
        return decode_entities(element.text)

    if isinstance(element, Bold):
        return theme.bold.apply(decode_entities(element.text))

    if isinstance(element, Italic):
        return theme.italic.apply(decode_entities(element.text))

    if isinstance(element, BoldItalic):
        # Bold inside italic so the italic reset is the innermost one.
        return theme.italic.apply(theme.bold.apply(decode_entities(element.text)))

    if isinstance(element, Strikeout):
        return theme.strikethrough.apply(decode_entities(element.text))

    if isinstance(element, Underline):
        return UNDERLINE_ON + decode_entities(element.text) + UNDERLINE_OFF

    if isinstance(element, Code):
        code = element.text.replace(" ", HARD_SPACE) if hard_spaces else element.text
        return theme.code.apply(code)

    if isinstance(element, Link):
        return (
            osc8_open(element.url)
            + theme.link.apply(decode_entities(element.text))
            + OSC8_CLOSE
            + " "
            + theme.link_url.apply("({})".format(element.url))
        )

    if isinstance(element, Image):
        return "[{} {}]".format(IMAGE_MARKER, element.alt)

    if isinstance(element, Footnote):
        return element.text

    # Unknown element types degrade to nothing rather than aborting the line.
    return ""


def render_inline_elements(
    elements: Iterable[InlineElement],
    theme: Theme,
    hard_spaces: bool = False,
) -> str:
    """Render pre-parsed inline elements to one styled string."""
    return "".join(render_element(el, theme, hard_spaces) for el in elements)


def render_inline_content(
    content: str,
    theme: Theme,
    parser: InlineTokenizer | None = None,
    hard_spaces: bool = False,
) -> str:
    """Parse and render one inline-markup string.

    Pure: the only effect is building the returned string.
    """
    elements = (parser or _parser()).parse(content)
    return render_inline_elements(elements, theme, hard_spaces)
