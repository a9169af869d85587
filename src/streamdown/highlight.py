"""Pygments-backed syntax highlighting for fenced code lines.

The renderer asks a Highlighter for a per-line function when a code block
opens and drops it when the block closes. Lines are highlighted one at a
time, so constructs spanning several lines (block comments, docstrings) are
colored per line only.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

LineHighlighter = Callable[[str], str]

# Code themes per background, same split as the theme presets.
CODE_THEMES = {
    "dark": "github-dark",
    "light": "friendly",
}


class Highlighter(Protocol):
    """Resolves a fence language tag to a line highlighter, or None."""

    def __call__(self, language: str | None) -> LineHighlighter | None: ...


class PygmentsHighlighter:
    """Highlighter using pygments lexers and a 256-color terminal formatter."""

    def __init__(self, style: str = CODE_THEMES["dark"]):
        self._formatter = Terminal256Formatter(style=style)
        self._lexers: dict[str, Lexer | None] = {}

    def _lexer(self, language: str) -> Lexer | None:
        key = language.lower()
        if key not in self._lexers:
            try:
                self._lexers[key] = get_lexer_by_name(key, stripnl=False, ensurenl=False)
            except ClassNotFound:
                logger.debug("no lexer for code language %r", language)
                self._lexers[key] = None
        return self._lexers[key]

    def __call__(self, language: str | None) -> LineHighlighter | None:
        if not language:
            return None
        lexer = self._lexer(language)
        if lexer is None:
            return None
        formatter = self._formatter

        def highlight_line(line: str) -> str:
            return highlight(line, lexer, formatter).rstrip("\n")

        return highlight_line
