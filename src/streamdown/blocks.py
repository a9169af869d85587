"""Block renderers: one structured event → finished display lines.

Every function takes the Theme explicitly and returns plain strings with
embedded escapes; none of them write anywhere.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from streamdown.colors import (
    BOTTOM_LEFT,
    BOTTOM_RIGHT,
    BOTTOM_T,
    BULLET,
    CHECKBOX_CHECKED,
    CHECKBOX_UNCHECKED,
    CROSS,
    H_LINE,
    HR_MAX_WIDTH,
    LEFT_T,
    PLUS_EXPAND_MARKER,
    RESET,
    RIGHT_T,
    THINK_CLOSE,
    THINK_OPEN,
    TOP_LEFT,
    TOP_RIGHT,
    TOP_T,
    V_LINE,
)
from streamdown.events import ListBullet, ListItem
from streamdown.highlight import LineHighlighter
from streamdown.inline import render_inline_content
from streamdown.text import release_hard_spaces, text_wrap, visible_length
from streamdown.theme import Style, Theme
from streamdown.tokenizer import InlineTokenizer


class HeadingAlign(Enum):
    """Placement of level 1–2 headings."""

    LEFT = "left"
    CENTER = "center"


# ─── Headings ────────────────────────────────────────────────────────────────


def render_heading(
    level: int,
    content: str,
    width: int,
    theme: Theme,
    align: HeadingAlign = HeadingAlign.LEFT,
    margin: str = "",
    parser: InlineTokenizer | None = None,
) -> list[str]:
    """Render a heading to one or more lines (no trailing newlines).

    Levels 1 and 2 are preceded by a blank margin line and honour align;
    centering padding is measured on the unstyled text. Levels 3–6 are
    styled in place.
    """
    style = theme.heading(level)
    rendered = render_inline_content(content, theme, parser, hard_spaces=True)
    wrapped = list(text_wrap(rendered, width)) or [release_hard_spaces(rendered)]

    result: list[str] = []
    for i, line in enumerate(wrapped):
        if level > 2:
            result.append(margin + style.apply(line))
            continue
        pad = ""
        if align is HeadingAlign.CENTER:
            pad = " " * max((width - visible_length(line)) // 2, 0)
        prefix = margin + "\n" if i == 0 else ""
        result.append(prefix + margin + pad + style.apply(line))
    return result


# ─── Lists ───────────────────────────────────────────────────────────────────


def _list_marker(item: ListItem, theme: Theme) -> str:
    if item.bullet is ListBullet.ORDERED:
        number = item.number if item.number is not None else 1
        return theme.list_number.apply("{}.".format(number))
    if item.bullet is ListBullet.PLUS_EXPAND:
        return theme.bullet.apply(PLUS_EXPAND_MARKER)
    # DASH / ASTERISK / PLUS and anything unexpected share the bullet glyph.
    return theme.bullet.apply(BULLET)


def _checkbox(content: str, theme: Theme) -> tuple[str, str]:
    """Split a leading GFM task marker off content → (styled box, rest)."""
    head = content[:4]
    if head in ("[ ] ", "[ ]"):
        return theme.checkbox_unchecked.apply(CHECKBOX_UNCHECKED) + " ", content[4:]
    if head.lower() in ("[x] ", "[x]"):
        return theme.checkbox_checked.apply(CHECKBOX_CHECKED) + " ", content[4:]
    return "", content


def render_list_item(
    item: ListItem,
    theme: Theme,
    width: int = 0,
    parser: InlineTokenizer | None = None,
) -> str:
    """Render one list item, newline-terminated.

    Indent is two spaces per nesting level. With a width, long items wrap
    under their content column.
    """
    indent = "  " * max(item.indent, 0)
    marker = _list_marker(item, theme)
    box, content = _checkbox(item.content, theme)
    body = box + render_inline_content(content, theme, parser, hard_spaces=True)

    first_prefix = indent + marker + " "
    if width <= 0:
        return first_prefix + release_hard_spaces(body) + "\n"

    next_prefix = " " * visible_length(first_prefix)
    wrapped = text_wrap(body, width, first_prefix, next_prefix)
    if wrapped.is_empty():
        return first_prefix.rstrip() + "\n"
    return "\n".join(wrapped) + "\n"


# ─── Tables ──────────────────────────────────────────────────────────────────


@dataclass
class TableBuffer:
    """Rows collected between a table's first row and its end signal.

    The first row added is the header.
    """

    rows: list[tuple[str, ...]] = field(default_factory=list)

    def add(self, cells: Sequence[str]) -> None:
        self.rows.append(tuple(cells))

    def flush(self, theme: Theme, parser: InlineTokenizer | None = None) -> list[str]:
        rows, self.rows = self.rows, []
        return render_table(rows, theme, parser)


def column_widths(rows: Sequence[Sequence[str]]) -> list[int]:
    """Max visible width per column across all rows, header included."""
    widths: list[int] = []
    for row in rows:
        for i, cell in enumerate(row):
            w = visible_length(cell)
            if i >= len(widths):
                widths.append(w)
            else:
                widths[i] = max(widths[i], w)
    return widths


def _center(cell: str, width: int) -> str:
    pad = max(width - visible_length(cell), 0)
    left = pad // 2
    return " " * left + cell + " " * (pad - left)


def _border(widths: Sequence[int], left: str, mid: str, right: str, style: Style) -> str:
    return style.apply(left + mid.join(H_LINE * (w + 2) for w in widths) + right)


def render_table(
    rows: Sequence[Sequence[str]],
    theme: Theme,
    parser: InlineTokenizer | None = None,
) -> list[str]:
    """Render buffered rows as a box-drawn table; first row is the header.

    Cells are inline-rendered before measuring. Rows shorter than the widest
    row are padded with empty cells. No rows → no lines.
    """
    if not rows:
        return []

    rendered = [[render_inline_content(c, theme, parser) for c in row] for row in rows]
    widths = column_widths(rendered)
    for row in rendered:
        row.extend([""] * (len(widths) - len(row)))

    bar = theme.table_border.apply(V_LINE)
    lines = [_border(widths, TOP_LEFT, TOP_T, TOP_RIGHT, theme.table_border)]

    for row_idx, row in enumerate(rendered):
        is_header = row_idx == 0
        style = theme.table_header if is_header else theme.table_cell
        cells = [" " + style.apply(_center(cell, w)) + " " for cell, w in zip(row, widths)]
        lines.append(bar + bar.join(cells) + bar)
        if is_header and len(rendered) > 1:
            lines.append(_border(widths, LEFT_T, CROSS, RIGHT_T, theme.table_border))

    lines.append(_border(widths, BOTTOM_LEFT, BOTTOM_T, BOTTOM_RIGHT, theme.table_border))
    return lines


# ─── Blockquotes and think blocks ────────────────────────────────────────────


def _barred_lines(
    text: str,
    width: int,
    bar_style: Style,
    body_style: Style,
    theme: Theme,
    parser: InlineTokenizer | None,
) -> list[str]:
    prefix = bar_style.apply(V_LINE) + " "
    body = render_inline_content(text, theme, parser, hard_spaces=True)
    available = max(width - visible_length(prefix), 1) if width > 0 else 0
    wrapped = list(text_wrap(body, available)) if available else [release_hard_spaces(body)]
    if not wrapped:
        return [prefix.rstrip()]
    return [prefix + body_style.apply(line) for line in wrapped]


def render_blockquote_line(
    text: str,
    width: int,
    theme: Theme,
    parser: InlineTokenizer | None = None,
) -> list[str]:
    """One blockquote source line → bar-prefixed display lines."""
    return _barred_lines(text, width, theme.blockquote_border, theme.blockquote, theme, parser)


def render_think_line(
    text: str,
    width: int,
    theme: Theme,
    parser: InlineTokenizer | None = None,
) -> list[str]:
    """One think-block source line → bar-prefixed display lines."""
    return _barred_lines(text, width, theme.think_border, theme.think, theme, parser)


def render_think_open(theme: Theme) -> str:
    return theme.think_border.apply(THINK_OPEN)


def render_think_close(theme: Theme) -> str:
    return theme.think_border.apply(THINK_CLOSE)


# ─── Code blocks and rules ───────────────────────────────────────────────────

def render_code_line(line: str, highlight: LineHighlighter | None = None) -> str:
    """A code line verbatim, or highlighted and reset when a highlighter is active."""
    if highlight is None:
        return line
    return highlight(line) + RESET


def render_code_language(language: str | None, theme: Theme) -> str | None:
    """Dim language label shown above a fenced block, if it declared one."""
    if not language:
        return None
    return theme.code_block_lang.apply(language)


def render_hr(width: int, theme: Theme) -> str:
    return theme.hr.apply(H_LINE * (min(width, HR_MAX_WIDTH) or HR_MAX_WIDTH))
