"""Width measurement and word wrapping for text carrying terminal escapes.

All functions here understand two kinds of control sequence:

- CSI: ``ESC [`` ... final byte (``m``, ``K``, ``H`` or ``J`` for width
  accounting), used for colors and attributes.
- OSC: ``ESC ]`` ... ``ESC \\``, used for hyperlinks.

Neither contributes to the visible width of a string, and wrapping never
splits one across two lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rich.cells import get_character_cell_size

from streamdown.colors import CSI_TERMINATORS, ESC

# Full-grammar matcher used only for stripping; width accounting uses the
# single-pass scanner in visible_length().
_ESCAPE_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")

# Stands in for a space that wrapping must not break on (inside inline code).
# One column wide; text_wrap turns it back into a plain space.
HARD_SPACE = "\ue000"


def visible_length(s: str) -> int:
    """Number of terminal columns s occupies once escapes are removed.

    Wide glyphs (CJK, most emoji) count 2, combining marks and characters
    with no defined width count 0.
    """
    length = 0
    in_csi = False
    in_osc = False
    prev_was_esc = False

    for ch in s:
        if prev_was_esc:
            prev_was_esc = False
            if ch == "[":
                in_csi = True
                continue
            if ch == "]":
                in_osc = True
                continue
            if in_osc:
                # ESC \ closes the OSC; anything else is still payload.
                if ch == "\\":
                    in_osc = False
                continue
            length += get_character_cell_size(ch)
            continue

        if ch == ESC:
            prev_was_esc = True
            continue

        if in_csi:
            if ch in CSI_TERMINATORS:
                in_csi = False
            continue

        if in_osc:
            continue

        length += get_character_cell_size(ch)

    return length


def strip_ansi(s: str) -> str:
    """Remove every CSI and OSC sequence from s."""
    return _ESCAPE_RE.sub("", s)


def release_hard_spaces(s: str) -> str:
    return s.replace(HARD_SPACE, " ")


@dataclass(frozen=True)
class WrappedText:
    """Finished display lines, each possibly carrying escapes."""

    lines: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> WrappedText:
        return cls()

    def is_empty(self) -> bool:
        return not self.lines

    def __iter__(self):
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


def split_text(text: str) -> list[str]:
    """Split text on whitespace into visual words, keeping escapes attached.

    An escape sequence is fused to the word it touches. A sequence that
    stands alone between whitespace (e.g. a reset after the last styled
    word) is glued onto the preceding word so it never becomes a
    zero-width word of its own. An escape still open at end of input is
    attached to the final word.
    """
    words: list[str] = []
    current: list[str] = []
    current_has_glyph = False
    escape_buf: list[str] = []
    in_escape = False
    escape_kind = ""

    def close_word() -> None:
        nonlocal current, current_has_glyph
        if not current:
            return
        word = "".join(current)
        if not current_has_glyph and words:
            words[-1] += word
        else:
            words.append(word)
        current = []
        current_has_glyph = False

    for ch in text:
        if in_escape:
            escape_buf.append(ch)
            if escape_kind == "" and len(escape_buf) == 2:
                escape_kind = ch if ch in "[]" else "?"
                if escape_kind == "?":
                    # Two-byte escape, e.g. the ST that ends an OSC.
                    current.extend(escape_buf)
                    escape_buf = []
                    in_escape = False
                continue
            if escape_kind == "[" and "@" <= ch <= "~":
                done = True
            elif escape_kind == "]" and (
                ch == "\x07" or (ch == "\\" and escape_buf[-2] == ESC)
            ):
                done = True
            else:
                done = False
            if done:
                current.extend(escape_buf)
                escape_buf = []
                in_escape = False
            continue

        if ch == ESC:
            in_escape = True
            escape_kind = ""
            escape_buf.append(ch)
            continue

        if ch.isspace():
            close_word()
        else:
            current.append(ch)
            current_has_glyph = True

    if escape_buf:
        current.extend(escape_buf)
    close_word()
    return words


def simple_wrap(text: str, width: int) -> list[str]:
    """Greedy word wrap by character count.

    A word longer than width gets a line of its own and is never split.
    Always returns at least one line.
    """
    if width == 0 or not text:
        return [text]

    lines: list[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current += " " + word
        else:
            lines.append(current)
            current = word

    if current:
        lines.append(current)
    if not lines:
        lines.append("")
    return lines


def text_wrap(
    text: str,
    width: int,
    first_prefix: str = "",
    next_prefix: str = "",
) -> WrappedText:
    """Escape-aware greedy wrap with separate first-line/continuation prefixes.

    The space available on each line is width minus the visible width of
    the prefix that line gets.
    HARD_SPACE never breaks a line and comes out as a plain space.
    """
    if width == 0:
        return WrappedText.empty()

    words = split_text(text)
    if not words:
        return WrappedText.empty()

    first_prefix_len = visible_length(first_prefix)
    next_prefix_len = visible_length(next_prefix)

    lines: list[str] = []
    current_line = ""
    current_len = 0
    is_first_line = True

    for word in words:
        word_len = visible_length(word)
        prefix_len = first_prefix_len if is_first_line else next_prefix_len
        available = max(width - prefix_len, 0)
        space_needed = 1 if current_line else 0

        if current_len + space_needed + word_len <= available:
            if current_line:
                current_line += " "
                current_len += 1
            current_line += word
            current_len += word_len
            continue

        if current_line:
            prefix = first_prefix if is_first_line else next_prefix
            lines.append(prefix + current_line)
            is_first_line = False
        current_line = word
        current_len = word_len

    if current_line:
        prefix = first_prefix if is_first_line else next_prefix
        lines.append(prefix + current_line)

    return WrappedText(tuple(release_hard_spaces(line) for line in lines))
