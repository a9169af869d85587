"""Semantic-role styling for rendered markdown.

A Theme maps every role the renderers use to one immutable Style. Themes are
built once per renderer and passed explicitly into every render call; there
is no module-level current theme.

Colors are rich color names ("magenta", "bright_black") or "#rrggbb" hex.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields

from rich.color import Color, ColorParseError, ColorSystem
from rich.errors import StyleSyntaxError
from rich.style import Style as RichStyle

from streamdown.errors import ThemeError


@dataclass(frozen=True)
class Style:
    """Foreground/background color plus independent text attributes."""

    fg: str | None = None
    bg: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    dim: bool = False

    def __post_init__(self) -> None:
        for color in (self.fg, self.bg):
            if color is None:
                continue
            try:
                Color.parse(color)
            except ColorParseError as e:
                raise ThemeError(f"invalid color {color!r}: {e}") from e

    def _rich(self) -> RichStyle:
        return RichStyle(
            color=self.fg,
            bgcolor=self.bg,
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
            strike=self.strikethrough,
            dim=self.dim,
        )

    def apply(self, text: str) -> str:
        """Wrap text in exactly this style's SGR codes and a trailing reset.

        A style with no color and no attribute returns text unchanged.
        """
        return self._rich().render(text, color_system=ColorSystem.TRUECOLOR)

    @classmethod
    def parse(cls, definition: str) -> Style:
        """Build a Style from a rich style definition like "bold magenta on black"."""
        try:
            rs = RichStyle.parse(definition)
        except StyleSyntaxError as e:
            raise ThemeError(f"invalid style {definition!r}: {e}") from e
        return cls(
            fg=rs.color.name if rs.color is not None else None,
            bg=rs.bgcolor.name if rs.bgcolor is not None else None,
            bold=bool(rs.bold),
            italic=bool(rs.italic),
            underline=bool(rs.underline),
            strikethrough=bool(rs.strike),
            dim=bool(rs.dim),
        )


@dataclass(frozen=True)
class Theme:
    """One Style per semantic role."""

    # Inline
    bold: Style
    italic: Style
    code: Style
    strikethrough: Style
    link: Style
    link_url: Style

    # Headings
    heading1: Style
    heading2: Style
    heading3: Style
    heading4: Style
    heading5: Style
    heading6: Style

    # Lists
    bullet: Style
    list_number: Style
    checkbox_checked: Style
    checkbox_unchecked: Style

    # Tables
    table_header: Style
    table_border: Style
    table_cell: Style

    # Quotes / think blocks
    blockquote: Style
    blockquote_border: Style
    think: Style
    think_border: Style

    code_block_lang: Style
    hr: Style

    def heading(self, level: int) -> Style:
        """Style for a heading level; levels past 6 use heading6."""
        return {
            1: self.heading1,
            2: self.heading2,
            3: self.heading3,
            4: self.heading4,
            5: self.heading5,
        }.get(level, self.heading6)

    @classmethod
    def dark(cls) -> Theme:
        """Preset for dark terminal backgrounds (the default)."""
        return cls(
            bold=Style(bold=True),
            italic=Style(italic=True),
            code=Style(fg="yellow"),
            strikethrough=Style(strikethrough=True, dim=True),
            link=Style(fg="cyan", underline=True),
            link_url=Style(fg="blue", dim=True),
            heading1=Style(fg="magenta", bold=True),
            heading2=Style(fg="blue", bold=True),
            heading3=Style(fg="cyan", bold=True),
            heading4=Style(fg="green", bold=True),
            heading5=Style(fg="yellow", bold=True),
            heading6=Style(fg="white", bold=True),
            bullet=Style(fg="cyan"),
            list_number=Style(fg="cyan"),
            checkbox_checked=Style(fg="green"),
            checkbox_unchecked=Style(fg="red"),
            table_header=Style(bold=True),
            table_border=Style(fg="bright_black"),
            table_cell=Style(),
            blockquote=Style(italic=True, dim=True),
            blockquote_border=Style(fg="bright_black", dim=True),
            think=Style(fg="bright_black", italic=True),
            think_border=Style(fg="bright_black"),
            code_block_lang=Style(fg="bright_black", italic=True),
            hr=Style(fg="bright_black"),
        )

    @classmethod
    def light(cls) -> Theme:
        """Preset for light terminal backgrounds."""
        return cls(
            bold=Style(bold=True),
            italic=Style(italic=True),
            code=Style(fg="red"),
            strikethrough=Style(strikethrough=True, dim=True),
            link=Style(fg="blue", underline=True),
            link_url=Style(fg="cyan", dim=True),
            heading1=Style(fg="magenta", bold=True),
            heading2=Style(fg="blue", bold=True),
            heading3=Style(fg="cyan", bold=True),
            heading4=Style(fg="green", bold=True),
            heading5=Style(fg="yellow", bold=True),
            heading6=Style(fg="black", bold=True),
            bullet=Style(fg="blue"),
            list_number=Style(fg="blue"),
            checkbox_checked=Style(fg="green"),
            checkbox_unchecked=Style(fg="red"),
            table_header=Style(bold=True),
            table_border=Style(fg="black"),
            table_cell=Style(),
            blockquote=Style(italic=True, dim=True),
            blockquote_border=Style(fg="black", dim=True),
            think=Style(fg="black", italic=True),
            think_border=Style(fg="black"),
            code_block_lang=Style(fg="black", italic=True),
            hr=Style(fg="black"),
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Style | str]) -> Theme:
        """Build a custom theme; every role must be supplied.

        Values may be Style instances or rich style definitions. Partial
        mappings are rejected here rather than failing later at render time.
        """
        missing = [r for r in THEME_ROLES if r not in mapping]
        if missing:
            raise ThemeError(f"custom theme is missing roles: {', '.join(missing)}")
        unknown = sorted(set(mapping) - set(THEME_ROLES))
        if unknown:
            raise ThemeError(f"custom theme has unknown roles: {', '.join(unknown)}")

        styles: dict[str, Style] = {}
        for role in THEME_ROLES:
            value = mapping[role]
            if isinstance(value, Style):
                styles[role] = value
            elif isinstance(value, str):
                styles[role] = Style.parse(value)
            else:
                raise ThemeError(
                    f"role {role!r} must be a Style or style string, got {type(value).__name__}"
                )
        return cls(**styles)


THEME_ROLES: tuple[str, ...] = tuple(f.name for f in fields(Theme))

PRESETS = {
    "dark": Theme.dark,
    "light": Theme.light,
}


def load_theme(source: str | Mapping[str, Style | str] | Theme | None = None) -> Theme:
    """Resolve a preset name, a full role mapping, or a Theme to a Theme."""
    if source is None:
        return Theme.dark()
    if isinstance(source, Theme):
        return source
    if isinstance(source, str):
        factory = PRESETS.get(source.strip().lower())
        if factory is None:
            raise ThemeError(
                f"unknown theme {source!r} (expected one of: {', '.join(PRESETS)})"
            )
        return factory()
    return Theme.from_mapping(source)
