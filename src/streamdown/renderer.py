"""Streaming markdown driver.

StreamdownRenderer buffers raw fragments into complete lines, runs each line
through the tokenizer, renders the resulting events and hands finished text
to a StreamingWriter. Everything here runs on the caller's thread and never
sleeps; pacing and sink I/O belong to the writer's thread.

    renderer = StreamdownRenderer(width=80)
    for fragment in stream:
        renderer.push(fragment)
    renderer.finish()
"""

from __future__ import annotations

import codecs
import io
import logging
import shutil
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import TextIO

from streamdown.blocks import (
    HeadingAlign,
    TableBuffer,
    render_blockquote_line,
    render_code_language,
    render_code_line,
    render_heading,
    render_hr,
    render_list_item,
    render_think_close,
    render_think_line,
    render_think_open,
)
from streamdown.events import (
    BlockquoteEnd,
    BlockquoteLine,
    BlockquoteStart,
    Bold,
    BoldEvent,
    BoldItalic,
    BoldItalicEvent,
    Code,
    CodeBlockEnd,
    CodeBlockLine,
    CodeBlockStart,
    EmptyLine,
    Footnote,
    FootnoteEvent,
    Heading,
    HorizontalRule,
    Image,
    ImageEvent,
    InlineCode,
    InlineElement,
    InlineElements,
    Italic,
    ItalicEvent,
    Link,
    LinkEvent,
    ListEnd,
    ListItem,
    Newline,
    ParseEvent,
    Strikeout,
    StrikeoutEvent,
    TableEnd,
    TableHeader,
    TableRow,
    TableSeparator,
    Text,
    TextEvent,
    ThinkBlockEnd,
    ThinkBlockLine,
    ThinkBlockStart,
    Underline,
    UnderlineEvent,
)
from streamdown.highlight import CODE_THEMES, Highlighter, LineHighlighter, PygmentsHighlighter
from streamdown.inline import render_element, render_inline_elements
from streamdown.text import release_hard_spaces, text_wrap
from streamdown.theme import Style, Theme, load_theme
from streamdown.tokenizer import InlineParser, InlineTokenizer, LineTokenizer, Tokenizer
from streamdown.writer import DEFAULT_DELAY_MS, StreamingWriter

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 80


def terminal_width(fallback: int = DEFAULT_WIDTH) -> int:
    """Columns of the controlling terminal, or fallback when there is none."""
    return shutil.get_terminal_size((fallback, 24)).columns


@dataclass(frozen=True)
class RenderConfig:
    """Everything a StreamdownRenderer needs besides its sink."""

    width: int = DEFAULT_WIDTH
    delay_ms: float = DEFAULT_DELAY_MS
    theme: Theme = field(default_factory=Theme.dark)
    heading_align: HeadingAlign = HeadingAlign.LEFT
    show_code_language: bool = False
    highlight: bool = False
    code_theme: str = CODE_THEMES["dark"]


# Single-span inline events → the inline element they render as.
_INLINE_EVENTS: dict[type, Callable[[ParseEvent], InlineElement]] = {
    TextEvent: lambda e: Text(e.text),
    InlineCode: lambda e: Code(e.text),
    BoldEvent: lambda e: Bold(e.text),
    ItalicEvent: lambda e: Italic(e.text),
    BoldItalicEvent: lambda e: BoldItalic(e.text),
    UnderlineEvent: lambda e: Underline(e.text),
    StrikeoutEvent: lambda e: Strikeout(e.text),
    LinkEvent: lambda e: Link(e.text, e.url),
    ImageEvent: lambda e: Image(e.alt, e.url),
    FootnoteEvent: lambda e: Footnote(e.text),
}


class Renderer:
    """Event → text dispatcher.

    Holds only the per-stream state the events imply: the table being
    buffered and the highlighter of the open code block. Output goes to
    ``emit`` as finished strings.
    """

    def __init__(
        self,
        emit: Callable[[str], object],
        width: int,
        theme: Theme,
        heading_align: HeadingAlign = HeadingAlign.LEFT,
        show_code_language: bool = False,
        highlighter: Highlighter | None = None,
        parser: InlineTokenizer | None = None,
    ):
        self._emit = emit
        self.width = width
        self.theme = theme
        self.heading_align = heading_align
        self.show_code_language = show_code_language
        self._highlighter = highlighter
        self._parser = parser
        self._table = TableBuffer()
        self._highlight: LineHighlighter | None = None

        self._handlers: dict[type, Callable[[ParseEvent], None]] = {
            InlineElements: self._inline_elements,
            Heading: self._heading,
            CodeBlockStart: self._code_start,
            CodeBlockLine: self._code_line,
            CodeBlockEnd: self._code_end,
            ListItem: self._list_item,
            ListEnd: _ignore,
            TableHeader: self._table_row,
            TableRow: self._table_row,
            TableSeparator: _ignore,
            TableEnd: self._table_end,
            BlockquoteStart: _ignore,
            BlockquoteLine: self._blockquote_line,
            BlockquoteEnd: _ignore,
            ThinkBlockStart: self._think_start,
            ThinkBlockLine: self._think_line,
            ThinkBlockEnd: self._think_end,
            HorizontalRule: self._hr,
            EmptyLine: self._newline,
            Newline: self._newline,
        }

    def render(self, events: Iterable[ParseEvent]) -> None:
        for event in events:
            self.handle(event)

    def handle(self, event: ParseEvent) -> None:
        to_element = _INLINE_EVENTS.get(type(event))
        if to_element is not None:
            self._emit(render_element(to_element(event), self.theme))
            return
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.debug("skipping unhandled event %s", type(event).__name__)
            return
        handler(event)

    def close(self) -> None:
        """Flush a table the tokenizer never ended."""
        if self._table.rows:
            self._table_end(None)
        self._highlight = None

    def _lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self._emit(line + "\n")

    # ─── Handlers ────────────────────────────────────────────────────────────

    def _inline_elements(self, event: InlineElements) -> None:
        rendered = render_inline_elements(event.elements, self.theme, hard_spaces=True)
        if not rendered:
            return
        wrapped = text_wrap(rendered, self.width)
        if wrapped.is_empty():
            self._emit(release_hard_spaces(rendered))
            return
        self._emit("\n".join(wrapped))

    def _heading(self, event: Heading) -> None:
        self._lines(
            render_heading(
                event.level, event.content, self.width, self.theme,
                align=self.heading_align, parser=self._parser,
            )
        )

    def _code_start(self, event: CodeBlockStart) -> None:
        if self.show_code_language:
            label = render_code_language(event.language, self.theme)
            if label is not None:
                self._emit(label + "\n")
        if self._highlighter is not None:
            self._highlight = self._highlighter(event.language)

    def _code_line(self, event: CodeBlockLine) -> None:
        self._emit(render_code_line(event.line, self._highlight) + "\n")

    def _code_end(self, event: ParseEvent) -> None:
        self._highlight = None

    def _list_item(self, event: ListItem) -> None:
        self._emit(render_list_item(event, self.theme, self.width, self._parser))

    def _table_row(self, event: TableHeader | TableRow) -> None:
        self._table.add(event.cells)

    def _table_end(self, event: ParseEvent | None) -> None:
        self._lines(self._table.flush(self.theme, self._parser))

    def _blockquote_line(self, event: BlockquoteLine) -> None:
        self._lines(render_blockquote_line(event.text, self.width, self.theme, self._parser))

    def _think_start(self, event: ParseEvent) -> None:
        self._emit(render_think_open(self.theme) + "\n")

    def _think_line(self, event: ThinkBlockLine) -> None:
        self._lines(render_think_line(event.text, self.width, self.theme, self._parser))

    def _think_end(self, event: ParseEvent) -> None:
        self._emit(render_think_close(self.theme) + "\n")

    def _hr(self, event: ParseEvent) -> None:
        self._emit(render_hr(self.width, self.theme) + "\n")

    def _newline(self, event: ParseEvent) -> None:
        self._emit("\n")


def _ignore(event: ParseEvent) -> None:
    pass


class StreamdownRenderer:
    """Render a markdown token stream to a terminal as it arrives.

    Args:
        width: Target line width in columns.
        delay_ms: Per-character pacing delay; 0 disables pacing.
        theme: A Theme, a preset name ("dark"/"light"), a full role mapping,
            or None for dark.
        heading_align: Placement of level 1–2 headings.
        show_code_language: Print the fence language above code blocks.
        tokenizer: Line tokenizer; defaults to LineTokenizer.
        highlighter: Code highlighter; None leaves code lines verbatim.
        sink: Output stream for the default writer (sys.stdout if None).
        writer: Pre-built writer; overrides delay_ms and sink.
    """

    def __init__(
        self,
        width: int = DEFAULT_WIDTH,
        delay_ms: float = DEFAULT_DELAY_MS,
        theme: Theme | str | Mapping[str, Style | str] | None = None,
        heading_align: HeadingAlign = HeadingAlign.LEFT,
        *,
        show_code_language: bool = False,
        tokenizer: Tokenizer | None = None,
        highlighter: Highlighter | None = None,
        sink: TextIO | None = None,
        writer: StreamingWriter | None = None,
    ):
        self.theme = load_theme(theme)
        self.writer = writer if writer is not None else StreamingWriter(delay_ms, sink)

        parser = InlineParser()
        self._tokenizer = tokenizer if tokenizer is not None else LineTokenizer(parser)
        self._renderer = Renderer(
            self.writer.write,
            width,
            self.theme,
            heading_align=heading_align,
            show_code_language=show_code_language,
            highlighter=highlighter,
            parser=parser,
        )
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._finished = False

    @classmethod
    def from_config(cls, config: RenderConfig, sink: TextIO | None = None) -> StreamdownRenderer:
        highlighter = PygmentsHighlighter(config.code_theme) if config.highlight else None
        return cls(
            width=config.width,
            delay_ms=config.delay_ms,
            theme=config.theme,
            heading_align=config.heading_align,
            show_code_language=config.show_code_language,
            highlighter=highlighter,
            sink=sink,
        )

    @property
    def width(self) -> int:
        return self._renderer.width

    def push(self, fragment: str | bytes) -> None:
        """Feed one fragment of any size; complete lines are rendered now."""
        if self._finished:
            raise BrokenPipeError("renderer already finished")
        if isinstance(fragment, bytes):
            fragment = self._decoder.decode(fragment)
        self._buffer += fragment
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            self._renderer.render(self._tokenizer.parse_line(line))

    def finish(self) -> None:
        """Render the trailing partial line, close open blocks, drain output.

        Blocks until every character has been written to the sink.
        """
        if self._finished:
            return
        self._finished = True
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer:
            line, self._buffer = self._buffer, ""
            self._renderer.render(self._tokenizer.parse_line(line))
        self._renderer.render(self._tokenizer.finalize())
        self._renderer.close()
        self.writer.finish()

    def abandon(self) -> None:
        """Stop without draining; output still queued may be lost."""
        self._finished = True
        self.writer.abandon()

    def __enter__(self) -> StreamdownRenderer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.finish()
        else:
            self.abandon()


def render_markdown(text: str, config: RenderConfig | None = None) -> str:
    """Render a whole document at once, unpaced, and return the output."""
    config = config or RenderConfig()
    sink = io.StringIO()
    renderer = StreamdownRenderer.from_config(replace(config, delay_ms=0), sink=sink)
    renderer.push(text)
    renderer.finish()
    return sink.getvalue()
