"""CLI entry point for streamdown.

Reads a markdown document from a file or stdin and replays it through the
streaming renderer in small pieces, the way tokens arrive from a model.
"""

import argparse
import logging
import re
import sys
from collections.abc import Iterator

import streamdown.io.logging_setup
from streamdown.blocks import HeadingAlign
from streamdown.errors import StreamdownError
from streamdown.renderer import StreamdownRenderer
from streamdown.settings import load_render_config, save_defaults
from streamdown.theme import PRESETS

logger = logging.getLogger(__name__)

# Word plus its trailing whitespace, or a leading whitespace run.
_TOKEN_RE = re.compile(r"\S+\s*|\s+")


def split_tokens(text: str, chunk_size: int = 0) -> Iterator[str]:
    """Split text into space-inclusive word tokens, or fixed-size chunks."""
    if chunk_size > 0:
        for start in range(0, len(text), chunk_size):
            yield text[start:start + chunk_size]
        return
    for m in _TOKEN_RE.finditer(text):
        yield m.group(0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamdown",
        description="Render streamed markdown to the terminal with paced output",
    )
    parser.add_argument(
        "file", nargs="?", default=None, help="Markdown file to render (default: stdin)"
    )
    parser.add_argument(
        "--width", type=int, default=None, help="Line width in columns (default: terminal width)"
    )
    parser.add_argument(
        "--delay-ms",
        type=float,
        default=None,
        help="Per-character pacing delay in milliseconds; 0 disables pacing (default: 3)",
    )
    parser.add_argument(
        "--theme", choices=sorted(PRESETS), default=None, help="Theme preset (default: dark)"
    )
    parser.add_argument(
        "--heading-align",
        choices=[a.value for a in HeadingAlign],
        default=None,
        help="Alignment of level 1-2 headings (default: left)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=0,
        help="Feed fixed-size chunks instead of word tokens",
    )
    parser.add_argument(
        "--highlight",
        action="store_true",
        default=None,
        help="Syntax-highlight fenced code blocks",
    )
    parser.add_argument(
        "--show-code-language",
        action="store_true",
        default=None,
        help="Print the language tag above fenced code blocks",
    )
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Store the given render options in the settings file and exit",
    )
    return parser


def _read_input(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    streamdown.io.logging_setup.configure()

    overrides = {
        "width": args.width,
        "delay_ms": args.delay_ms,
        "theme": args.theme,
        "heading_align": args.heading_align,
        "highlight": args.highlight,
        "show_code_language": args.show_code_language,
    }

    try:
        if args.save_defaults:
            path = save_defaults(overrides)
            print(f"streamdown: saved defaults to {path}", file=sys.stderr)
            return 0
        config = load_render_config(overrides)
        text = _read_input(args.file)
        renderer = StreamdownRenderer.from_config(config, sink=sys.stdout)
        logger.debug("rendering %d chars at width %d", len(text), config.width)
        try:
            for token in split_tokens(text, args.chunk_size):
                renderer.push(token)
        except KeyboardInterrupt:
            renderer.abandon()
            return 130
        renderer.finish()
    except (StreamdownError, OSError) as e:
        print(f"streamdown: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
