"""Error hierarchy for streamdown."""

from __future__ import annotations


class StreamdownError(Exception):
    """Base streamdown error."""


class ThemeError(StreamdownError):
    """A theme could not be built (unknown preset, missing or bad role)."""


class ConfigError(StreamdownError):
    """A settings value is missing or malformed."""
