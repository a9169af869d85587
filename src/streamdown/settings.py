"""Settings file I/O and render configuration.

Settings live in a JSON file at XDG_CONFIG_HOME/streamdown/settings.json,
one top-level key per RenderConfig field::

    {"width": 100, "delay_ms": 2, "theme": "light", "heading_align": "center"}

``theme`` may also be a full role → rich style mapping.

load_render_config() layers defaults ← settings file ← environment ←
explicit overrides and validates the result.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from streamdown.blocks import HeadingAlign
from streamdown.errors import ConfigError, ThemeError
from streamdown.highlight import CODE_THEMES
from streamdown.renderer import RenderConfig, terminal_width
from streamdown.theme import load_theme
from streamdown.writer import DEFAULT_DELAY_MS

logger = logging.getLogger(__name__)

# Environment variable → settings key.
ENV_VARS = {
    "STREAMDOWN_WIDTH": "width",
    "STREAMDOWN_DELAY_MS": "delay_ms",
    "STREAMDOWN_THEME": "theme",
    "STREAMDOWN_HEADING_ALIGN": "heading_align",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / streamdown / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(config_home) / "streamdown" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("ignoring unreadable settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: top level is not an object", path)
        return {}
    return data


def _write_settings(path: Path, data: Mapping[str, Any]) -> None:
    """Write data as JSON through a sibling temp file and os.replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".settings-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(dict(data), f, indent=2, sort_keys=True)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def save_defaults(values: Mapping[str, Any]) -> Path:
    """Merge values into the settings file and return its path.

    Keys whose value is None are left as they are. Values are checked with
    load_render_config first so an unusable default is never written.
    """
    updates = {k: v for k, v in values.items() if v is not None}
    merged = {**load_settings(), **updates}
    load_render_config(settings=merged, environ={})
    path = get_config_path()
    _write_settings(path, merged)
    logger.info("saved defaults %s to %s", sorted(updates), path)
    return path


# ─── Value coercion ──────────────────────────────────────────────────────────


def _int(key: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key}: expected an integer, got {value!r}") from None
    if number < minimum:
        raise ConfigError(f"{key}: must be >= {minimum}, got {number}")
    return number


def _float(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key}: expected a number, got {value!r}") from None
    if number < 0:
        raise ConfigError(f"{key}: must be >= 0, got {number}")
    return number


def _bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key}: expected a boolean, got {value!r}")


def _align(value: Any) -> HeadingAlign:
    if isinstance(value, HeadingAlign):
        return value
    try:
        return HeadingAlign(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(a.value for a in HeadingAlign)
        raise ConfigError(f"heading_align: expected one of {choices}, got {value!r}") from None


def load_render_config(
    overrides: Mapping[str, Any] | None = None,
    settings: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> RenderConfig:
    """Build a RenderConfig from defaults, settings file, environment and overrides.

    ``settings`` and ``environ`` default to the settings file and os.environ.
    Override values of None are treated as unset. Raises ConfigError for
    values that cannot be used.
    """
    merged: dict[str, Any] = {}
    merged.update(settings if settings is not None else load_settings())
    env = environ if environ is not None else os.environ
    for var, key in ENV_VARS.items():
        if env.get(var):
            merged[key] = env[var]
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    theme_source = merged.get("theme", "dark")
    if not isinstance(theme_source, (str, Mapping)):
        raise ConfigError(f"theme: expected a preset name or role mapping, got {theme_source!r}")
    try:
        theme = load_theme(theme_source)
    except ThemeError as e:
        raise ConfigError(f"theme: {e}") from e
    default_code_theme = CODE_THEMES["dark"]
    if isinstance(theme_source, str):
        default_code_theme = CODE_THEMES.get(theme_source.strip().lower(), default_code_theme)

    width = merged.get("width")
    return RenderConfig(
        width=_int("width", width, 1) if width is not None else terminal_width(),
        delay_ms=_float("delay_ms", merged.get("delay_ms", DEFAULT_DELAY_MS)),
        theme=theme,
        heading_align=_align(merged.get("heading_align", HeadingAlign.LEFT)),
        show_code_language=_bool("show_code_language", merged.get("show_code_language", False)),
        highlight=_bool("highlight", merged.get("highlight", False)),
        code_theme=str(merged.get("code_theme") or default_code_theme),
    )
