"""Pytest configuration and shared fixtures for streamdown tests."""

import pytest

import streamdown.io.logging_setup as logging_setup
from streamdown.theme import Theme

_ENV_VARS = (
    "STREAMDOWN_WIDTH",
    "STREAMDOWN_DELAY_MS",
    "STREAMDOWN_THEME",
    "STREAMDOWN_HEADING_ALIGN",
    "STREAMDOWN_LOG_LEVEL",
    "STREAMDOWN_LOG_FILE",
)


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point settings and logs at tmp_path and clear streamdown env vars."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("STREAMDOWN_LOG_DIR", str(tmp_path / "logs"))
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield
    logging_setup.reset()


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def theme():
    """The default dark theme."""
    return Theme.dark()

