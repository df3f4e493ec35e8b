"""Shared fixtures: keep tests away from the user's settings file and reset tracing."""
from __future__ import annotations

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import debug_trace  # noqa: E402
import settings  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings singleton at an empty temp config directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr(settings.platformdirs, "user_config_dir", lambda app_name: str(config_dir / app_name))
    monkeypatch.setattr(settings, "_settings_manager", None)
    yield
    debug_trace.configure(False)


@pytest.fixture
def write_svg(tmp_path):
    """Write *text* to ``diagram.svg`` without newline translation and return the path."""

    def _write(text: str, name: str = "diagram.svg"):
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write
