"""
settings.py

Persistent settings management for labellift.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/labellift/settings.toml
    - macOS: ~/Library/Application Support/labellift/settings.toml
    - Linux: ~/.config/labellift/settings.toml

Default values are documented in comments throughout this file.  They
reproduce the plain filter: no backdrop, no tracing.  If settings.toml is
missing or corrupted, these defaults are used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from models import CLUSTER_LABEL_CLASS, TOP_LAYER_MARKER

APP_NAME = "labellift"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# Sections
# =============================================================================

@dataclass
class LabelSettings:
    """Which elements are moved and how the top layer is marked.

    Defaults:
        class_token: "cluster-label"
        marker: "moved cluster labels to top layer"
    """
    class_token: str = CLUSTER_LABEL_CLASS  # Default: Mermaid's subgraph title class
    marker: str = TOP_LAYER_MARKER          # Default: comment text before moved labels


@dataclass
class BackdropSettings:
    """White backdrop behind moved labels.

    Defaults:
        enabled: False
        color: "#FFFFFF"
        halo_width: 3.0
        padding: "0 2px"
    """
    enabled: bool = False       # Default: False
    color: str = "#FFFFFF"      # Default: white
    halo_width: float = 3.0     # Default: 3.0 pixels of stroke around SVG text
    padding: str = "0 2px"      # Default: CSS padding around HTML label text


@dataclass
class TraceSettings:
    """Debug tracing.

    Defaults:
        enabled: False
        log_file: ""
    """
    enabled: bool = False   # Default: False
    log_file: str = ""      # Default: "" (stderr only)


@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        labels: Label selection and marker settings.
        backdrop: Backdrop style settings.
        trace: Debug trace settings.
    """
    labels: LabelSettings = field(default_factory=LabelSettings)
    backdrop: BackdropSettings = field(default_factory=BackdropSettings)
    trace: TraceSettings = field(default_factory=TraceSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location,
    or at *settings_file* when given.  If the file doesn't exist, defaults
    are used; the file is only created by an explicit save.

    Args:
        app_name: Application name used for the config directory.
        settings_file: Explicit settings file path.
    """

    def __init__(self, app_name: str = APP_NAME, settings_file: Optional[Path] = None):
        if settings_file is None:
            self.settings_dir = Path(platformdirs.user_config_dir(app_name))
            self.settings_file = self.settings_dir / "settings.toml"
        else:
            self.settings_file = Path(settings_file)
            self.settings_dir = self.settings_file.parent
        self.load_error: Optional[str] = None
        self.settings = self.load()

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.  The reason an existing file was
            rejected is kept in ``load_error``.
        """
        self.load_error = None
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            # If file is unreadable, invalid TOML, or has wrong-typed values,
            # return defaults (TOMLDecodeError is a ValueError)
            self.load_error = f"{self.settings_file}: {e}"
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        labels = data.get("labels", {})
        settings.labels.class_token = labels.get("class_token", settings.labels.class_token)
        settings.labels.marker = labels.get("marker", settings.labels.marker)

        backdrop = data.get("backdrop", {})
        settings.backdrop.enabled = backdrop.get("enabled", settings.backdrop.enabled)
        settings.backdrop.color = backdrop.get("color", settings.backdrop.color)
        settings.backdrop.halo_width = float(backdrop.get("halo_width", settings.backdrop.halo_width))
        settings.backdrop.padding = backdrop.get("padding", settings.backdrop.padding)

        trace = data.get("trace", {})
        settings.trace.enabled = trace.get("enabled", settings.trace.enabled)
        settings.trace.log_file = trace.get("log_file", settings.trace.log_file)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "labels": {
                "class_token": s.labels.class_token,
                "marker": s.labels.marker,
            },
            "backdrop": {
                "enabled": s.backdrop.enabled,
                "color": s.backdrop.color,
                "halo_width": s.backdrop.halo_width,
                "padding": s.backdrop.padding,
            },
            "trace": {
                "enabled": s.trace.enabled,
                "log_file": s.trace.log_file,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        data = self._to_toml_dict()
        return tomli_w.dumps(data)

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
