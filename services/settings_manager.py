"""
Settings Manager.

Handles application settings with JSON file storage.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Optional, List
from pathlib import Path

from models.connector import ConnectorStyle

logger = logging.getLogger(__name__)


@dataclass
class RoutingSettings:
    """Connector routing parameters."""
    snap_increment: float = 5.0
    label_offset_x: float = 10.0
    label_offset_y: float = -10.0
    default_label: str = "Dependency"


@dataclass
class StyleSettings:
    """Connector colours and decoration sizes."""
    line_color: str = "#000000"
    highlight_color: str = "#FF0000"
    dash_pattern: List[float] = field(default_factory=lambda: [5.0, 5.0])
    arrow_length: float = 10.0
    arrow_half_width: float = 5.0
    endpoint_marker_radius: float = 10.0
    elbow_marker_radius: float = 5.0
    elbow_marker_fill: str = "#000000"
    pending_source_color: str = "#0000FF"


@dataclass
class UISettings:
    """User interface settings."""
    theme: str = "light"
    show_grid: bool = True
    grid_size: int = 50
    default_box_width: float = 120.0
    default_box_height: float = 80.0


@dataclass
class AppSettings:
    """Complete application settings."""
    routing: RoutingSettings = field(default_factory=RoutingSettings)
    style: StyleSettings = field(default_factory=StyleSettings)
    ui: UISettings = field(default_factory=UISettings)
    window_geometry: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "routing": asdict(self.routing),
            "style": asdict(self.style),
            "ui": asdict(self.ui),
            "window_geometry": self.window_geometry,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create from dictionary."""
        settings = cls()

        if "routing" in data:
            settings.routing = RoutingSettings(**data["routing"])
        if "style" in data:
            settings.style = StyleSettings(**data["style"])
        if "ui" in data:
            settings.ui = UISettings(**data["ui"])
        if "window_geometry" in data:
            settings.window_geometry = data["window_geometry"]

        return settings

    def connector_style(self) -> ConnectorStyle:
        """Build the connector style used by newly created connectors."""
        s = self.style
        return ConnectorStyle(
            color=s.line_color,
            highlight_color=s.highlight_color,
            dash_pattern=tuple(s.dash_pattern),
            arrow_shape=(
                (0.0, 0.0),
                (-s.arrow_length, s.arrow_half_width),
                (-s.arrow_length, -s.arrow_half_width),
            ),
            label_offset=(self.routing.label_offset_x, self.routing.label_offset_y),
            endpoint_marker_radius=s.endpoint_marker_radius,
            elbow_marker_radius=s.elbow_marker_radius,
            elbow_marker_fill=s.elbow_marker_fill,
            snap_increment=self.routing.snap_increment,
        )


class SettingsManager:
    """
    Manages application settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/BoxLink/settings.json
    - Linux: ~/.config/BoxLink/settings.json
    - macOS: ~/Library/Application Support/BoxLink/settings.json
    """

    APP_NAME = "BoxLink"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self._ensure_settings_dir()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    @property
    def snap_increment(self) -> float:
        return self._settings.routing.snap_increment

    @snap_increment.setter
    def snap_increment(self, value: float):
        self._settings.routing.snap_increment = value
        self.save()

    @property
    def highlight_color(self) -> str:
        return self._settings.style.highlight_color

    @highlight_color.setter
    def highlight_color(self, value: str):
        self._settings.style.highlight_color = value
        self.save()

    def connector_style(self) -> ConnectorStyle:
        return self._settings.connector_style()

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        import platform
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def _ensure_settings_dir(self):
        """Create settings directory if it doesn't exist."""
        self._settings_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = AppSettings.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading settings from {self._settings_path}: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._ensure_settings_dir()
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving settings to {self._settings_path}: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()

    def save_window_geometry(self, geometry: bytes, state: bytes):
        """Save window geometry and state."""
        import base64
        self._settings.window_geometry = {
            "geometry": base64.b64encode(geometry).decode("ascii"),
            "state": base64.b64encode(state).decode("ascii"),
        }
        self.save()

    def get_window_geometry(self) -> tuple:
        """Get saved window geometry and state."""
        import base64
        geo = self._settings.window_geometry
        if not geo:
            return None, None

        try:
            geometry = base64.b64decode(geo.get("geometry", ""))
            state = base64.b64decode(geo.get("state", ""))
            return geometry, state
        except (ValueError, TypeError):
            return None, None


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
