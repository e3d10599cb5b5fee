"""
Configuration service for markhandles.

This module handles loading, saving, and managing application settings.
Configuration is stored as JSON in ~/.config/markhandles/config.json following
the XDG Base Directory Specification.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from PySide6.QtGui import QColor

from markhandles.services.logging_service import get_logger

# Default configuration directory following XDG Base Directory Specification
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "markhandles"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

DEFAULT_NODE_WIDTH = 10
DEFAULT_NODE_COLOR = "#5c7cfa"
DEFAULT_MIN_ZOOM = 0.1
DEFAULT_MAX_ZOOM = 5.0

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "log_level": "INFO",
    # Resize handles drawn around the selected mark
    "handles": {
        "node_width": DEFAULT_NODE_WIDTH,
        "node_color": DEFAULT_NODE_COLOR,
    },
    # Zoom limits for the mark canvas
    "canvas": {
        "min_zoom": DEFAULT_MIN_ZOOM,
        "max_zoom": DEFAULT_MAX_ZOOM,
    },
}


class ConfigService:
    """
    Service for managing application configuration.

    Handles loading, saving, and accessing configuration values.
    Provides sensible defaults when config file is missing or corrupted.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize the ConfigService.

        Args:
            config_path: Optional path to config file. Defaults to
                        ~/.config/markhandles/config.json
        """
        self._logger = get_logger(__name__)
        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self._load()

    def _load(self) -> None:
        """Load configuration from file, using defaults if needed."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        if not self._config_path.exists():
            self._logger.info(
                f"Config file not found at {self._config_path}. Using defaults."
            )
            self._save_to_file()
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)

            if isinstance(loaded_config, dict):
                self._deep_merge(self._config, loaded_config)
                self._logger.info(f"Configuration loaded from {self._config_path}")
                # Persist any new default keys
                self._save_to_file()
            else:
                raise ValueError("Config file does not contain a valid JSON object")

        except (json.JSONDecodeError, ValueError) as e:
            self._logger.warning(
                f"Config file corrupted or invalid: {e}. Recreating with defaults."
            )
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save_to_file()

        except (OSError, PermissionError) as e:
            self._logger.warning(
                f"Could not read config file: {e}. Using defaults."
            )

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save_to_file(self) -> None:
        """Save current configuration to file."""
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)

            self._logger.debug(f"Configuration saved to {self._config_path}")

        except (OSError, PermissionError) as e:
            self._logger.error(f"Could not save config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key to retrieve.
            default: Default value if key doesn't exist.

        Returns:
            The configuration value, or default if not found.
        """
        return self._config.get(key, default)

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.get(name)
        if isinstance(section, dict):
            return section
        return DEFAULT_CONFIG[name]

    # ─── Logging Settings ─────────────────────────────────────────────────

    @property
    def log_level(self) -> str:
        """Get the configured log level name."""
        return str(self.get("log_level", "INFO"))

    # ─── Handle Settings ──────────────────────────────────────────────────

    def _positive_number(self, section: str, key: str, default: float) -> float:
        """Read a number that must be > 0, falling back to default."""
        value = self._section(section).get(key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            self._logger.warning(f"Invalid {section}.{key} {value!r}. Using {default}.")
            return default
        return value

    @property
    def node_width(self) -> float:
        """Get the handle side length in logical units."""
        return self._positive_number("handles", "node_width", DEFAULT_NODE_WIDTH)

    @property
    def node_color(self) -> str:
        """Get the handle fill color as a color name."""
        value = self._section("handles").get("node_color", DEFAULT_NODE_COLOR)
        if not isinstance(value, str) or not QColor(value).isValid():
            self._logger.warning(
                f"Invalid handles.node_color {value!r}. Using {DEFAULT_NODE_COLOR}."
            )
            return DEFAULT_NODE_COLOR
        return value

    # ─── Canvas Settings ──────────────────────────────────────────────────

    @property
    def zoom_limits(self) -> Tuple[float, float]:
        """
        Get the (min, max) zoom limits of the canvas.

        Invalid values fall back to the defaults; so does a minimum above
        the maximum.
        """
        min_zoom = self._positive_number("canvas", "min_zoom", DEFAULT_MIN_ZOOM)
        max_zoom = self._positive_number("canvas", "max_zoom", DEFAULT_MAX_ZOOM)
        if min_zoom > max_zoom:
            self._logger.warning(
                f"Zoom limits inverted ({min_zoom} > {max_zoom}). "
                f"Using {DEFAULT_MIN_ZOOM}-{DEFAULT_MAX_ZOOM}."
            )
            return DEFAULT_MIN_ZOOM, DEFAULT_MAX_ZOOM
        return float(min_zoom), float(max_zoom)
