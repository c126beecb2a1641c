"""Configuration loader for YAML files.

Aircraft wiring, simulation settings and logging are all described in YAML.
This module loads those files and offers dot-notation access, including
unit-aware reads of physical quantities.

Typical usage example:
    from aerotwin.core.config import ConfigLoader

    config = ConfigLoader.load("config/aircraft/e170.yaml")
    limit = config.get_quantity("aircraft.electrical.overcurrent_limit", "ampere", 20.0)
"""

from pathlib import Path
from typing import Any

import pint
import yaml

from aerotwin.core.logging_system import get_logger
from aerotwin.core.units import parse_quantity

logger = get_logger(__name__)


class ConfigError(Exception):
    """Raised when configuration operations fail."""


class ConfigLoader:
    """Configuration loader for YAML files.

    Provides loading, nested access, and default values for configuration.

    Examples:
        >>> config = ConfigLoader.load("config/aircraft/e170.yaml")
        >>> name = config.get("aircraft.name", default="Unknown")
    """

    def __init__(self, data: dict[str, Any]) -> None:
        """Initialize with configuration data.

        Args:
            data: Configuration dictionary.
        """
        self._data = data

    @classmethod
    def load(cls, path: str | Path) -> "ConfigLoader":
        """Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            ConfigLoader instance with loaded data.

        Raises:
            ConfigError: If the file is missing, unreadable or not a mapping.
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")

        logger.info("Loaded configuration from: %s", path)
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value using dot notation.

        Args:
            key: Configuration key (supports dot notation).
            default: Default value if key not found.

        Returns:
            Configuration value or default.

        Examples:
            >>> delay = config.get("aircraft.electrical.generator_start.delay_s", 3.0)
        """
        keys = key.split(".")
        value = self._data

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_quantity(self, key: str, unit: str, default: Any = None) -> pint.Quantity | None:
        """Get a physical quantity using dot notation.

        Plain numbers are read in ``unit``; strings such as ``"15 A"`` are
        parsed and converted.

        Args:
            key: Configuration key (supports dot notation).
            unit: Unit the value is expressed in (e.g. ``"ampere"``).
            default: Value used when the key is missing (number or string).

        Returns:
            The quantity, or None if the key is missing and no default is given.

        Raises:
            ConfigError: If the stored value is not a valid quantity.
        """
        value = self.get(key, default)
        if value is None:
            return None

        try:
            return parse_quantity(value, unit)
        except ValueError as e:
            raise ConfigError(f"Invalid value for '{key}': {e}") from e

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value using dot notation.

        Args:
            key: Configuration key (supports dot notation).
            value: Value to set.
        """
        keys = key.split(".")
        data = self._data

        for k in keys[:-1]:
            if k not in data:
                data[k] = {}
            data = data[k]

        data[keys[-1]] = value

    def get_section(self, key: str) -> dict[str, Any]:
        """Get an entire configuration section.

        Args:
            key: Section key (supports dot notation).

        Returns:
            Configuration section as dictionary.

        Raises:
            ConfigError: If section not found or not a dict.
        """
        value = self.get(key)

        if value is None:
            raise ConfigError(f"Configuration section not found: {key}")

        if not isinstance(value, dict):
            raise ConfigError(f"Configuration key is not a section: {key}")

        return value

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file.

        Args:
            path: Path to save configuration.

        Raises:
            ConfigError: If save fails.
        """
        path = Path(path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            with path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(self._data, f, default_flow_style=False, sort_keys=False)

            logger.info("Saved configuration to: %s", path)

        except Exception as e:
            raise ConfigError(f"Failed to save configuration: {e}") from e

    def merge(self, other: "ConfigLoader") -> None:
        """Merge another configuration into this one.

        Args:
            other: ConfigLoader to merge from. Its values win.
        """
        self._data = self._merge_dicts(self._data, other._data)

    def _merge_dicts(self, base: dict, override: dict) -> dict:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value

        return result

    def to_dict(self) -> dict[str, Any]:
        """Get the configuration as a dictionary.

        Returns:
            Configuration dictionary.
        """
        return self._data.copy()
