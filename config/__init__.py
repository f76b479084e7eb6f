"""
Configuration for the Invoice Scan pipeline.

Settings live in one YAML file (config/settings.yaml by default, or the
file named by $INVOICE_SCAN_CONFIG). Every value read through get_config
has a code default at the call site, so a settings file only needs the
keys it changes.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from invoice_scan.utils.exceptions import ConfigurationError

# Environment variable that points at an alternative settings file
CONFIG_ENV_VAR = "INVOICE_SCAN_CONFIG"

DEFAULT_SETTINGS = Path(__file__).parent / "settings.yaml"


class ConfigurationManager:
    """
    Process-wide settings, loaded once.

    The first instantiation decides which file is read; later calls
    return the same instance until reset() is called.

    Attributes:
        config_path (Path): Settings file in use.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("vendor.markers")
        ['T.MYHRVOLD', 'T. MYHRVOLD', 'MYHRVOLD AS']
    """

    _instance: Optional['ConfigurationManager'] = None

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Args:
            config_path: Settings file. Defaults to $INVOICE_SCAN_CONFIG,
                then the packaged settings.yaml.
        """
        if self._initialized:
            return

        config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
        self.config_path = Path(config_path) if config_path else DEFAULT_SETTINGS
        self._config = self._load(self.config_path)
        self._initialized = True

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        """
        Read and check a settings file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the file is not a YAML mapping.
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                settings = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(str(path), f"invalid YAML: {e}")

        if settings is None:
            return {}
        if not isinstance(settings, dict):
            raise ConfigurationError(
                str(path), f"expected a mapping, got {type(settings).__name__}"
            )
        return settings

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a value by dotted key ("vendor.codes.labor_prefix").

        Returns the default when any part of the key is missing or when
        the path runs into a non-mapping value.
        """
        value: Any = self._config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next access reads the file again."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ConfigurationManager().get(key, default)."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
