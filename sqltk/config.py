# sqltk/config.py
"""
Configuration management for sqltk.
Supports YAML configuration files holding global settings that override the
built-in defaults in :mod:`sqltk.defaults`.
"""

import copy
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List

from .defaults import settings

try:
    import yaml
except ImportError:
    raise ImportError("PyYAML is required. Install with: pip install PyYAML")

logger = logging.getLogger(__name__)

# pristine copy so tests and callers can restore built-in behaviour
_BUILTIN_SETTINGS = copy.deepcopy(settings)
_config_manager = None


def _merge_settings(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    """Recursively merge source into target, keeping nested dict keys not present in source."""
    for key, val in source.items():
        if isinstance(val, dict) and isinstance(target.get(key), dict):
            _merge_settings(target[key], val)
        else:
            target[key] = val


class ConfigManager:
    """
    Manage sqltk configuration from YAML files.

    Configuration File Structure
    ----------------------------
    ::

        # sqltk.yml
        settings:
          capitalize_sql: false
          undefined_as_null: true
          logging:
            level: DEBUG
            directory: /var/log/etl

    Configuration Locations
    -----------------------
    ConfigManager searches for configuration files in this order:

    1. File specified in config_file parameter
    2. ``./sqltk.yml`` (current directory)
    3. ``./sqltk.yaml`` (current directory)
    4. ``~/.config/sqltk.yml`` (user config directory)
    5. ``~/.config/sqltk.yaml`` (user config directory)

    Unlike a connection config, a settings file is optional. When none is
    found the built-in defaults are used as-is.

    Attributes
    ----------
    config_file : Path or None
        Path to the loaded configuration file
    config : dict
        Parsed configuration dictionary

    Example
    -------
    ::

        from sqltk.config import ConfigManager

        config_mgr = ConfigManager('/etc/sqltk/production.yml')
        config_mgr.get_setting('logging.level')    # 'INFO'
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize config manager and load configuration.

        Raises
        ------
        FileNotFoundError
            If config_file is given and does not exist
        ValueError
            If config file is invalid or malformed
        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config() if self.config_file else {}

        # Apply global settings
        self._apply_settings()

    @staticmethod
    def _candidates() -> List[Path]:
        return [
            Path("sqltk.yml"),
            Path("sqltk.yaml"),
            Path.home() / ".config" / "sqltk.yml",
            Path.home() / ".config" / "sqltk.yaml"
        ]

    def _find_config_file(self, config_file: Optional[str]) -> Optional[Path]:
        """Find the configuration file."""
        if config_file:
            path = Path(config_file)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {config_file}")
            return path

        for candidate in self._candidates():
            if candidate.exists():
                return candidate

        logger.debug("No sqltk config file found, using built-in settings")
        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load and validate configuration file."""
        try:
            with open(self.config_file, 'r') as f:
                config = yaml.safe_load(f) or {}
            if not isinstance(config, dict):
                raise ValueError(f"Invalid config file {self.config_file}.")

            if 'settings' in config:
                if not isinstance(config['settings'], dict):
                    raise ValueError(f"Invalid config file {self.config_file}: 'settings' must be a dictionary")

            logger.info(f"Loaded config from {self.config_file}")
            return config
        except Exception as e:
            raise ValueError(f"Failed to load config file {self.config_file}: {e}")

    def _apply_settings(self) -> None:
        """Apply global settings from config."""
        config_settings = self.config.get('settings', {})
        _merge_settings(settings, config_settings)

    def get_setting(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value, falling back to the built-in defaults.

        Args:
            key: Setting key (supports dot notation like 'logging.level')
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        keys = key.split('.')
        value = settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set_setting(self, key: str, value: Any) -> None:
        """
        Set a setting value and save config if it was loaded from a file.

        Args:
            key: Setting key (supports dot notation)
            value: Setting value
        """
        file_settings = self.config.setdefault('settings', {})

        keys = key.split('.')
        current = file_settings

        for k in keys[:-1]:
            current = current.setdefault(k, {})

        current[keys[-1]] = value
        if self.config_file:
            self._save_config()

        # Re-apply settings
        self._apply_settings()

    def _save_config(self) -> None:
        """Write the current configuration back to the loaded file."""
        try:
            with open(self.config_file, 'w') as f:
                yaml.safe_dump(self.config, f, default_flow_style=False, sort_keys=False)
            logger.info(f"Saved config to {self.config_file}")
        except Exception as e:
            raise ValueError(f"Failed to save config file {self.config_file}: {e}")


def _get_manager() -> ConfigManager:
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def set_config_file(config_file: str) -> None:
    """Set the configuration file to use globally."""
    global _config_manager
    _config_manager = ConfigManager(config_file)


def get_setting(key: str, default: Any = None, config_file: Optional[str] = None) -> Any:
    """
    Get a setting value from configuration.

    Args:
        key: Setting key (supports dot notation like 'logging.level')
        default: Default value if key not found
        config_file: Optional path to config file

    Returns:
        Setting value or default

    Example:
        capitalize = get_setting('capitalize_sql', True)
        level = get_setting('logging.level', 'INFO')
    """
    if config_file:
        config_mgr = ConfigManager(config_file)
    else:
        config_mgr = _get_manager()

    return config_mgr.get_setting(key, default)


def reset_settings() -> None:
    """Restore built-in settings and forget any loaded config file."""
    global _config_manager
    _config_manager = None
    settings.clear()
    settings.update(copy.deepcopy(_BUILTIN_SETTINGS))
