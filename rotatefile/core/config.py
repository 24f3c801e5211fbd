"""
Centralized configuration management system.

This module loads RotateConfig values from ``LOG_*`` environment variables,
optionally read from a .env file, and validates them with clear error
messages. The environment carries operational defaults (30 days of backups,
compression on, a 1 GiB total cap) that differ from the zero-value
defaults of RotateConfig itself.
"""

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv

from ..types.models import RotateConfig, LogLevel
from ..utils.bytesize import parse_bytes
from ..utils.logging.structured_logger import StructuredLogger, parse_level
from ..utils.signals import parse_signals
from .exceptions import ConfigurationError, ValidationError

_TRUE_VALUES = ('yes', 'y', '1', 'on', 'true', 't')
_FALSE_VALUES = ('no', 'n', '0', 'off', 'false', 'f')


def parse_bool(value: str) -> bool:
    """
    Parse a yes/no style flag.

    Raises:
        ValueError: If the value is not a recognised boolean
    """
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean: {value}")


def _stdout_is_tty() -> str:
    try:
        return 'true' if sys.stdout.isatty() else 'false'
    except (AttributeError, ValueError):
        return 'false'


class ConfigManager:
    """
    Configuration manager with validation and type safety.

    Reads every supported ``LOG_*`` variable, converts it according to
    VAR_TYPES and reports all invalid values at once.
    """

    # Environment variables with their default values
    OPTIONAL_VARS: Dict[str, Any] = {
        'LOG_FILENAME': '',
        'LOG_PREFIX': '',
        'LOG_ROTATE_SIGNALS': 'SIGHUP',
        'LOG_MAX_SIZE': '100MiB',
        'LOG_MAX_DAYS': '30',
        'LOG_MAX_BACKUPS': '0',
        'LOG_TOTAL_SIZE_CAP': '1GiB',
        'LOG_MIN_DISK_FREE': '100MiB',
        'LOG_UTCTIME': 'false',
        'LOG_COMPRESS': 'true',
        'LOG_PRINT_TERM': _stdout_is_tty,
        'LOG_LEVEL': 'INFO'
    }

    # Environment variable to RotateConfig field
    FIELD_NAMES = {
        'LOG_FILENAME': 'filename',
        'LOG_PREFIX': 'prefix',
        'LOG_ROTATE_SIGNALS': 'rotate_signals',
        'LOG_MAX_SIZE': 'max_size',
        'LOG_MAX_DAYS': 'max_days',
        'LOG_MAX_BACKUPS': 'max_backups',
        'LOG_TOTAL_SIZE_CAP': 'total_size_cap',
        'LOG_MIN_DISK_FREE': 'min_disk_free',
        'LOG_UTCTIME': 'utc_time',
        'LOG_COMPRESS': 'compress',
        'LOG_PRINT_TERM': 'print_term'
    }

    # Environment variable converters for validation
    VAR_TYPES: Dict[str, Callable[[str], Any]] = {
        'LOG_FILENAME': str,
        'LOG_PREFIX': str,
        'LOG_ROTATE_SIGNALS': parse_signals,
        'LOG_MAX_SIZE': parse_bytes,
        'LOG_MAX_DAYS': int,
        'LOG_MAX_BACKUPS': int,
        'LOG_TOTAL_SIZE_CAP': parse_bytes,
        'LOG_MIN_DISK_FREE': parse_bytes,
        'LOG_UTCTIME': parse_bool,
        'LOG_COMPRESS': parse_bool,
        'LOG_PRINT_TERM': parse_bool,
        'LOG_LEVEL': parse_level
    }

    def __init__(self, env_file_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            env_file_path: Optional path to .env file. If not provided,
                          config/.env in the working directory is used
                          when present.
        """
        self._config: Optional[RotateConfig] = None
        self._log_level: LogLevel = LogLevel.INFO
        self._env_file_path = env_file_path
        self._logger = StructuredLogger("rotatefile.config")
        self._load_environment(env_file_path)

    def _load_environment(self, env_file_path: Optional[str] = None) -> None:
        if env_file_path:
            env_path = Path(env_file_path)
        else:
            env_path = Path.cwd() / 'config' / '.env'

        if env_path.exists():
            load_dotenv(dotenv_path=env_path)
        elif env_file_path:
            self._logger.warning("Environment file not found", path=env_path)

    def load_config(self, **overrides: Any) -> RotateConfig:
        """
        Load and validate configuration from environment variables.

        Args:
            **overrides: RotateConfig fields that replace environment values

        Returns:
            RotateConfig: Validated configuration object

        Raises:
            ConfigurationError: If any value is invalid
        """
        if self._config is not None and not overrides:
            return self._config

        config_data = self._extract_config_values()
        try:
            config = dataclasses.replace(RotateConfig(**config_data), **overrides)
        except TypeError as e:
            raise ConfigurationError(
                f"Invalid configuration override: {e}",
                env_file_path=self._env_file_path
            )

        try:
            config.validate()
        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e.message}",
                validation_errors=[e.message],
                env_file_path=self._env_file_path
            )

        if not overrides:
            self._config = config
        return config

    def _extract_config_values(self) -> Dict[str, Any]:
        """
        Extract and convert configuration values from environment variables.

        Raises:
            ConfigurationError: If any values are invalid
        """
        config_data: Dict[str, Any] = {}
        invalid_values: Dict[str, Any] = {}

        for env_var, default_value in self.OPTIONAL_VARS.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                env_value = default_value() if callable(default_value) else default_value

            try:
                value = self.VAR_TYPES[env_var](env_value)
            except (ValueError, TypeError):
                invalid_values[env_var] = env_value
                continue

            if env_var == 'LOG_LEVEL':
                self._log_level = value
            elif isinstance(value, int) and not isinstance(value, bool) and value < 0:
                invalid_values[env_var] = env_value
            else:
                config_data[self.FIELD_NAMES[env_var]] = value

        if invalid_values:
            raise ConfigurationError(
                f"Invalid values for environment variables: {invalid_values}. "
                f"Please check the data types and formats.",
                invalid_values=invalid_values,
                env_file_path=self._env_file_path
            )

        return config_data

    @property
    def log_level(self) -> LogLevel:
        """Level selected by LOG_LEVEL, read by the last load."""
        return self._log_level

    def get_config(self) -> RotateConfig:
        """
        Get the current configuration.

        Raises:
            ConfigurationError: If configuration hasn't been loaded yet
        """
        if self._config is None:
            raise ConfigurationError("Configuration not loaded. Call load_config() first.")
        return self._config

    def reload_config(self) -> RotateConfig:
        """Reload configuration from the .env file and environment."""
        self._load_environment(self._env_file_path)
        self._config = None
        return self.load_config()

    def get_config_summary(self) -> Dict[str, Any]:
        """Summary of the current configuration for logging."""
        if not self._config:
            return {'status': 'not_loaded'}

        return {
            'status': 'loaded',
            'log_level': self._log_level.value,
            'values': self._config.to_dict()
        }

    @staticmethod
    def create_example_env_file(file_path: str = "config/.env.example") -> None:
        """
        Create an example .env file listing every supported variable.

        Args:
            file_path: Path where to create the example file
        """
        env_path = Path(file_path)
        env_path.parent.mkdir(parents=True, exist_ok=True)

        content = [
            "# rotatefile Configuration",
            "# Copy this file to .env and uncomment the values you want to change",
            "",
            "# Log file location",
            "# LOG_FILENAME=  # file path, or a directory; empty to discover one",
            "# LOG_PREFIX=",
            "",
            "# Rotation",
            "# LOG_MAX_SIZE=100MiB",
            "# LOG_ROTATE_SIGNALS=SIGHUP  # Options: SIGHUP, SIGUSR1, SIGUSR2",
            "# LOG_UTCTIME=false",
            "",
            "# Retention",
            "# LOG_MAX_DAYS=30",
            "# LOG_MAX_BACKUPS=0",
            "# LOG_COMPRESS=true",
            "# LOG_TOTAL_SIZE_CAP=1GiB",
            "# LOG_MIN_DISK_FREE=100MiB",
            "",
            "# Output",
            "# LOG_PRINT_TERM=false",
            "# LOG_LEVEL=INFO  # Options: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        ]

        with open(env_path, 'w') as f:
            f.write('\n'.join(content) + '\n')


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(**overrides: Any) -> RotateConfig:
    """Load configuration using the global configuration manager."""
    return get_config_manager().load_config(**overrides)
