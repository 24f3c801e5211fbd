"""
Core module for rotatefile.

This module contains the core components including:
- Custom exception classes for better error categorization
- Configuration management system
- The retention engine (mill)
- The rotating file writer
"""

from .exceptions import (
    RotateFileError,
    ConfigurationError,
    ValidationError,
    WriteTooLargeError,
    RotationError,
    CompressionError,
    MillError
)
from .config import ConfigManager, get_config_manager, load_config
from .mill import Mill
from .rotate_file import RotateFile

__all__ = [
    # Writer and retention
    'RotateFile',
    'Mill',

    # Configuration
    'ConfigManager',
    'get_config_manager',
    'load_config',

    # Exception classes
    'RotateFileError',
    'ConfigurationError',
    'ValidationError',
    'WriteTooLargeError',
    'RotationError',
    'CompressionError',
    'MillError'
]
