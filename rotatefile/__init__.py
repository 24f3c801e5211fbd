"""
rotatefile: size-bounded rolling log files with background retention.

Quick start::

    from rotatefile import RotateFile, setup_logging, MB

    log_file = RotateFile(filename="/var/log/myapp/app.log", max_size=10 * MB,
                          max_backups=5, compress=True)
    setup_logging(log_file)
"""

# exceptions must load before the models that raise them
from .core.exceptions import (
    RotateFileError,
    ConfigurationError,
    ValidationError,
    WriteTooLargeError,
    RotationError,
    CompressionError,
    MillError
)
from .core import RotateFile, Mill, ConfigManager, load_config
from .types import RotateConfig, RetentionPolicy, MillReport, LogLevel, KB, MB, GB
from .utils.logging import setup_logging, RotateFileHandler
from .utils.logdir import get_filename

__version__ = "1.0.0"

__all__ = [
    'RotateFile',
    'RotateConfig',
    'RetentionPolicy',
    'Mill',
    'MillReport',
    'ConfigManager',
    'load_config',
    'setup_logging',
    'RotateFileHandler',
    'get_filename',
    'LogLevel',
    'KB',
    'MB',
    'GB',
    'RotateFileError',
    'ConfigurationError',
    'ValidationError',
    'WriteTooLargeError',
    'RotationError',
    'CompressionError',
    'MillError'
]
