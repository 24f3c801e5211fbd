"""
Structured logging and log routing.

This module provides contextual structured logging with performance timing,
and a logging handler that writes records into a rotating log file.
"""

from .structured_logger import StructuredLogger, ContextLogger, timed
from .handler import RotateFileHandler, setup_logging

__all__ = [
    'StructuredLogger',
    'ContextLogger',
    'RotateFileHandler',
    'setup_logging',
    'timed'
]
