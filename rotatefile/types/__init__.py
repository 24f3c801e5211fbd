"""
Type definitions and data models for rotatefile.
"""

from .models import (
    # Configuration types
    RotateConfig,
    RetentionPolicy,

    # Retention types
    BackupInfo,
    MillPlan,
    MillReport,

    # System types
    DiskUsage,
    LogLevel,

    # Size units
    KB,
    MB,
    GB,
    DEFAULT_MAX_SIZE
)

__all__ = [
    'RotateConfig',
    'RetentionPolicy',
    'BackupInfo',
    'MillPlan',
    'MillReport',
    'DiskUsage',
    'LogLevel',
    'KB',
    'MB',
    'GB',
    'DEFAULT_MAX_SIZE'
]
