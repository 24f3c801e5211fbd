"""
Data models and type definitions for rotatefile.

This module defines the data structures shared by the rotation controller,
the retention engine and the configuration layer, with proper type hints
for better type safety and code clarity.
"""

import signal
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any

from ..core.exceptions import ValidationError

# Size units
KB = 1024
MB = 1024 * KB
GB = 1024 * MB

DEFAULT_MAX_SIZE = 100 * MB
COMPRESS_SUFFIX = ".gz"


class LogLevel(Enum):
    """Logging levels for structured logging."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Retention rules applied to the backups of one log file.

    A zero value disables the corresponding rule.
    """
    max_backups: int = 0
    max_days: int = 0
    total_size_cap: int = 0
    min_disk_free: int = 0
    compress: bool = False

    @property
    def has_backup_rules(self) -> bool:
        """Whether count, age or compression rules apply."""
        return self.max_backups > 0 or self.max_days > 0 or self.compress


@dataclass
class RotateConfig:
    """
    Type-safe configuration for a rotating log file.

    Defaults are the zero values: no retention, no compression, and a
    maximum file size of 0 which means the built-in 100 MiB default.
    Environment-driven defaults live in ConfigManager.
    """
    filename: str = ""
    prefix: str = ""
    rotate_signals: List[signal.Signals] = field(default_factory=list)

    max_size: int = 0
    max_days: int = 0
    max_backups: int = 0
    total_size_cap: int = 0
    min_disk_free: int = 0

    utc_time: bool = False
    compress: bool = False
    print_term: bool = False

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValidationError: If any configuration value is invalid
        """
        for field_name in ['max_size', 'max_days', 'max_backups',
                           'total_size_cap', 'min_disk_free']:
            value = getattr(self, field_name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValidationError(
                    f"{field_name} must be an integer, got {type(value).__name__}",
                    field_name=field_name,
                    expected_type="int",
                    actual_value=value
                )
            if value < 0:
                raise ValidationError(
                    f"{field_name} cannot be negative",
                    field_name=field_name,
                    actual_value=value
                )

        for sig in self.rotate_signals:
            if not isinstance(sig, signal.Signals):
                raise ValidationError(
                    f"rotate_signals entries must be signal.Signals, got {sig!r}",
                    field_name="rotate_signals",
                    expected_type="signal.Signals",
                    actual_value=sig
                )

    @property
    def effective_max_size(self) -> int:
        """Maximum size in bytes of the active file before rolling."""
        return self.max_size or DEFAULT_MAX_SIZE

    def retention_policy(self) -> RetentionPolicy:
        """Retention rules derived from this configuration."""
        return RetentionPolicy(
            max_backups=self.max_backups,
            max_days=self.max_days,
            total_size_cap=self.total_size_cap,
            min_disk_free=self.min_disk_free,
            compress=self.compress
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        result = asdict(self)
        result['rotate_signals'] = [sig.name for sig in self.rotate_signals]
        return result


@dataclass(frozen=True)
class BackupInfo:
    """A rotated-out log file found in the log directory."""
    name: str
    timestamp: datetime
    size: int = 0

    @property
    def compressed(self) -> bool:
        return self.name.endswith(COMPRESS_SUFFIX)

    @property
    def logical_name(self) -> str:
        """Name without the compression suffix; a backup and its .gz share it."""
        if self.compressed:
            return self.name[:-len(COMPRESS_SUFFIX)]
        return self.name


@dataclass
class MillPlan:
    """Backups selected for deletion and compression by one retention pass."""
    remove: List[BackupInfo] = field(default_factory=list)
    compress: List[BackupInfo] = field(default_factory=list)


@dataclass
class MillReport:
    """Outcome of one retention pass."""
    removed: List[str] = field(default_factory=list)
    compressed: List[str] = field(default_factory=list)
    evicted: List[str] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)

    @property
    def last_error(self) -> Optional[Exception]:
        """The most recent failure of the pass, if any."""
        return self.errors[-1] if self.errors else None

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            'removed': len(self.removed),
            'compressed': len(self.compressed),
            'evicted': len(self.evicted),
            'errors': len(self.errors)
        }


@dataclass(frozen=True)
class DiskUsage:
    """Filesystem usage snapshot for the partition holding a path."""
    size: int
    used: int
    free: int
    available: int

    @property
    def usage(self) -> float:
        """Fraction of the partition in use (0.0 - 1.0)."""
        if self.size == 0:
            return 0.0
        return self.used / self.size
