"""
Retention engine for rotated backups.

A mill pass runs off the write path after each rotation:

1. List the backups next to the active file (newest first).
2. Mark backups beyond ``max_backups`` for removal; a plain backup and its
   ``.gz`` count as one.
3. Mark backups older than ``max_days`` for removal.
4. Queue the remaining uncompressed backups for compression.
5. Remove, then compress, attempting every item regardless of failures.
6. If a total size cap is set, or free disk space is below the floor,
   delete the oldest backups until both limits hold.
"""

import os
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Set

from ..types.models import BackupInfo, MillPlan, MillReport, RetentionPolicy
from ..utils.clock import SystemClock
from ..utils.disk_usage import PsutilDiskProbe
from ..utils.file_io.compressor import compress_file
from ..utils.file_io.filesystem import FileSystem
from ..utils.logging.structured_logger import StructuredLogger, timed
from ..utils.naming import parse_backup_name, split_name
from .exceptions import MillError, RotationError


class Mill:
    """
    Applies a RetentionPolicy to the backups of one log file.

    The mill never touches the active file; it only reads its size through
    ``active_size`` when enforcing the total size cap.

    Attributes:
        filename (str): Path of the active log file
        policy (RetentionPolicy): Rules to enforce
        logger (StructuredLogger): Side channel for pass results
    """

    def __init__(
        self,
        filename: str,
        policy: RetentionPolicy,
        active_size: Callable[[], int] = lambda: 0,
        clock=None,
        fs: Optional[FileSystem] = None,
        disk_probe=None,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize a retention engine.

        Args:
            filename: Path of the active log file
            policy: Retention rules
            active_size: Returns the current size of the active file
            clock: Time source with a ``now()`` method
            fs: Filesystem access
            disk_probe: Free space source with a ``free_bytes(path)`` method
            logger: Logger instance (optional)
        """
        self.filename = filename
        self.directory = os.path.dirname(filename)
        self.policy = policy
        self.active_size = active_size
        self.clock = clock or SystemClock()
        self.fs = fs or FileSystem()
        self.disk_probe = disk_probe or PsutilDiskProbe()
        self.logger = logger or StructuredLogger("rotatefile.mill")
        self._prefix, self._ext = split_name(filename)

    def list_backups(self) -> List[BackupInfo]:
        """
        List backups of the active file, newest first.

        Files whose names do not decode as backups are ignored.

        Raises:
            MillError: If the log directory cannot be read
        """
        try:
            entries = self.fs.list_files(self.directory)
        except OSError as e:
            raise MillError(
                f"can't read log file directory: {e}",
                directory=self.directory,
                operation="list",
                original_error=e
            )

        active = os.path.basename(self.filename)
        backups = []
        for entry in entries:
            if entry.name == active:
                continue
            parsed = parse_backup_name(entry.name, self._prefix, self._ext)
            if parsed is None:
                continue
            try:
                size = entry.stat().st_size
            except OSError:
                size = 0
            backups.append(BackupInfo(name=entry.name, timestamp=parsed[0], size=size))

        backups.sort(key=lambda b: b.timestamp, reverse=True)
        return backups

    def plan(self, backups: List[BackupInfo], now: Optional[datetime] = None) -> MillPlan:
        """
        Select backups to remove and compress.

        Args:
            backups: Backups sorted newest first
            now: Reference time for the age cap (default: clock)
        """
        plan = MillPlan()
        policy = self.policy
        remaining = list(backups)

        if policy.max_backups > 0:
            preserved: Set[str] = set()
            kept = []
            for backup in remaining:
                preserved.add(backup.logical_name)
                if len(preserved) > policy.max_backups:
                    plan.remove.append(backup)
                else:
                    kept.append(backup)
            remaining = kept

        if policy.max_days > 0:
            cutoff = (now or self.clock.now()) - timedelta(days=policy.max_days)
            kept = []
            for backup in remaining:
                if backup.timestamp < cutoff:
                    plan.remove.append(backup)
                else:
                    kept.append(backup)
            remaining = kept

        if policy.compress:
            plan.compress = [b for b in remaining if not b.compressed]

        return plan

    @timed("mill_pass")
    def run_once(self) -> MillReport:
        """
        Run one retention pass.

        Individual failures are collected on the report and never stop the
        pass.

        Raises:
            MillError: If the backup listing is unavailable
        """
        report = MillReport()

        if self.policy.has_backup_rules:
            plan = self.plan(self.list_backups())
            self._apply(plan, report)

        self.enforce_total_size(report)
        return report

    def _apply(self, plan: MillPlan, report: MillReport) -> None:
        for backup in plan.remove:
            path = os.path.join(self.directory, backup.name)
            try:
                self.fs.remove(path)
                report.removed.append(backup.name)
            except FileNotFoundError:
                pass
            except OSError as e:
                report.errors.append(RotationError(
                    f"can't remove backup: {e}",
                    file_path=path,
                    operation="remove",
                    original_error=e
                ))

        for backup in plan.compress:
            path = os.path.join(self.directory, backup.name)
            try:
                compress_file(path, path + ".gz", logger=self.logger.logger)
                report.compressed.append(backup.name)
            except RotationError as e:
                report.errors.append(e)

    def _free_bytes(self) -> Optional[int]:
        """Free space of the log directory's filesystem, None if unknown."""
        try:
            return self.disk_probe.free_bytes(self.directory)
        except OSError as e:
            self.logger.warning(
                "Disk free space unavailable; skipping disk floor this pass",
                error=e,
                directory=self.directory
            )
            return None

    def enforce_total_size(self, report: Optional[MillReport] = None) -> MillReport:
        """
        Delete the oldest backups until the size cap and disk floor hold.

        Runs only when a total size cap is set or free space is below the
        configured floor. The active file counts towards the total but is
        never deleted, so it may exceed the cap on its own.

        Raises:
            MillError: If the backup listing is unavailable
        """
        report = report if report is not None else MillReport()
        cap = self.policy.total_size_cap
        floor = self.policy.min_disk_free

        free = self._free_bytes() if floor > 0 else None
        low_disk = free is not None and free < floor
        if cap <= 0 and not low_disk:
            return report

        backups = self.list_backups()
        total = self.active_size() + sum(b.size for b in backups)

        for backup in reversed(backups):
            size_ok = cap <= 0 or total <= cap
            disk_ok = free is None or free >= floor
            if size_ok and disk_ok:
                break

            path = os.path.join(self.directory, backup.name)
            try:
                self.fs.remove(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                report.errors.append(RotationError(
                    f"can't remove backup: {e}",
                    file_path=path,
                    operation="evict",
                    original_error=e
                ))
                continue

            report.evicted.append(backup.name)
            total -= backup.size
            if free is not None:
                free += backup.size

        return report
