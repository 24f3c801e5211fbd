"""
Rolling log file writer.

RotateFile is meant to sit at the bottom of a logging stack and control the
file logs are written to. It opens or creates the log file on first write.
If the file exists and the write fits under ``max_size`` it is appended to;
otherwise the file is renamed to a timestamped backup and a new file is
created under the original name. Whenever a write would push the file past
``max_size``, the same rotation happens before the write, so the filename
given to RotateFile is always the current log.

After each rotation a background retention pass removes, compresses and
evicts old backups according to the configured limits.

RotateFile assumes it is the only process writing to its files.
"""

import os
import stat
import sys
import threading
from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..types.models import LogLevel, RotateConfig
from ..utils.async_utils.debounced_worker import DebouncedWorker
from ..utils.clock import SystemClock
from ..utils.disk_usage import PsutilDiskProbe
from ..utils.file_io.filesystem import FileSystem
from ..utils.file_lock import FileLock
from ..utils.logdir import resolve_log_filename
from ..utils.logging.structured_logger import StructuredLogger
from ..utils.naming import backup_name
from ..utils.signals import RotateSignalListener
from .exceptions import MillError, RotationError, WriteTooLargeError
from .mill import Mill

DEFAULT_FILE_MODE = 0o600


class RotateFile:
    """
    Size-bounded log file with timestamped backups.

    All writes and rotations are serialized by a single lock. Retention
    runs on one background worker per instance, started lazily.

    Attributes:
        config (RotateConfig): Writer configuration
        logger (StructuredLogger): Logger for lifecycle and retention events
    """

    def __init__(
        self,
        config: Optional[RotateConfig] = None,
        clock=None,
        fs: Optional[FileSystem] = None,
        disk_probe=None,
        logger: Optional[StructuredLogger] = None,
        **overrides: Any
    ):
        """
        Initialize a rotating file. Nothing is opened until the first write.

        Args:
            config: Writer configuration (default: RotateConfig())
            clock: Time source with a ``now()`` method
            fs: Filesystem access
            disk_probe: Free space source for the disk floor
            logger: Logger instance (optional)
            **overrides: RotateConfig fields to override

        Raises:
            ValidationError: If the configuration is invalid
        """
        config = config or RotateConfig()
        if overrides:
            config = RotateConfig(**{**config.__dict__, **overrides})
        config.validate()

        self.config = config
        self.logger = logger or StructuredLogger("rotatefile")
        self._clock = clock or SystemClock(utc=config.utc_time)
        self._fs = fs or FileSystem()
        self._disk_probe = disk_probe or PsutilDiskProbe()

        self._lock = threading.Lock()
        self._file = None
        self._size = 0
        self._filename: Optional[str] = None
        self._file_lock: Optional[FileLock] = None

        self._mill: Optional[Mill] = None
        self._worker: Optional[DebouncedWorker] = None
        self._signal_listener: Optional[RotateSignalListener] = None
        self._signals_pending = False

        # records raised under the lock; emitted after release since a
        # logging handler may route them back into this file
        self._deferred: List[Tuple[LogLevel, str, Dict[str, Any]]] = []

    @classmethod
    def from_env(cls, env_file_path: Optional[str] = None, **overrides: Any) -> "RotateFile":
        """
        Build a RotateFile configured from LOG_* environment variables.

        Args:
            env_file_path: Optional .env file to load first
            **overrides: RotateConfig fields that take precedence over the environment

        Raises:
            ConfigurationError: If an environment value is invalid
        """
        from .config import ConfigManager

        return cls(ConfigManager(env_file_path).load_config(**overrides))

    @property
    def max_size(self) -> int:
        return self.config.effective_max_size

    @property
    def size(self) -> int:
        """Bytes in the active file."""
        with self._lock:
            return self._size

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._file is None

    def current_filename(self) -> str:
        """Absolute path of the active log file."""
        with self._locked():
            return self._resolve_filename()

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            try:
                yield
            finally:
                deferred, self._deferred = self._deferred, []
                install = self._signals_pending
                self._signals_pending = False

        for level, message, context in deferred:
            self.logger.log(level, message, **context)
        if install:
            self._install_signals()

    def _defer_log(self, level: LogLevel, message: str, **context: Any) -> None:
        self._deferred.append((level, message, context))

    def write(self, data: bytes) -> int:
        """
        Append ``data`` to the log, rotating first if it would not fit.

        A write is never split across files.

        Returns:
            Number of bytes written

        Raises:
            WriteTooLargeError: If ``data`` alone exceeds the maximum file size
            RotationError: If opening, rotating or writing fails
        """
        if isinstance(data, str):
            data = data.encode("utf-8")

        if self.config.print_term:
            self._print_term(data)

        with self._locked():
            write_len = len(data)
            if write_len > self.max_size:
                raise WriteTooLargeError(write_len, self.max_size)

            if self._file is None:
                self._open_existing_or_new(write_len)

            if self._size + write_len > self.max_size:
                self._rotate()

            return self._write_all(data)

    def _write_all(self, data: bytes) -> int:
        view = memoryview(data)
        written = 0
        try:
            while written < len(view):
                n = self._file.write(view[written:])
                if not n:
                    break
                written += n
        except OSError as e:
            raise RotationError(
                f"can't write to log file: {e}",
                file_path=self._filename,
                operation="write",
                original_error=e
            )
        finally:
            self._size += written
        return written

    @staticmethod
    def _print_term(data: bytes) -> None:
        stream = getattr(sys.stdout, "buffer", None)
        if stream is not None:
            stream.write(data)
            stream.flush()
        else:
            sys.stdout.write(data.decode("utf-8", errors="replace"))

    def rotate(self) -> None:
        """
        Close the active file, move it aside as a backup and start a new one.

        This is for applications that want to rotate outside the size rule,
        e.g. in response to SIGHUP. A retention pass follows.

        Raises:
            RotationError: If the rename or the new file fails
        """
        with self._locked():
            self._rotate()

    def flush(self) -> None:
        """Flush Python-level buffers of the active file."""
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def sync(self) -> None:
        """
        Commit the active file to disk.

        Worth calling after writing warnings or errors.

        Raises:
            RotationError: If fsync fails
        """
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.flush()
                os.fsync(self._file.fileno())
            except OSError as e:
                raise RotationError(
                    f"can't sync log file: {e}",
                    file_path=self._filename,
                    operation="sync",
                    original_error=e
                )

    def close(self) -> None:
        """
        Release the active file handle and stop background work.

        A pending retention pass still runs before the worker exits. The
        file is reopened by the next write.

        Raises:
            RotationError: If closing the handle fails
        """
        with self._locked():
            worker, self._worker = self._worker, None
            listener, self._signal_listener = self._signal_listener, None
            file_lock, self._file_lock = self._file_lock, None
            try:
                self._close()
            finally:
                if file_lock is not None:
                    # a discovered name is claimed again on the next write
                    file_lock.unlock()
                    self._filename = None

        if listener is not None:
            listener.uninstall()
        if worker is not None:
            worker.stop()

    def wait_for_mill(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no retention pass is pending or running.

        Returns:
            False on timeout
        """
        worker = self._worker
        if worker is None:
            return True
        return worker.wait_idle(timeout)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            stats: Dict[str, Any] = {
                'filename': self._filename,
                'size': self._size,
                'max_size': self.max_size,
                'open': self._file is not None
            }
            worker = self._worker
        if worker is not None:
            stats['mill'] = worker.get_stats()
        return stats

    def __enter__(self) -> "RotateFile":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # The methods below assume the lock is held.

    def _resolve_filename(self) -> str:
        if self._filename is not None:
            return self._filename

        filename = os.path.expanduser(self.config.filename) if self.config.filename else ""
        if filename and not (filename.endswith(os.sep) or os.path.isdir(filename)):
            self._filename = os.path.abspath(filename)
        else:
            self._filename, self._file_lock = resolve_log_filename(
                log_dir=filename,
                prefix=self.config.prefix
            )
        return self._filename

    def _close(self) -> None:
        if self._file is None:
            return
        handle, self._file = self._file, None
        try:
            handle.close()
        except OSError as e:
            raise RotationError(
                f"can't close log file: {e}",
                file_path=self._filename,
                operation="close",
                original_error=e
            )

    def _rotate(self) -> None:
        self._close()
        self._open_new()
        self._trigger_mill()

    def _open_existing_or_new(self, write_len: int) -> None:
        """
        Open the log file for appending if the pending write fits.

        If there is no file, or the write would take it to ``max_size``,
        a new file is created instead.
        """
        self._trigger_mill()

        filename = self._resolve_filename()
        try:
            info = self._fs.stat(filename)
        except FileNotFoundError:
            self._open_new()
            return
        except OSError as e:
            raise RotationError(
                f"error getting log file info: {e}",
                file_path=filename,
                operation="stat",
                original_error=e
            )

        if info.st_size + write_len >= self.max_size:
            self._rotate()
            return

        try:
            self._file = self._fs.open_append(filename)
        except OSError as e:
            # an unreadable old log file is abandoned for a fresh one
            self._defer_log(LogLevel.WARNING, "Can't reopen existing log file, creating a new one", error=e)
            self._open_new()
            return
        self._size = info.st_size

    def _open_new(self) -> None:
        """Move any existing log file aside and create a new one."""
        filename = self._resolve_filename()
        try:
            self._fs.makedirs(os.path.dirname(filename))
        except OSError as e:
            raise RotationError(
                f"can't make directories for new logfile: {e}",
                file_path=filename,
                operation="makedirs",
                original_error=e
            )

        mode = DEFAULT_FILE_MODE
        try:
            info = self._fs.stat(filename)
        except FileNotFoundError:
            info = None
        except OSError as e:
            raise RotationError(
                f"error getting log file info: {e}",
                file_path=filename,
                operation="stat",
                original_error=e
            )

        if info is not None:
            mode = stat.S_IMODE(info.st_mode)
            target = self._unused_backup_name(filename)
            try:
                self._fs.rename(filename, target)
            except OSError as e:
                raise RotationError(
                    f"can't rename log file: {e}",
                    file_path=filename,
                    operation="rename",
                    original_error=e
                )
            self._defer_log(LogLevel.DEBUG, "Rotated log file", backup=os.path.basename(target))

        # truncate: if someone recreated the file since the rename, it is discarded
        try:
            self._file = self._fs.create(filename, mode)
        except OSError as e:
            raise RotationError(
                f"can't open new logfile: {e}",
                file_path=filename,
                operation="create",
                original_error=e
            )
        self._size = 0

    def _unused_backup_name(self, filename: str) -> str:
        """Backup name for now, nudged forward by milliseconds if already taken."""
        t = self._clock.now()
        target = backup_name(filename, t)
        while self._fs.exists(target) or self._fs.exists(target + ".gz"):
            t += timedelta(milliseconds=1)
            target = backup_name(filename, t)
        return target

    def _trigger_mill(self) -> None:
        if self._worker is None:
            filename = self._resolve_filename()
            self._mill = Mill(
                filename,
                self.config.retention_policy(),
                active_size=lambda: self.size,
                clock=self._clock,
                fs=self._fs,
                disk_probe=self._disk_probe,
                logger=self.logger.with_context(log_file=os.path.basename(filename))
            )
            self._worker = DebouncedWorker(
                self._run_mill,
                name=f"rotatefile-mill-{os.path.basename(filename)}",
                logger=self.logger
            )
            self._signals_pending = True
        self._worker.trigger()

    def _install_signals(self) -> None:
        if not self.config.rotate_signals or self._signal_listener is not None:
            return
        listener = RotateSignalListener(self.rotate, self.config.rotate_signals, logger=self.logger)
        if listener.install():
            self._signal_listener = listener

    def _run_mill(self) -> None:
        mill = self._mill
        if mill is None:
            return
        try:
            report = mill.run_once()
        except MillError as e:
            mill.logger.error("Retention pass aborted", error=e, directory=e.directory)
            return
        if report.ok:
            if report.removed or report.compressed or report.evicted:
                mill.logger.info("Retention pass completed", **report.to_dict())
            return
        for error in report.errors:
            mill.logger.warning("Retention pass item failed", error=error)
        mill.logger.error(
            "Retention pass completed with errors",
            error=report.last_error,
            **report.to_dict()
        )
