"""
Log location discovery.

When no explicit log filename is configured, a writable directory is
chosen in this order:

    0. the configured directory
    1. $HOME/log/{app}
    2. $PWD/log/{app}
    3. /var/log/apps/{app}
    4. the system temp directory

and the file is named ``{prefix}{app}_{cwd-base}.log``.
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.exceptions import ConfigurationError
from .file_lock import FileLock

PID = str(os.getpid())
WRITABLE_PROBE = "rotatefile_log_test"


def app_name() -> str:
    return Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "python"


def current_dir_base() -> str:
    try:
        return "_" + Path.cwd().name
    except OSError:
        return ""


def home_dir() -> Optional[Path]:
    """Home directory of the current user; some service users have none."""
    try:
        return Path.home()
    except (KeyError, RuntimeError):
        return None


def is_dir_writable(directory: Path) -> bool:
    """Create ``directory`` if needed and check a file can be written in it."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryFile(dir=directory) as probe:
            return probe.write(WRITABLE_PROBE.encode()) == len(WRITABLE_PROBE)
    except OSError:
        return False


def candidate_dirs(log_dir: str = "") -> List[Path]:
    app = app_name()
    candidates = []
    if log_dir:
        candidates.append(Path(log_dir).expanduser())
    home = home_dir()
    if home is not None:
        candidates.append(home / "log" / app)
    try:
        candidates.append(Path.cwd() / "log" / app)
    except OSError:
        pass
    candidates.append(Path("/var/log/apps") / app)
    candidates.append(Path(tempfile.gettempdir()))
    return candidates


def find_log_dir(log_dir: str = "") -> Optional[Path]:
    """Return the first writable candidate directory, or None."""
    for candidate in candidate_dirs(log_dir):
        if is_dir_writable(candidate):
            return candidate
    return None


def _record_file() -> Path:
    return Path(tempfile.gettempdir()) / f"{PID}.logfile"


def record_filename(filename: str) -> None:
    """Append the resolved log filename to this process's record file."""
    try:
        with open(_record_file(), "a", encoding="utf-8") as f:
            f.write(filename + "\n")
    except OSError:
        pass


def get_filename() -> str:
    """Return the log filename most recently resolved by this process."""
    try:
        lines = _record_file().read_text(encoding="utf-8").splitlines()
    except OSError:
        return ""
    return lines[-1] if lines else ""


def resolve_log_filename(
    log_dir: str = "",
    prefix: str = "",
    log_name: str = "",
    try_lock: bool = True
) -> Tuple[str, Optional[FileLock]]:
    """
    Pick the log file path for this process.

    If another process already holds the lock for the chosen name, the
    process id is embedded in the name instead of waiting for the lock.

    Returns:
        ``(absolute filename, held lock or None)``

    Raises:
        ConfigurationError: If no writable log directory exists
    """
    directory = find_log_dir(log_dir)
    if directory is None:
        raise ConfigurationError(
            "No writable log directory found",
            validation_errors=[str(p) for p in candidate_dirs(log_dir)]
        )

    if not log_name:
        log_name = f"{app_name()}{current_dir_base()}.log"

    lock = None
    if try_lock:
        lock = FileLock(str(directory / f"{log_name}.lock"))
        try:
            acquired = lock.try_lock()
        except OSError:
            acquired = False
        if not acquired:
            stem, ext = os.path.splitext(log_name)
            log_name = f"{stem}.{PID}{ext}"
            lock = None

    filename = str((directory / f"{prefix}{log_name}").absolute())
    record_filename(filename)
    return filename, lock
