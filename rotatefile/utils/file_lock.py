"""
Advisory inter-process file lock.

Used once while resolving the log filename to detect a second process
writing to the same log.
"""

import os
from typing import Optional

try:
    import fcntl
except ImportError:  # pragma: no cover
    fcntl = None


class FileLock:
    """Non-blocking exclusive ``flock`` on a lock file."""

    def __init__(self, path: str):
        self.path = path
        self._handle = None

    @property
    def locked(self) -> bool:
        return self._handle is not None

    def try_lock(self) -> bool:
        """
        Try to take the lock without blocking.

        Returns:
            True if this process now holds the lock. Always True where
            flock is unavailable.

        Raises:
            OSError: If the lock file cannot be opened
        """
        if self._handle is not None:
            return True

        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        handle = open(self.path, "a+")
        if fcntl is None:
            self._handle = handle
            return True
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            handle.close()
            return False
        self._handle = handle
        return True

    def unlock(self) -> None:
        handle: Optional[object] = self._handle
        if handle is None:
            return
        self._handle = None
        if fcntl is not None:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        handle.close()

    def __enter__(self) -> "FileLock":
        self.try_lock()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unlock()
