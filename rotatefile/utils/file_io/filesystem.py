"""
Filesystem access used by the rotation controller and the retention engine.

All path operations go through a FileSystem instance so tests can inject
failures or observe calls without patching the os module.
"""

import os
import stat
from typing import List


class FileSystem:
    """Thin wrapper around the os calls rotatefile relies on."""

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def rename(self, src: str, dst: str) -> None:
        os.rename(src, dst)

    def remove(self, path: str) -> None:
        os.remove(path)

    def makedirs(self, path: str) -> None:
        os.makedirs(path, mode=0o755, exist_ok=True)

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def list_files(self, directory: str) -> List[os.DirEntry]:
        """
        List regular entries of a directory.

        Raises:
            OSError: If the directory cannot be read
        """
        with os.scandir(directory) as entries:
            return [entry for entry in entries if not entry.is_dir()]

    def open_append(self, path: str):
        """Open an existing file for unbuffered appending."""
        return open(path, "ab", buffering=0)

    def create(self, path: str, mode: int):
        """
        Create (or truncate) a file for unbuffered appending.

        The permission bits are applied explicitly so the process umask
        cannot strip them.
        """
        fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC | os.O_APPEND, mode)
        try:
            os.chmod(path, stat.S_IMODE(mode))
        except OSError:
            os.close(fd)
            raise
        return os.fdopen(fd, "ab", buffering=0)
