"""
Disk space queries for the log directory's filesystem.

Backed by psutil so the same code works on every platform psutil supports.
"""

import psutil

from ..types.models import DiskUsage


def get_disk_usage(path: str) -> DiskUsage:
    """
    Get usage figures for the partition holding ``path``.

    Raises:
        OSError: If the path cannot be queried
    """
    usage = psutil.disk_usage(path)
    # psutil reports "free" as the space available to unprivileged users
    return DiskUsage(
        size=usage.total,
        used=usage.used,
        free=usage.total - usage.used,
        available=usage.free
    )


class PsutilDiskProbe:
    """Reports free bytes for a directory's filesystem."""

    def free_bytes(self, path: str) -> int:
        return get_disk_usage(path).available
