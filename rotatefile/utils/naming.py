"""
Backup file naming.

A backup of ``/var/log/app/server.log`` rotated at 18:30 on Nov 4 2016 is
named ``/var/log/app/server.20161104T183000.000.log``; once compressed it
becomes ``server.20161104T183000.000.log.gz``. The timestamp carries no
timezone: whether it is local time or UTC is a configuration choice.
"""

import os
import re
from datetime import datetime
from typing import Optional, Tuple

from ..types.models import COMPRESS_SUFFIX

BACKUP_TIME_FORMAT = "%Y%m%dT%H%M%S"
TIMESTAMP_WIDTH = len("20060102T150405.000")

_TIMESTAMP_RE = re.compile(r"\d{8}T\d{6}\.\d{3}", re.ASCII)


def format_timestamp(t: datetime) -> str:
    """Format a time as ``YYYYMMDDThhmmss.mmm``."""
    return f"{t.strftime(BACKUP_TIME_FORMAT)}.{t.microsecond // 1000:03d}"


def parse_timestamp(text: str) -> Optional[datetime]:
    """
    Parse a ``YYYYMMDDThhmmss.mmm`` timestamp.

    Returns:
        Naive datetime, or None if the text is not exactly in that format
    """
    if not _TIMESTAMP_RE.fullmatch(text):
        return None
    try:
        parsed = datetime.strptime(text[:15], BACKUP_TIME_FORMAT)
    except ValueError:
        return None
    return parsed.replace(microsecond=int(text[16:]) * 1000)


def split_name(path: str) -> Tuple[str, str]:
    """
    Split a log filename into its backup prefix and extension.

    Returns:
        ``(stem + ".", ext)``, e.g. ``("server.", ".log")``
    """
    stem, ext = os.path.splitext(os.path.basename(path))
    return stem + ".", ext


def backup_name(path: str, t: datetime) -> str:
    """Build the backup path for ``path`` rotated at time ``t``."""
    prefix, ext = split_name(path)
    return os.path.join(os.path.dirname(path), f"{prefix}{format_timestamp(t)}{ext}")


def time_from_name(name: str, prefix: str, ext: str) -> Optional[datetime]:
    """
    Extract the rotation time from a backup filename.

    The prefix and extension are stripped before parsing so that the rest
    of the filename cannot confuse the timestamp parser.

    Returns:
        The encoded time, or None if ``name`` is not exactly
        ``prefix + timestamp + ext``
    """
    if len(name) != len(prefix) + TIMESTAMP_WIDTH + len(ext):
        return None
    if not name.startswith(prefix) or not name.endswith(ext):
        return None
    return parse_timestamp(name[len(prefix):len(prefix) + TIMESTAMP_WIDTH])


def parse_backup_name(name: str, prefix: str, ext: str) -> Optional[Tuple[datetime, bool]]:
    """
    Recognise a plain or compressed backup of the same base name.

    Returns:
        ``(timestamp, compressed)``, or None if ``name`` is not a backup
    """
    t = time_from_name(name, prefix, ext)
    if t is not None:
        return t, False
    t = time_from_name(name, prefix, ext + COMPRESS_SUFFIX)
    if t is not None:
        return t, True
    return None
