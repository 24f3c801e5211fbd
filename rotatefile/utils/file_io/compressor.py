"""
Gzip compression of rotated backups.

The source file is only removed once the compressed copy has been fully
written and closed, so a failed compression never loses a backup.
"""

import gzip
import logging
import os
import shutil
import stat
from typing import Optional

from ...core.exceptions import CompressionError

CHUNK_SIZE = 64 * 1024


def compress_file(
    src: str,
    dst: str,
    logger: Optional[logging.Logger] = None
) -> str:
    """
    Compress ``src`` into ``dst`` and remove ``src`` on success.

    ``dst`` is created with the same permission bits as ``src``. If it
    already exists it is presumed to be left over from an earlier failed
    attempt and is overwritten.

    Args:
        src: File to compress
        dst: Path of the gzip file to create
        logger: Logger instance (optional)

    Returns:
        The destination path

    Raises:
        CompressionError: If any step fails; ``src`` is left untouched
    """
    logger = logger or logging.getLogger(__name__)

    try:
        source = open(src, "rb")
    except OSError as e:
        raise CompressionError(
            f"Failed to open log file: {e}",
            file_path=src,
            destination=dst,
            original_error=e
        )

    created = False
    try:
        with source:
            mode = stat.S_IMODE(os.fstat(source.fileno()).st_mode)
            fd = os.open(dst, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, mode)
            created = True
            with os.fdopen(fd, "wb") as raw:
                os.chmod(dst, mode)
                with gzip.GzipFile(
                    filename=os.path.basename(src),
                    mode="wb",
                    fileobj=raw
                ) as gz:
                    shutil.copyfileobj(source, gz, CHUNK_SIZE)
    except Exception as e:
        logger.error(
            f"Failed to compress log file: {src}",
            exc_info=True,
            extra={"file_path": src, "error": str(e)}
        )
        if created:
            _discard(dst, logger)
        raise CompressionError(
            f"Failed to compress log file: {e}",
            file_path=src,
            destination=dst,
            original_error=e
        )

    try:
        os.remove(src)
    except OSError as e:
        raise CompressionError(
            f"Compressed log file but failed to remove source: {e}",
            file_path=src,
            destination=dst,
            original_error=e
        )

    logger.debug(
        f"Compressed log file: {src}",
        extra={"file_path": src, "destination": dst}
    )
    return dst


def _discard(path: str, logger: logging.Logger) -> None:
    """Remove a partially written destination."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning(f"Failed to remove partial compressed file: {path}", exc_info=True)
