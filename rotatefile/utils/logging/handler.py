"""
Routing Python logging into a rotating log file.

Each record is formatted into a single line and handed to the rotating
file in one ``write`` call, so a record is never split across two files.
"""

import logging
from typing import Optional, Union

from ...types.models import LogLevel
from .structured_logger import parse_level, python_level

LINE_FORMAT = (
    "%(asctime)s.%(msecs)03d [%(levelname)-5s] %(process)d --- "
    "[%(threadName)s] %(name)s : %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RotateFileHandler(logging.Handler):
    """
    Logging handler writing to a RotateFile.

    Attributes:
        rotate_file: Destination writer
        encoding: Encoding used for formatted records
    """

    terminator = "\n"

    def __init__(self, rotate_file, level: int = logging.NOTSET, encoding: str = "utf-8"):
        super().__init__(level)
        self.rotate_file = rotate_file
        self.encoding = encoding

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record).rstrip("\r\n") + self.terminator
            self.rotate_file.write(message.encode(self.encoding, errors="replace"))
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self.acquire()
        try:
            self.rotate_file.flush()
        finally:
            self.release()

    def close(self) -> None:
        # Not under the handler lock: closing joins the retention thread,
        # which may be logging through this handler.
        try:
            self.rotate_file.close()
        finally:
            super().close()


def setup_logging(
    rotate_file,
    level: Union[LogLevel, str] = LogLevel.INFO,
    logger: Optional[logging.Logger] = None
) -> RotateFileHandler:
    """
    Send log records to ``rotate_file``.

    Replaces any handler previously installed by this function on the
    same logger.

    Args:
        rotate_file: RotateFile to write to
        level: Minimum level to record
        logger: Logger to attach to (default: root logger)

    Returns:
        The installed handler
    """
    logger = logger or logging.getLogger()
    py_level = python_level(parse_level(level))

    for existing in logger.handlers[:]:
        if isinstance(existing, RotateFileHandler):
            logger.removeHandler(existing)
            existing.close()

    handler = RotateFileHandler(rotate_file, level=py_level)
    handler.setFormatter(logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(py_level)
    return handler
