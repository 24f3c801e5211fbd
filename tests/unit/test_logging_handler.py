"""
Tests for routing Python logging into a rotating file.
"""

import logging
import os
import re
import shutil
import tempfile
import threading
import time
import unittest
from datetime import timedelta

from rotatefile import RotateConfig, RotateFile
from rotatefile.types.models import LogLevel
from rotatefile.utils.file_io.filesystem import FileSystem
from rotatefile.utils.logging import RotateFileHandler, setup_logging
from rotatefile.utils.naming import backup_name
from tests.conftest import BASE_TIME, FakeClock

LINE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3} \[(?P<level>[A-Z]+) *\] "
    r"\d+ --- \[(?P<thread>[^\]]+)\] (?P<name>\S+) : (?P<message>.*)$"
)


class SlowListFileSystem(FileSystem):
    """FileSystem whose directory listing stalls, keeping a retention pass in flight."""

    def __init__(self, delay):
        self.delay = delay
        self.listing = threading.Event()

    def list_files(self, directory):
        self.listing.set()
        time.sleep(self.delay)
        return super().list_files(directory)


class TestRotateFileHandler(unittest.TestCase):
    """Test cases for RotateFileHandler and setup_logging."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.filename = os.path.join(self.temp_dir, "app.log")
        self.logger = logging.getLogger(f"rotatefile.test.{self.id()}")
        self.logger.propagate = False

    def tearDown(self):
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)
            handler.close()
        shutil.rmtree(self.temp_dir)

    def make(self, **options):
        return RotateFile(RotateConfig(filename=self.filename, **options), clock=FakeClock())

    def lines(self, path=None):
        with open(path or self.filename, "r", encoding="utf-8") as f:
            return f.read().splitlines()

    def test_records_use_line_format(self):
        setup_logging(self.make(), level="INFO", logger=self.logger)

        self.logger.info("service started")
        self.logger.debug("not recorded")

        lines = self.lines()
        self.assertEqual(1, len(lines))
        match = LINE_RE.match(lines[0])
        self.assertIsNotNone(match, lines[0])
        self.assertEqual("INFO", match.group("level"))
        self.assertEqual(self.logger.name, match.group("name"))
        self.assertEqual("service started", match.group("message"))

    def test_setup_replaces_previous_handler(self):
        first = setup_logging(self.make(), logger=self.logger)
        second = setup_logging(self.make(), logger=self.logger)

        handlers = [h for h in self.logger.handlers if isinstance(h, RotateFileHandler)]
        self.assertEqual([second], handlers)
        self.assertTrue(first.rotate_file.closed)

    def test_records_are_never_split_across_files(self):
        setup_logging(self.make(max_size=300), level=LogLevel.DEBUG, logger=self.logger)

        for i in range(20):
            self.logger.warning("message number %02d", i)

        seen = []
        for name in sorted(os.listdir(self.temp_dir)):
            path = os.path.join(self.temp_dir, name)
            self.assertLessEqual(os.path.getsize(path), 300)
            for line in self.lines(path):
                match = LINE_RE.match(line)
                self.assertIsNotNone(match, line)
                seen.append(match.group("message"))
        self.assertEqual(sorted("message number %02d" % i for i in range(20)), sorted(seen))

    def test_oversized_record_goes_to_handle_error(self):
        handler = setup_logging(self.make(max_size=50), logger=self.logger)
        errors = []
        handler.handleError = errors.append

        self.logger.error("x" * 100)

        self.assertEqual(1, len(errors))
        self.assertFalse(os.path.exists(self.filename))

    def test_lifecycle_logs_can_target_the_same_file(self):
        writer = self.make(max_size=400)
        own_logger = logging.getLogger("rotatefile")
        original_level, original_propagate = own_logger.level, own_logger.propagate
        own_logger.propagate = False
        handler = setup_logging(writer, level="DEBUG", logger=own_logger)
        try:
            setup_logging(writer, level="DEBUG", logger=self.logger)
            for i in range(10):
                self.logger.info("entry %d", i)
            writer.wait_for_mill(timeout=5)
        finally:
            own_logger.removeHandler(handler)
            own_logger.setLevel(original_level)
            own_logger.propagate = original_propagate

        contents = "".join(
            open(os.path.join(self.temp_dir, name), encoding="utf-8").read()
            for name in os.listdir(self.temp_dir)
        )
        self.assertIn("Rotated log file", contents)
        self.assertIn("entry 9", contents)

    def test_close_while_retention_pass_is_logging(self):
        fs = SlowListFileSystem(delay=0.5)
        writer = RotateFile(
            RotateConfig(filename=self.filename, max_backups=1),
            clock=FakeClock(),
            fs=fs
        )
        for hours in (1, 2, 3):
            open(backup_name(self.filename, BASE_TIME - timedelta(hours=hours)), "wb").close()
        own_logger = logging.getLogger("rotatefile")
        original_level, original_propagate = own_logger.level, own_logger.propagate
        own_logger.propagate = False
        handler = setup_logging(writer, level="DEBUG", logger=own_logger)
        try:
            writer.rotate()
            self.assertTrue(fs.listing.wait(timeout=5))

            closer = threading.Thread(target=handler.close, daemon=True)
            closer.start()
            closer.join(timeout=5)

            self.assertFalse(closer.is_alive(), "handler.close() blocked on the retention pass")
        finally:
            own_logger.removeHandler(handler)
            own_logger.setLevel(original_level)
            own_logger.propagate = original_propagate
            writer.close()

        backups = [name for name in os.listdir(self.temp_dir) if name != "app.log"]
        self.assertEqual(1, len(backups))


if __name__ == '__main__':
    unittest.main()
