"""
Tests for backup filename encoding and decoding.
"""

import unittest
from datetime import datetime

from rotatefile.utils.naming import (
    backup_name,
    format_timestamp,
    parse_backup_name,
    parse_timestamp,
    split_name,
    time_from_name
)


class TestTimestamps(unittest.TestCase):
    """Test cases for the backup timestamp format."""

    def test_format_has_millisecond_precision(self):
        t = datetime(2016, 11, 4, 18, 30, 0, 123456)
        self.assertEqual("20161104T183000.123", format_timestamp(t))

    def test_parse_inverts_format(self):
        t = datetime(2016, 11, 4, 18, 30, 0, 7000)
        self.assertEqual(t, parse_timestamp(format_timestamp(t)))

    def test_parse_rejects_malformed_text(self):
        for text in ["20161104T183000", "20161104T183000.12", "2016-11-04T18:30:00.000",
                     "20161304T183000.000", "20161104T183000.000x"]:
            with self.subTest(text=text):
                self.assertIsNone(parse_timestamp(text))


class TestBackupNames(unittest.TestCase):
    """Test cases for building and recognising backup names."""

    def setUp(self):
        self.rotated_at = datetime(2016, 11, 4, 18, 30, 0)

    def test_split_name(self):
        self.assertEqual(("server.", ".log"), split_name("/var/log/app/server.log"))
        self.assertEqual(("server.", ""), split_name("/var/log/app/server"))

    def test_backup_name_keeps_directory_and_extension(self):
        self.assertEqual(
            "/var/log/app/server.20161104T183000.000.log",
            backup_name("/var/log/app/server.log", self.rotated_at)
        )

    def test_backup_name_without_extension(self):
        self.assertEqual(
            "/tmp/server.20161104T183000.000",
            backup_name("/tmp/server", self.rotated_at)
        )

    def test_time_from_name(self):
        self.assertEqual(
            self.rotated_at,
            time_from_name("server.20161104T183000.000.log", "server.", ".log")
        )

    def test_time_from_name_rejects_other_files(self):
        for name in ["server.log", "other.20161104T183000.000.log",
                     "server.20161104T183000.000.txt", "server.20161104T183000.000.log.bak",
                     "server.x20161104T183000.000.log"]:
            with self.subTest(name=name):
                self.assertIsNone(time_from_name(name, "server.", ".log"))

    def test_parse_backup_name_detects_compression(self):
        self.assertEqual(
            (self.rotated_at, False),
            parse_backup_name("server.20161104T183000.000.log", "server.", ".log")
        )
        self.assertEqual(
            (self.rotated_at, True),
            parse_backup_name("server.20161104T183000.000.log.gz", "server.", ".log")
        )

    def test_parse_backup_name_ignores_foreign_suffix(self):
        self.assertIsNone(parse_backup_name("server.20161104T183000.000.log.zip", "server.", ".log"))


if __name__ == '__main__':
    unittest.main()
