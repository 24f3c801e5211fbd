"""
Tests for human readable byte size parsing.
"""

import pytest

from rotatefile.utils.bytesize import GIBYTE, KIBYTE, MIBYTE, parse_bytes


@pytest.mark.parametrize("text,expected", [
    ("42", 42),
    ("42 MB", 42000000),
    ("42MB", 42000000),
    ("42 mib", 44040192),
    ("42mi", 44040192),
    ("1,024 kb", 1024000),
    ("1.5GiB", int(1.5 * GIBYTE)),
    ("64 KiB", 64 * KIBYTE),
    ("100MiB", 100 * MIBYTE),
    ("10 k", 10000),
    ("3 B", 3),
])
def test_parse_bytes(text, expected):
    assert parse_bytes(text) == expected


@pytest.mark.parametrize("text", ["", "MB", "42 lightyears", "-5", "1.2.3 kb", "20 EiB"])
def test_parse_bytes_rejects_invalid_sizes(text):
    with pytest.raises(ValueError):
        parse_bytes(text)
