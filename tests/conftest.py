"""
Pytest Configuration and Fixtures.

This module provides test fixtures and configuration for the rotatefile
testing suite: controllable clocks and disk probes, temporary log
directories and environment isolation.
"""

import os
import shutil
import tempfile
import threading
from datetime import datetime, timedelta

import pytest

from rotatefile.core.config import ConfigManager

# Fixed reference time for deterministic backup names
BASE_TIME = datetime(2016, 11, 4, 18, 30, 0)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = BASE_TIME):
        self._now = start
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, **kwargs) -> datetime:
        with self._lock:
            self._now += timedelta(**kwargs)
            return self._now

    def set(self, t: datetime) -> None:
        with self._lock:
            self._now = t


class FakeDiskProbe:
    """Disk probe reporting a configurable number of free bytes."""

    def __init__(self, free: int = 1 << 40, error: Exception = None):
        self.free = free
        self.error = error
        self.calls = 0

    def free_bytes(self, path: str) -> int:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.free


@pytest.fixture
def fake_clock():
    """Clock fixed at BASE_TIME."""
    return FakeClock()


@pytest.fixture
def fake_disk():
    """Disk probe reporting plenty of free space."""
    return FakeDiskProbe()


@pytest.fixture
def log_dir():
    """Temporary directory for log files."""
    temp_dir = tempfile.mkdtemp(prefix="rotatefile_test_")
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def cleanup_environment():
    """Automatically clean up environment after each test."""
    original_env = dict(os.environ)
    for key in ConfigManager.OPTIONAL_VARS:
        os.environ.pop(key, None)

    yield

    os.environ.clear()
    os.environ.update(original_env)


# Pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "posix: mark test as requiring POSIX signals or permissions"
    )


# Test collection hooks
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
