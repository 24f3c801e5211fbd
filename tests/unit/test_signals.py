"""
Tests for signal triggered rotation.
"""

import os
import shutil
import signal
import tempfile
import threading
import time
import unittest

import pytest

from rotatefile import RotateConfig, RotateFile
from rotatefile.utils.signals import RotateSignalListener, parse_signals
from tests.conftest import FakeClock

pytestmark = [
    pytest.mark.posix,
    pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="POSIX signals required"),
]


def test_parse_signals_accepts_short_and_full_names():
    assert parse_signals("HUP, sigusr1,SIGUSR2") == [signal.SIGHUP, signal.SIGUSR1, signal.SIGUSR2]
    assert parse_signals("") == []


def test_parse_signals_rejects_other_signals():
    with pytest.raises(ValueError):
        parse_signals("SIGTERM")


class TestRotateSignalListener(unittest.TestCase):
    """Test cases for RotateSignalListener."""

    def setUp(self):
        self.fired = threading.Event()
        self.original = signal.getsignal(signal.SIGUSR1)

    def tearDown(self):
        signal.signal(signal.SIGUSR1, self.original)

    def test_signal_runs_callback_on_listener_thread(self):
        threads = []

        def callback():
            threads.append(threading.current_thread())
            self.fired.set()

        listener = RotateSignalListener(callback, [signal.SIGUSR1])
        self.assertTrue(listener.install())
        try:
            os.kill(os.getpid(), signal.SIGUSR1)
            self.assertTrue(self.fired.wait(5))
        finally:
            listener.uninstall(timeout=5)

        self.assertIsNot(threading.main_thread(), threads[0])
        self.assertFalse(listener.installed)
        self.assertEqual(self.original, signal.getsignal(signal.SIGUSR1))

    def test_callback_failure_keeps_listening(self):
        calls = []

        def callback():
            calls.append(1)
            if len(calls) == 1:
                raise OSError("rename failed")
            self.fired.set()

        listener = RotateSignalListener(callback, [signal.SIGUSR1])
        listener.install()
        try:
            os.kill(os.getpid(), signal.SIGUSR1)
            deadline = time.monotonic() + 5
            while not calls and time.monotonic() < deadline:
                time.sleep(0.01)
            os.kill(os.getpid(), signal.SIGUSR1)
            self.assertTrue(self.fired.wait(5))
        finally:
            listener.uninstall(timeout=5)

        self.assertEqual(2, len(calls))

    def test_install_off_main_thread_is_refused(self):
        result = []
        listener = RotateSignalListener(self.fired.set, [signal.SIGUSR1])

        worker = threading.Thread(target=lambda: result.append(listener.install()))
        worker.start()
        worker.join()

        self.assertEqual([False], result)
        self.assertFalse(listener.installed)


class TestRotateFileSignals(unittest.TestCase):
    """Test cases for a RotateFile rotating on a configured signal."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.original = signal.getsignal(signal.SIGUSR2)

    def tearDown(self):
        signal.signal(signal.SIGUSR2, self.original)
        shutil.rmtree(self.temp_dir)

    def test_signal_rotates_file(self):
        filename = os.path.join(self.temp_dir, "app.log")
        writer = RotateFile(
            RotateConfig(filename=filename, rotate_signals=[signal.SIGUSR2]),
            clock=FakeClock()
        )
        try:
            writer.write(b"before signal\n")
            os.kill(os.getpid(), signal.SIGUSR2)

            deadline = time.monotonic() + 5
            while len(os.listdir(self.temp_dir)) < 2 and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            writer.close()

        self.assertEqual(2, len(os.listdir(self.temp_dir)))
        self.assertEqual(0, os.path.getsize(filename))
        self.assertEqual(self.original, signal.getsignal(signal.SIGUSR2))
