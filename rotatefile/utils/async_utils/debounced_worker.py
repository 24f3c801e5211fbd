"""
Single-slot debounced background worker.

A DebouncedWorker runs one callable on a dedicated thread whenever it is
triggered. Triggers never block: any number of triggers that arrive while
a run is pending or in progress collapse into a single further run. This
guarantees at most one run in flight and at least one run after the last
trigger.
"""

import threading
import time
from typing import Any, Callable, Dict, Optional

from ..logging.structured_logger import StructuredLogger


class DebouncedWorker:
    """
    Background thread fed by a capacity-one, drop-if-full trigger.

    Attributes:
        name: Thread name used for logging
        task: Callable executed on each run
    """

    def __init__(
        self,
        task: Callable[[], Any],
        name: str = "debounced-worker",
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize a new worker. The thread starts on the first trigger.

        Args:
            task: Callable to run; exceptions are logged, never propagated
            name: Thread name
            logger: Logger instance to use (creates one if None)
        """
        self.task = task
        self.name = name
        self._logger = logger or StructuredLogger("rotatefile.worker")
        self._cond = threading.Condition()
        self._pending = False
        self._running = False
        self._closed = False
        self._thread: Optional[threading.Thread] = None
        self._stats = {"triggers": 0, "runs": 0, "failures": 0}

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def trigger(self) -> bool:
        """
        Request a run without blocking.

        Returns:
            False if the worker has been stopped, True otherwise
        """
        with self._cond:
            if self._closed:
                return False
            self._stats["triggers"] += 1
            self._pending = True
            if self._thread is None:
                self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
                self._thread.start()
            self._cond.notify_all()
        return True

    def _loop(self) -> None:
        while True:
            with self._cond:
                while not self._pending and not self._closed:
                    self._cond.wait()
                if not self._pending:
                    self._cond.notify_all()
                    return
                self._pending = False
                self._running = True

            start_time = time.monotonic()
            try:
                self.task()
                self._stats["runs"] += 1
            except Exception as e:
                self._stats["failures"] += 1
                self._logger.error(
                    f"Worker '{self.name}' run failed: {e}",
                    error=e,
                    worker=self.name,
                    duration=round(time.monotonic() - start_time, 3)
                )
            finally:
                with self._cond:
                    self._running = False
                    self._cond.notify_all()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no run is pending or in progress.

        Returns:
            True if the worker is idle, False on timeout
        """
        with self._cond:
            return self._cond.wait_for(
                lambda: not self._pending and not self._running,
                timeout=timeout
            )

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop accepting triggers, let a pending run drain, then end the thread.

        An in-progress run is never interrupted.
        """
        with self._cond:
            self._closed = True
            self._cond.notify_all()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def get_stats(self) -> Dict[str, int]:
        with self._cond:
            return dict(self._stats)
