"""
OS signal triggered log rotation.

Python runs signal handlers on the main thread, possibly while that same
thread is in the middle of a write holding the writer lock. The handler
therefore only enqueues the signal; a listener thread performs the
rotation through the normal locked path.
"""

import queue
import signal
import threading
from typing import Callable, Dict, Iterable, List, Optional

from .logging.structured_logger import StructuredLogger

_STOP = object()

SIGNAL_NAMES = ("SIGHUP", "SIGUSR1", "SIGUSR2")


def parse_signals(text: str) -> List[signal.Signals]:
    """
    Parse a comma separated list of rotation signal names.

    Raises:
        ValueError: If a name is not a supported rotation signal
    """
    signals = []
    for item in text.split(","):
        name = item.strip().upper()
        if not name:
            continue
        if not name.startswith("SIG"):
            name = "SIG" + name
        if name not in SIGNAL_NAMES or not hasattr(signal, name):
            raise ValueError(f"unsupported rotation signal: {item.strip()}")
        signals.append(getattr(signal, name))
    return signals


class RotateSignalListener:
    """
    Calls ``callback`` on a listener thread whenever one of ``signals`` arrives.

    Attributes:
        signals: Signals that trigger the callback
    """

    def __init__(
        self,
        callback: Callable[[], object],
        signals: Iterable[signal.Signals],
        logger: Optional[StructuredLogger] = None
    ):
        self.callback = callback
        self.signals = list(signals)
        self._logger = logger or StructuredLogger("rotatefile.signals")
        self._queue: "queue.SimpleQueue[object]" = queue.SimpleQueue()
        self._previous: Dict[signal.Signals, object] = {}
        self._thread: Optional[threading.Thread] = None

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def install(self) -> bool:
        """
        Register the signal handlers and start the listener thread.

        Returns:
            False if handlers cannot be registered from the current thread
        """
        if self.installed or not self.signals:
            return self.installed
        if threading.current_thread() is not threading.main_thread():
            self._logger.warning(
                "Rotation signals can only be installed from the main thread",
                signals=",".join(sig.name for sig in self.signals)
            )
            return False

        for sig in self.signals:
            self._previous[sig] = signal.signal(sig, self._handle)

        self._thread = threading.Thread(target=self._listen, name="rotatefile-signals", daemon=True)
        self._thread.start()
        self._logger.debug(
            "Rotation signals installed",
            signals=",".join(sig.name for sig in self.signals)
        )
        return True

    def _handle(self, signum, frame) -> None:
        self._queue.put(signum)

    def _listen(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            try:
                self.callback()
                self._logger.info("Rotated on signal", signal=signal.Signals(item).name)
            except Exception as e:
                self._logger.error("Signal triggered rotation failed", error=e)

    def uninstall(self, timeout: Optional[float] = None) -> None:
        """Restore the previous handlers and stop the listener thread."""
        if threading.current_thread() is threading.main_thread():
            for sig, previous in self._previous.items():
                signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
            self._previous.clear()
        if self._thread is not None:
            self._queue.put(_STOP)
            self._thread.join(timeout)
            self._thread = None
