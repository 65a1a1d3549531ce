"""Define a class that continually calls a given function in a background thread."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class CallLoopThread:
    """A class that continually calls a given function until it is stopped.

    Used to keep a transport layer alive (e.g., processing inbound joint states) while the
    main thread blocks on planning and execution. The looped function must never drive the
    pick/lift state machine itself.
    """

    def __init__(self, func: Callable[[], None], loop_hz: float = 10.0, name: str = "") -> None:
        """Initialize and start a daemon thread calling the given function in a loop."""
        if loop_hz <= 0.0:
            raise ValueError(f"Loop frequency must be positive, got {loop_hz} Hz.")

        self._function = func
        self._period_s = 1.0 / loop_hz
        self._stop_requested = threading.Event()
        self._thread = threading.Thread(target=self._loop, name=name or None, daemon=True)
        self._thread.start()

    @property
    def is_running(self) -> bool:
        """Check whether the background thread is still looping."""
        return self._thread.is_alive()

    def _loop(self) -> None:
        """Continually call the stored function until a stop is requested."""
        while not self._stop_requested.is_set():
            try:
                self._function()
            except Exception:
                logger.exception(f"[CallLoopThread] Looped function {self._function} raised")
                raise
            self._stop_requested.wait(self._period_s)

    def stop(self, timeout_s: float = 1.0) -> bool:
        """Request that the loop stop and wait for the thread to exit.

        :return: True if the thread exited within the timeout, else False
        """
        self._stop_requested.set()
        self._thread.join(timeout=timeout_s)
        return not self._thread.is_alive()
