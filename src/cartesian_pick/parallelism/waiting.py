"""Define timeout-bounded wait primitives that never spin indefinitely."""

from __future__ import annotations

import time
from typing import Callable


def wait_until(predicate: Callable[[], bool], timeout_s: float, poll_s: float = 0.01) -> bool:
    """Block until the predicate holds or the timeout expires, whichever comes first.

    :param predicate: Function evaluated repeatedly until it returns True
    :param timeout_s: Maximum duration (seconds) to wait
    :param poll_s: Duration (seconds) slept between evaluations of the predicate
    :return: True if the predicate held before the deadline, else False
    """
    end_time_s = time.monotonic() + max(0.0, timeout_s)
    while True:
        if predicate():
            return True

        remaining_s = end_time_s - time.monotonic()
        if remaining_s <= 0.0:
            return False
        time.sleep(min(poll_s, remaining_s))
