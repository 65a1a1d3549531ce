"""Import utilities for background threads and timeout-bounded waits."""

from .call_loop_thread import CallLoopThread as CallLoopThread
from .waiting import wait_until as wait_until
