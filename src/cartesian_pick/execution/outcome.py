"""Define the terminal outcomes of executing a trajectory."""

from enum import Enum


class ExecutionOutcome(Enum):
    """Terminal status of a trajectory that entered execution."""

    SUCCEEDED = "succeeded"
    PREEMPTED = "preempted"
    TIMED_OUT = "timed_out"
    CONTROL_FAILED = "control_failed"
