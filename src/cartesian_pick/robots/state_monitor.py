"""Define a read-only interface for monitoring the current state of a robot arm."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from cartesian_pick.parallelism import wait_until

if TYPE_CHECKING:
    from cartesian_pick.kinematics import RobotState


class StateMonitor(ABC):
    """An interface providing snapshots of the robot state received from the transport layer."""

    @abstractmethod
    def missing_joints(self) -> list[str]:
        """Retrieve the names of joints for which no state has been received yet."""
        ...

    @abstractmethod
    def current_state(self) -> RobotState | None:
        """Retrieve the latest complete snapshot of the robot state (None if incomplete)."""
        ...

    def have_complete_state(self) -> bool:
        """Check whether a value has been received for every monitored joint."""
        return not self.missing_joints()

    def wait_for_state(
        self,
        newer_than_s: float | None = None,
        timeout_s: float = 1.0,
        poll_s: float = 0.01,
    ) -> RobotState | None:
        """Wait for a complete robot state, optionally requiring it to be newer than a time.

        :param newer_than_s: Monotonic time (seconds) the state must be stamped after (or None)
        :param timeout_s: Maximum duration (seconds) to wait for such a state
        :param poll_s: Duration (seconds) between checks of the latest state
        :return: Fresh snapshot of the robot state, or None if the wait timed out
        """

        def state_is_fresh() -> bool:
            state = self.current_state()
            if state is None:
                return False
            return newer_than_s is None or state.stamp_s > newer_than_s

        if not wait_until(state_is_fresh, timeout_s=timeout_s, poll_s=poll_s):
            return None

        return self.current_state()
