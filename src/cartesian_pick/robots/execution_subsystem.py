"""Define an interface for the subsystem that executes time-parameterized trajectories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cartesian_pick.execution.outcome import ExecutionOutcome
    from cartesian_pick.motion_planning import Trajectory


class ExecutionSubsystem(ABC):
    """An interface for a trajectory execution manager (e.g., a controller manager)."""

    @abstractmethod
    def clear(self) -> None:
        """Discard any trajectories that are queued but not yet executing."""
        ...

    @abstractmethod
    def push(self, trajectory: Trajectory) -> bool:
        """Queue the given trajectory for execution.

        :return: True if the trajectory was accepted, False if it was rejected
        """
        ...

    @abstractmethod
    def execute_async(self) -> None:
        """Begin executing the queued trajectory without waiting for it to finish."""
        ...

    @abstractmethod
    def wait_for_completion(self) -> ExecutionOutcome:
        """Block until the executing trajectory reaches a terminal status."""
        ...
