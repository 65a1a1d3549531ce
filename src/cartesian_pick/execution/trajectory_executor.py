"""Define a class that executes trajectories and waits for their terminal status."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cartesian_pick.errors import ExecutionRejectedError
from cartesian_pick.execution.outcome import ExecutionOutcome

if TYPE_CHECKING:
    from cartesian_pick.motion_planning import Trajectory
    from cartesian_pick.robots import ExecutionSubsystem

logger = logging.getLogger(__name__)


class TrajectoryExecutor:
    """Hands one trajectory at a time to an execution subsystem and blocks until it finishes."""

    def __init__(self, subsystem: ExecutionSubsystem) -> None:
        """Initialize the executor with the subsystem that runs trajectories."""
        self._subsystem = subsystem

    def execute(self, trajectory: Trajectory) -> ExecutionOutcome:
        """Execute the given trajectory, replacing anything previously queued.

        :param trajectory: Time-parameterized trajectory to be executed
        :return: Terminal outcome of the execution
        :raises ExecutionRejectedError: If the trajectory couldn't be queued (it never started)
        """
        self._subsystem.clear()
        if not self._subsystem.push(trajectory):
            logger.error("Failed to push trajectory to the execution subsystem.")
            raise ExecutionRejectedError(
                f"Execution subsystem rejected a trajectory of {len(trajectory)} waypoints.",
            )

        logger.info(f"Executing {len(trajectory)} waypoints over {trajectory.duration_s:.3f} s.")
        self._subsystem.execute_async()
        outcome = self._subsystem.wait_for_completion()

        if outcome == ExecutionOutcome.SUCCEEDED:
            logger.info("Trajectory execution succeeded.")
        elif outcome == ExecutionOutcome.PREEMPTED:
            logger.error("Trajectory execution was preempted.")
        elif outcome == ExecutionOutcome.TIMED_OUT:
            logger.error("Trajectory execution timed out.")
        else:
            logger.error("Trajectory execution failed in the controller.")

        return outcome
