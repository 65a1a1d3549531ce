"""Define an interface for an external planning-and-execution action service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cartesian_pick.execution.motion_plan_request import GoalState, MotionPlanRequest


class MotionPlanningAction(ABC):
    """An interface for an action server that plans and executes motions to goal poses.

    Mirrors the client side of a MoveGroup action: a goal is sent, then the caller waits
    (for a bounded duration) until the goal reaches a terminal state.
    """

    @abstractmethod
    def wait_for_server(self, timeout_s: float) -> bool:
        """Wait until the action server is available.

        :return: True if the server became available within the timeout, else False
        """
        ...

    @abstractmethod
    def send_goal(self, request: MotionPlanRequest) -> None:
        """Send a goal to the action server (returns without waiting for a result)."""
        ...

    @abstractmethod
    def wait_for_result(self, timeout_s: float) -> bool:
        """Wait for the most recent goal to finish.

        :return: True if the goal reached a terminal state within the timeout, else False
        """
        ...

    @abstractmethod
    def get_state(self) -> GoalState:
        """Retrieve the current state of the most recent goal."""
        ...
