"""Define the goal description sent to a planning-and-execution action service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cartesian_pick.spatial import Point3D, Pose3D


class GoalState(Enum):
    """State of a goal sent to an action server."""

    PENDING = "pending"
    ACTIVE = "active"
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"
    REJECTED = "rejected"
    PREEMPTED = "preempted"
    RECALLED = "recalled"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        """Check whether the goal can no longer change state."""
        return self not in (GoalState.PENDING, GoalState.ACTIVE, GoalState.LOST)


@dataclass(frozen=True)
class MotionPlanRequest:
    """A request to plan and execute a motion placing a link at a goal pose."""

    group_name: str
    link_name: str
    goal_pose: Pose3D

    position_tolerance_m: float
    orientation_tolerance_rad: float
    target_point_offset: Point3D

    num_planning_attempts: int = 1
    allowed_planning_time_s: float = 5.0
