"""Define the kinds of failure that can end a motion phase, and the exceptions raising them."""

from __future__ import annotations

from enum import Enum


class FailureKind(Enum):
    """A category of failure reported by a stage of the pick/lift pipeline."""

    PLANNING_INFEASIBLE = "planning_infeasible"
    """IK failed along the straight line before the target distance was reached."""

    JOINT_SPACE_DISCONTINUITY = "joint_space_discontinuity"
    """The jump filter truncated the path at a joint-space discontinuity."""

    DEGENERATE_TRAJECTORY = "degenerate_trajectory"
    """Fewer than two waypoints reached time parameterization."""

    JOINT_LIMIT_VIOLATION = "joint_limit_violation"
    """A waypoint lies outside the position limits of the planning group."""

    EXECUTION_REJECTED = "execution_rejected"
    """The trajectory failed to enter the execution queue (it never started)."""

    EXECUTION_FAILED = "execution_failed"
    """Execution started but was preempted, timed out, or failed in the controller."""

    DISPATCH_TIMEOUT = "dispatch_timeout"
    """The planning/execution action didn't return a result within the deadline."""

    DISPATCH_FAILED = "dispatch_failed"
    """The planning/execution action finished in a terminal state other than success."""

    NO_FEASIBLE_GRASP = "no_feasible_grasp"
    """The grasp pipeline produced no usable candidate."""

    STALE_STATE = "stale_state"
    """No robot state newer than the latest motion arrived before the deadline."""


class DegenerateTrajectoryError(ValueError):
    """Raised when a path with fewer than two waypoints is given to time parameterization."""


class JointLimitViolationError(ValueError):
    """Raised when a waypoint violates the joint position limits of its planning group."""


class ExecutionRejectedError(RuntimeError):
    """Raised when the execution subsystem refuses to queue a trajectory."""
