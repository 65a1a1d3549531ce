"""Define a dataclass to represent a single-pose motion goal for an end-effector link."""

from __future__ import annotations

from dataclasses import dataclass, field

from cartesian_pick.spatial import Point3D, Pose3D


@dataclass(frozen=True)
class MotionGoal:
    """A target pose for a link, with tolerances and an offset to the constrained point."""

    pose: Pose3D

    position_tolerance_m: float = 1e-4
    orientation_tolerance_rad: float = 1e-2

    target_point_offset: Point3D = field(default_factory=Point3D.identity)
    """Displacement (in the link frame) from the link origin to the point that must reach the goal.

    For example, this accounts for the distance between a wrist frame and the fingertips.
    """

    def __post_init__(self) -> None:
        """Verify that the goal's tolerances are positive."""
        if self.position_tolerance_m <= 0.0 or self.orientation_tolerance_rad <= 0.0:
            raise ValueError(f"Motion goal tolerances must be positive: {self}")

    def link_origin_pose(self) -> Pose3D:
        """Compute the pose of the link origin placing the offset point exactly at the goal."""
        offset_in_goal_frame = self.pose.orientation.rotate(self.target_point_offset.to_array())
        return self.pose.translated(-offset_in_goal_frame)
