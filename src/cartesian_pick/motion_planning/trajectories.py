"""Define classes to represent planned paths and time-parameterized trajectories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from cartesian_pick.kinematics import Configuration, joint_space_distance

Path = Sequence[Configuration]
"""A path is a sequence of robot configurations (i.e., a configuration sequence)."""


@dataclass(frozen=True)
class TrajectoryPoint:
    """A planned state of joint values at a specified time in a trajectory."""

    time_s: float
    """Time (seconds) since the trajectory started."""

    positions: Configuration
    velocities: Configuration
    accelerations: Configuration

    @property
    def joint_names(self) -> list[str]:
        """Retrieve the names of the joints specified by the point."""
        return list(self.positions.keys())


@dataclass(frozen=True)
class Trajectory:
    """A sequence of planned configurations at specified times."""

    points: list[TrajectoryPoint]

    def __post_init__(self) -> None:
        """Verify properties expected of any valid trajectory."""
        if not self.points:
            return

        # All points in any non-empty trajectory should use the same joint names
        j0_names = self.points[0].joint_names
        for p in self.points[1:]:
            jn_names = p.joint_names
            if j0_names != jn_names:
                raise ValueError(f"Trajectory points used joint names: {j0_names} and {jn_names}.")

        for prev, curr in zip(self.points, self.points[1:]):
            if curr.time_s < prev.time_s:
                raise ValueError(f"Trajectory times decrease: {prev.time_s} then {curr.time_s}.")

    def __len__(self) -> int:
        """Retrieve the number of waypoints in the trajectory."""
        return len(self.points)

    @property
    def joint_names(self) -> list[str]:
        """Retrieve the names of the joints specified by the trajectory."""
        return [] if not self.points else self.points[0].joint_names

    @property
    def duration_s(self) -> float:
        """Retrieve the duration (seconds) of the trajectory."""
        return 0.0 if not self.points else self.points[-1].time_s

    @property
    def configurations(self) -> list[Configuration]:
        """Retrieve the geometric path (sequence of configurations) followed by the trajectory."""
        return [p.positions for p in self.points]

    def path_length(self) -> float:
        """Compute the total joint-space length of the trajectory's path."""
        configs = self.configurations
        return sum(joint_space_distance(a, b) for a, b in zip(configs, configs[1:]))
