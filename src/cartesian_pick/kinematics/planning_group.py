"""Define classes describing a planning group: a named set of joints and their limits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from cartesian_pick.kinematics.configuration import Configuration


@dataclass(frozen=True)
class JointLimits:
    """Position, velocity, and acceleration limits of a single joint."""

    min_position: float
    max_position: float

    max_velocity: float = 1.0
    """Maximum absolute velocity (rad/s or m/s); 1.0 if the joint has no velocity bound."""

    max_acceleration: float = 1.0
    """Maximum absolute acceleration (rad/s^2 or m/s^2); 1.0 if the joint is unbounded."""

    def __post_init__(self) -> None:
        """Verify that the limits describe a non-empty range and positive bounds."""
        if self.min_position > self.max_position:
            raise ValueError(f"Invalid position range: [{self.min_position}, {self.max_position}]")
        if self.max_velocity <= 0.0 or self.max_acceleration <= 0.0:
            raise ValueError(f"Velocity and acceleration limits must be positive: {self}")

    def contains(self, position: float, tolerance: float = 1e-9) -> bool:
        """Evaluate whether the given joint position lies within the position limits."""
        return self.min_position - tolerance <= position <= self.max_position + tolerance


@dataclass(frozen=True)
class PlanningGroup:
    """A named subset of a robot's joints considered together for motion planning."""

    name: str
    joint_names: tuple[str, ...]
    joint_limits: dict[str, JointLimits] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Verify that limits are only given for joints in the group."""
        if len(set(self.joint_names)) != len(self.joint_names):
            raise ValueError(f"Group '{self.name}' has duplicate joints: {self.joint_names}")

        unknown = set(self.joint_limits) - set(self.joint_names)
        if unknown:
            raise ValueError(f"Limits given for joints outside group '{self.name}': {unknown}")

    @property
    def num_joints(self) -> int:
        """Retrieve the number of joints in the planning group."""
        return len(self.joint_names)

    def limits_for(self, joint_name: str) -> JointLimits:
        """Retrieve the limits of the named joint (unbounded if the group has no limits for it)."""
        limits = self.joint_limits.get(joint_name)
        if limits is None:
            return JointLimits(min_position=-np.inf, max_position=np.inf)
        return limits

    def validate(self, configuration: Configuration) -> None:
        """Verify that the configuration specifies exactly the joints of this group.

        :raises ValueError: If any joint is missing or an unexpected joint is present
        """
        if set(configuration) != set(self.joint_names):
            raise ValueError(
                f"Configuration joints {sorted(configuration)} don't match planning group "
                f"'{self.name}' joints {list(self.joint_names)}.",
            )

    def to_array(self, configuration: Configuration) -> NDArray[np.float64]:
        """Convert a configuration into a NumPy array in the group's canonical joint order."""
        self.validate(configuration)
        return np.array([configuration[name] for name in self.joint_names], dtype=np.float64)

    def from_array(self, values: Sequence[float] | NDArray[np.float64]) -> Configuration:
        """Construct a configuration from joint values given in the group's canonical order."""
        if len(values) != self.num_joints:
            raise ValueError(f"Expected {self.num_joints} joint values, got {len(values)}.")
        return {name: float(value) for name, value in zip(self.joint_names, values)}

    def violated_joints(self, configuration: Configuration) -> list[str]:
        """Find the names of joints whose values lie outside their position limits."""
        return [
            name
            for name in self.joint_names
            if not self.limits_for(name).contains(configuration[name])
        ]
