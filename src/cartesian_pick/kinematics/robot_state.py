"""Define a dataclass to represent a snapshot of the state of a robot arm."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cartesian_pick.kinematics.configuration import Configuration


@dataclass(frozen=True)
class RobotState:
    """The kinematic state of a robot arm at a point in time."""

    configuration: Configuration = field(hash=False)

    stamp_s: float
    """Monotonic time (seconds) at which the state was measured."""
