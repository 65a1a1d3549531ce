"""Define an interface for solving forward and inverse kinematics of a robot arm."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cartesian_pick.kinematics import Configuration
    from cartesian_pick.spatial import Pose3D


class KinematicsSolver(ABC):
    """An interface for a (possibly numerical) kinematics solver.

    Solutions are not required to be deterministic, but they should be seed-continuous:
    nearby seed configurations should tend to produce nearby solutions.
    """

    @abstractmethod
    def solve_ik(self, link_name: str, target: Pose3D, seed: Configuration) -> Configuration | None:
        """Compute an inverse kinematics solution placing the named link at the target pose.

        :param link_name: Name of the link whose origin should reach the target
        :param target: Target pose of the link (in the arm's base frame)
        :param seed: Configuration from which the solver starts its search
        :return: Configuration solving the IK problem (else None)
        """
        ...

    @abstractmethod
    def compute_fk(self, link_name: str, configuration: Configuration) -> Pose3D:
        """Compute the pose of the named link when the arm is at the given configuration."""
        ...
