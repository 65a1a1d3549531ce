"""Define data structures and an interface for generating and selecting grasp poses."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from cartesian_pick.io.logging import console
from cartesian_pick.spatial import Pose3D

if TYPE_CHECKING:
    from cartesian_pick.kinematics import Configuration
    from cartesian_pick.robots import KinematicsSolver


@dataclass(frozen=True)
class GraspCandidate:
    """A candidate end-effector pose for grasping an object, with an estimated quality."""

    pose: Pose3D
    quality: float = 0.0


class GraspPipeline(ABC):
    """An interface for generating and ranking grasp candidates for a target object."""

    @abstractmethod
    def generate_candidates(self, target_pose: Pose3D) -> list[GraspCandidate]:
        """Generate grasp candidates for an object at the given pose."""
        ...

    @abstractmethod
    def select_best(self, candidates: list[GraspCandidate]) -> GraspCandidate | None:
        """Select the best usable grasp candidate (None if no candidate is usable)."""
        ...


class TopDownGraspPipeline(GraspPipeline):
    """Generates top-down grasps around a block's vertical axis and picks a reachable one.

    Candidates point the end-effector's z-axis straight down at the object, rotated in yaw about
    the object's vertical axis. Quality prefers yaw angles aligned with one of the block's faces.
    """

    def __init__(
        self,
        solver: KinematicsSolver,
        link_name: str,
        seed_provider: Callable[[], Configuration],
        num_yaw_samples: int = 8,
        grasp_depth_m: float = 0.0,
    ) -> None:
        """Initialize the pipeline with the solver used to check grasp reachability.

        :param solver: Kinematics solver used to filter out unreachable grasps
        :param link_name: Name of the link placed at grasp poses
        :param seed_provider: Function providing the IK seed (e.g., the current configuration)
        :param num_yaw_samples: Number of yaw angles sampled about the object's vertical axis
        :param grasp_depth_m: Height (meters) of the grasp above the object's origin
        """
        if num_yaw_samples < 1:
            raise ValueError(f"At least one yaw sample is required, got {num_yaw_samples}.")

        self._solver = solver
        self._link_name = link_name
        self._seed_provider = seed_provider
        self.num_yaw_samples = num_yaw_samples
        self.grasp_depth_m = grasp_depth_m

    def generate_candidates(self, target_pose: Pose3D) -> list[GraspCandidate]:
        """Generate top-down grasp candidates for an object at the given pose."""
        x, y, z = target_pose.position.to_tuple()
        object_yaw_rad = target_pose.orientation.to_euler_rpy().yaw_rad

        candidates = []
        for k in range(self.num_yaw_samples):
            relative_yaw_rad = 2.0 * math.pi * k / self.num_yaw_samples
            pose = Pose3D.from_xyz_rpy(
                x=x,
                y=y,
                z=z + self.grasp_depth_m,
                roll_rad=math.pi,
                yaw_rad=object_yaw_rad + relative_yaw_rad,
                ref_frame=target_pose.ref_frame,
            )
            face_alignment = abs(math.cos(2.0 * relative_yaw_rad))  # 1.0 when aligned with a face
            candidates.append(GraspCandidate(pose=pose, quality=face_alignment))

        return candidates

    def select_best(self, candidates: list[GraspCandidate]) -> GraspCandidate | None:
        """Select the highest-quality candidate with an inverse kinematics solution."""
        seed = self._seed_provider()
        for candidate in sorted(candidates, key=lambda c: c.quality, reverse=True):
            if self._solver.solve_ik(self._link_name, candidate.pose, seed) is not None:
                return candidate
            console.print(f"[red]Unreachable grasp pose: {candidate.pose}[/]")

        return None
