"""Define a planner that moves a robot link along a straight line in Cartesian space."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from cartesian_pick.kinematics import Configuration, PlanningGroup
    from cartesian_pick.motion_planning.trajectories import Path
    from cartesian_pick.robots import KinematicsSolver

logger = logging.getLogger(__name__)

ValidityCheck = Callable[["Configuration"], bool]
"""A function deciding whether a configuration computed along the path is acceptable."""

STEP_COUNT_RTOL = 1e-9
"""Relative tolerance used when dividing the distance into steps (so 0.05 / 0.001 is 50 steps)."""


@dataclass(frozen=True)
class CartesianPlanResult:
    """The (possibly partial) result of planning a straight-line Cartesian path."""

    path: Path
    """Configurations along the line, beginning with the start configuration."""

    achieved_distance_m: float
    requested_distance_m: float

    offsets_m: tuple[float, ...]
    """Distance (meters) along the line of each configuration in the path."""

    def __post_init__(self) -> None:
        """Verify that every configuration in the path has a matching offset."""
        if len(self.path) != len(self.offsets_m):
            raise ValueError(
                f"Path has {len(self.path)} configurations but {len(self.offsets_m)} offsets.",
            )

    @property
    def fraction(self) -> float:
        """Retrieve the fraction (0.0 to 1.0) of the requested distance that was achieved."""
        return self.achieved_distance_m / self.requested_distance_m

    @property
    def is_complete(self) -> bool:
        """Check whether the path covers the full requested distance."""
        return math.isclose(self.achieved_distance_m, self.requested_distance_m, rel_tol=1e-9)

    @property
    def is_empty(self) -> bool:
        """Check whether planning failed to take even a single step along the line."""
        return self.achieved_distance_m == 0.0

    def truncated(self, num_waypoints: int) -> CartesianPlanResult:
        """Keep only the first waypoints of the path, updating the achieved distance to match.

        :param num_waypoints: Number of waypoints (at least one, the start) to keep
        :return: Result describing the shortened path
        """
        if not 1 <= num_waypoints <= len(self.path):
            raise ValueError(
                f"Cannot keep {num_waypoints} waypoints of a {len(self.path)}-point path.",
            )

        return CartesianPlanResult(
            path=self.path[:num_waypoints],
            achieved_distance_m=self.offsets_m[num_waypoints - 1],
            requested_distance_m=self.requested_distance_m,
            offsets_m=self.offsets_m[:num_waypoints],
        )


class CartesianPathPlanner:
    """Computes configurations that keep a link's origin on a straight line in task space."""

    def __init__(self, solver: KinematicsSolver, group: PlanningGroup) -> None:
        """Initialize the planner with the kinematics solver and planning group it uses.

        :param solver: Solver providing forward and inverse kinematics for the group
        :param group: Planning group whose joints are varied along the path
        """
        self._solver = solver
        self._group = group

    @staticmethod
    def _normalize_direction(
        direction: Sequence[float] | NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Convert the given direction into a unit 3-vector.

        :raises ValueError: If the direction isn't a non-zero 3-vector
        """
        direction_arr = np.asarray(direction, dtype=np.float64)
        if direction_arr.shape != (3,):
            raise ValueError(f"Direction must be a 3-vector, got shape {direction_arr.shape}.")

        norm = float(np.linalg.norm(direction_arr))
        if norm == 0.0 or not math.isfinite(norm):
            raise ValueError(f"Cannot plan along a zero or non-finite direction: {direction_arr}.")

        if not math.isclose(norm, 1.0, rel_tol=1e-6):
            logger.warning(f"Normalizing non-unit direction {direction_arr} (norm {norm:.6f}).")

        return direction_arr / norm

    def plan(
        self,
        start: Configuration,
        link_name: str,
        direction: Sequence[float] | NDArray[np.float64],
        distance_m: float,
        max_step_m: float,
        *,
        global_reference_frame: bool = True,
        validity_check: ValidityCheck | None = None,
    ) -> CartesianPlanResult:
        """Compute a sequence of configurations moving the link's origin along a straight line.

        The line begins at the link's pose in the start configuration; the link's orientation is
        held fixed. The k-th waypoint lies k * max_step_m along the line (the last one exactly at
        distance_m). IK at each increment is seeded with the previous solution. If IK fails (or the
        validity check rejects a solution), planning stops and the path computed so far is
        returned: callers must compare the achieved distance against the requested one.

        :param start: Configuration of the planning group at the start of the path
        :param link_name: Name of the link whose origin follows the line
        :param direction: Direction of motion (unit vector, normalized if it isn't)
        :param distance_m: Distance (meters) the link's origin should travel
        :param max_step_m: Maximum Cartesian distance (meters) between consecutive waypoints
        :param global_reference_frame: If False, the direction is given in the link's own frame
        :param validity_check: Optional function that may reject configurations along the path
        :return: Planned path and the distance actually achieved (0.0 if no step was feasible)
        """
        self._group.validate(start)
        if distance_m <= 0.0:
            raise ValueError(f"Distance to travel must be positive, got {distance_m} m.")
        if max_step_m <= 0.0:
            raise ValueError(f"Maximum step must be positive, got {max_step_m} m.")

        unit_direction = self._normalize_direction(direction)

        start_pose = self._solver.compute_fk(link_name, start)
        if not global_reference_frame:
            unit_direction = start_pose.orientation.rotate(unit_direction)

        # Full steps of max_step_m; only the final step may be shorter
        num_steps = max(1, math.ceil(distance_m / max_step_m * (1.0 - STEP_COUNT_RTOL)))

        path: list[Configuration] = [dict(start)]
        offsets_m: list[float] = [0.0]
        seed = start

        for k in range(1, num_steps + 1):
            offset_m = distance_m if k == num_steps else min(k * max_step_m, distance_m)
            target = start_pose.translated(offset_m * unit_direction)

            solution = self._solver.solve_ik(link_name, target, seed)
            if solution is None:
                logger.debug(f"IK failed at step {k}/{num_steps} ({offset_m:.4f} m along line).")
                break
            if validity_check is not None and not validity_check(solution):
                logger.debug(f"Invalid configuration at step {k}/{num_steps}: {solution}")
                break

            path.append(solution)
            offsets_m.append(offset_m)
            seed = solution

        result = CartesianPlanResult(
            path=path,
            achieved_distance_m=offsets_m[-1],
            requested_distance_m=distance_m,
            offsets_m=tuple(offsets_m),
        )

        if result.is_complete:
            logger.info(f"Cartesian path achieved the full {distance_m:.4f} m ({num_steps} steps).")
        else:
            logger.warning(
                f"Cartesian path achieved {result.achieved_distance_m:.4f} m of the requested "
                f"{distance_m:.4f} m ({result.fraction * 100.0:.1f}%).",
            )

        return result
