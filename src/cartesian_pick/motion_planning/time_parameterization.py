"""Define iterative parabolic time parameterization of joint-space paths.

The approach follows MoveIt's IterativeParabolicTimeParameterization: each segment first gets
the shortest duration allowed by the joint velocity limits, then forward and backward passes
stretch segments until the parabolic blend at every waypoint respects the acceleration limits.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from cartesian_pick.errors import DegenerateTrajectoryError, JointLimitViolationError
from cartesian_pick.motion_planning.trajectories import Trajectory, TrajectoryPoint

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from cartesian_pick.kinematics import PlanningGroup
    from cartesian_pick.motion_planning.trajectories import Path

logger = logging.getLogger(__name__)

STRETCH_FACTOR = 1.01
"""Factor by which a segment's duration grows per step while resolving an acceleration bound."""

ACCELERATION_RTOL = 1e-9
"""Relative tolerance under which an acceleration is considered to respect its bound."""


def _blend_acceleration(delta_1: float, delta_2: float, dt_1: float, dt_2: float) -> float:
    """Compute the acceleration of a parabolic blend between two consecutive segments.

    Only stationary segments take zero time; the waypoints beside them are at rest, not blended.
    """
    if dt_1 == 0.0 or dt_2 == 0.0:
        return 0.0
    v_1 = delta_1 / dt_1
    v_2 = delta_2 / dt_2
    return 2.0 * (v_2 - v_1) / (dt_1 + dt_2)


def _stationary_segments(deltas: NDArray[np.float64]) -> NDArray[np.bool_]:
    """Flag the segments along which no joint moves (repeated waypoints), where the arm rests."""
    return np.all(deltas == 0.0, axis=1)


def _find_t2(delta_1: float, delta_2: float, dt_1: float, dt_2: float, a_max: float) -> float:
    """Stretch the second segment's duration until the blend acceleration is within bounds."""
    while abs(_blend_acceleration(delta_1, delta_2, dt_1, dt_2)) > a_max:
        dt_2 *= STRETCH_FACTOR
    return dt_2


def _find_t1(delta_1: float, delta_2: float, dt_1: float, dt_2: float, a_max: float) -> float:
    """Stretch the first segment's duration until the blend acceleration is within bounds."""
    while abs(_blend_acceleration(delta_1, delta_2, dt_1, dt_2)) > a_max:
        dt_1 *= STRETCH_FACTOR
    return dt_1


class IterativeParabolicTimeParameterization:
    """Assigns timestamps, velocities, and accelerations to a geometric path."""

    def __init__(
        self,
        max_iterations: int = 100,
        max_velocity_scaling: float = 1.0,
        max_acceleration_scaling: float = 1.0,
    ) -> None:
        """Configure the time parameterization.

        :param max_iterations: Maximum number of forward/backward smoothing passes
        :param max_velocity_scaling: Fraction (0, 1] of the joint velocity limits used
        :param max_acceleration_scaling: Fraction (0, 1] of the joint acceleration limits used
        """
        if max_iterations < 1:
            raise ValueError(f"At least one smoothing iteration is required, got {max_iterations}.")
        for name, scaling in (
            ("velocity", max_velocity_scaling),
            ("acceleration", max_acceleration_scaling),
        ):
            if not 0.0 < scaling <= 1.0:
                raise ValueError(f"Max {name} scaling must be within (0, 1], got {scaling}.")

        self.max_iterations = max_iterations
        self.max_velocity_scaling = max_velocity_scaling
        self.max_acceleration_scaling = max_acceleration_scaling

    def parameterize(self, path: Path, group: PlanningGroup) -> Trajectory:
        """Compute a time-parameterized trajectory following the given path.

        :param path: Sequence of configurations of the planning group's joints
        :param group: Planning group providing the joint order and limits
        :return: Trajectory starting and ending at rest, within the velocity/acceleration limits
        :raises DegenerateTrajectoryError: If the path has fewer than two waypoints
        :raises JointLimitViolationError: If any waypoint lies outside the joint position limits
        """
        if len(path) < 2:
            raise DegenerateTrajectoryError(
                f"Cannot time-parameterize a path with {len(path)} waypoint(s); at least 2 needed.",
            )

        for index, config in enumerate(path):
            group.validate(config)
            violated = group.violated_joints(config)
            if violated:
                raise JointLimitViolationError(
                    f"Waypoint {index} violates the position limits of joints {violated}.",
                )

        positions = np.array([group.to_array(config) for config in path])
        limits = [group.limits_for(name) for name in group.joint_names]
        v_max = np.array([lim.max_velocity for lim in limits]) * self.max_velocity_scaling
        a_max = np.array([lim.max_acceleration for lim in limits]) * self.max_acceleration_scaling

        deltas = np.diff(positions, axis=0)  # Shape (num_points - 1, num_joints)
        time_diffs = self._apply_velocity_constraints(deltas, v_max)
        self._apply_rest_constraints(deltas, time_diffs, a_max)
        self._apply_acceleration_constraints(deltas, time_diffs, a_max)

        return self._build_trajectory(positions, deltas, time_diffs, group)

    @staticmethod
    def _apply_velocity_constraints(
        deltas: NDArray[np.float64],
        v_max: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Compute the shortest duration of each segment allowed by the velocity limits."""
        return np.max(np.abs(deltas) / v_max, axis=1)

    @staticmethod
    def _apply_rest_constraints(
        deltas: NDArray[np.float64],
        time_diffs: NDArray[np.float64],
        a_max: NDArray[np.float64],
    ) -> None:
        """Lengthen every segment that starts or ends at rest so the arm can start and stop.

        The arm rests at both ends of the path and on either side of a stationary segment.
        A waypoint at rest blends into a segment of displacement d over duration t with
        acceleration 2d/t^2, so each such segment needs t >= sqrt(2|d| / a_max).
        """
        stationary = _stationary_segments(deltas)
        last = len(time_diffs) - 1

        for segment in range(last + 1):
            starts_at_rest = segment == 0 or stationary[segment - 1]
            ends_at_rest = segment == last or stationary[segment + 1]
            if stationary[segment] or not (starts_at_rest or ends_at_rest):
                continue

            t_min = float(np.max(np.sqrt(2.0 * np.abs(deltas[segment]) / a_max)))
            t_min *= 1.0 + ACCELERATION_RTOL
            time_diffs[segment] = max(time_diffs[segment], t_min)

    def _apply_acceleration_constraints(
        self,
        deltas: NDArray[np.float64],
        time_diffs: NDArray[np.float64],
        a_max: NDArray[np.float64],
    ) -> None:
        """Stretch segments in alternating passes until every interior blend is within bounds."""
        num_points = len(deltas) + 1
        num_joints = deltas.shape[1]
        bounds = a_max * (1.0 + ACCELERATION_RTOL)

        for iteration in range(self.max_iterations):
            num_updates = 0

            for backwards in (False, True):
                interior = range(num_points - 2, 0, -1) if backwards else range(1, num_points - 1)
                for i in interior:
                    for j in range(num_joints):
                        d_1, d_2 = float(deltas[i - 1, j]), float(deltas[i, j])
                        dt_1, dt_2 = float(time_diffs[i - 1]), float(time_diffs[i])
                        if abs(_blend_acceleration(d_1, d_2, dt_1, dt_2)) <= bounds[j]:
                            continue

                        if backwards:
                            time_diffs[i - 1] = _find_t1(d_1, d_2, dt_1, dt_2, float(a_max[j]))
                        else:
                            time_diffs[i] = _find_t2(d_1, d_2, dt_1, dt_2, float(a_max[j]))
                        num_updates += 1

            if num_updates == 0:
                logger.debug(f"Time parameterization converged after {iteration + 1} iteration(s).")
                return

        # Uniformly slowing the trajectory scales every acceleration by the same factor
        worst_ratio = self._worst_acceleration_ratio(deltas, time_diffs, a_max)
        if worst_ratio > 1.0:
            logger.warning(
                f"Time parameterization didn't converge in {self.max_iterations} iterations; "
                f"slowing the trajectory uniformly by {math.sqrt(worst_ratio):.4f}x.",
            )
            time_diffs *= math.sqrt(worst_ratio) * (1.0 + ACCELERATION_RTOL)

    @staticmethod
    def _worst_acceleration_ratio(
        deltas: NDArray[np.float64],
        time_diffs: NDArray[np.float64],
        a_max: NDArray[np.float64],
    ) -> float:
        """Find the largest ratio of blended acceleration to its limit over interior waypoints."""
        worst = 0.0
        for i in range(1, len(deltas)):
            for j in range(deltas.shape[1]):
                a = _blend_acceleration(
                    float(deltas[i - 1, j]),
                    float(deltas[i, j]),
                    float(time_diffs[i - 1]),
                    float(time_diffs[i]),
                )
                worst = max(worst, abs(a) / float(a_max[j]))
        return worst

    @staticmethod
    def _build_trajectory(
        positions: NDArray[np.float64],
        deltas: NDArray[np.float64],
        time_diffs: NDArray[np.float64],
        group: PlanningGroup,
    ) -> Trajectory:
        """Assemble trajectory points from the positions and final segment durations."""
        num_points = len(positions)
        times = np.concatenate(([0.0], np.cumsum(time_diffs)))
        velocities = np.zeros_like(positions)
        accelerations = np.zeros_like(positions)
        stationary = _stationary_segments(deltas)

        for i in range(num_points):
            departs_from_rest = i == 0 or stationary[i - 1]
            arrives_at_rest = i == num_points - 1 or stationary[i]
            if departs_from_rest and arrives_at_rest:
                continue  # Rests between two stationary segments

            for j in range(positions.shape[1]):
                if departs_from_rest:  # Start from rest: mirror the following segment
                    d_1, d_2 = -deltas[i, j], deltas[i, j]
                    dt_1 = dt_2 = time_diffs[i]
                elif arrives_at_rest:  # Stop at rest: mirror the preceding segment
                    d_1, d_2 = deltas[i - 1, j], -deltas[i - 1, j]
                    dt_1 = dt_2 = time_diffs[i - 1]
                else:
                    d_1, d_2 = deltas[i - 1, j], deltas[i, j]
                    dt_1, dt_2 = time_diffs[i - 1], time_diffs[i]

                if dt_1 == 0.0 or dt_2 == 0.0:
                    continue
                velocities[i, j] = 0.5 * (d_1 / dt_1 + d_2 / dt_2)
                accelerations[i, j] = _blend_acceleration(d_1, d_2, dt_1, dt_2)

        points = [
            TrajectoryPoint(
                time_s=float(times[i]),
                positions=group.from_array(positions[i]),
                velocities=group.from_array(velocities[i]),
                accelerations=group.from_array(accelerations[i]),
            )
            for i in range(num_points)
        ]
        return Trajectory(points)
