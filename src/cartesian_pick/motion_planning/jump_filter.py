"""Define a filter that truncates paths at large jumps in joint space."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

import numpy as np

from cartesian_pick.kinematics import Configuration, joint_space_distance

if TYPE_CHECKING:
    from cartesian_pick.motion_planning.trajectories import Path

logger = logging.getLogger(__name__)


def consecutive_distances(
    path: Path,
    distance_fn: Callable[[Configuration, Configuration], float] = joint_space_distance,
) -> list[float]:
    """Compute the joint-space distance between each pair of consecutive configurations."""
    return [distance_fn(a, b) for a, b in zip(path, path[1:])]


def truncate_on_jump(
    path: Path,
    jump_threshold: float,
    distance_fn: Callable[[Configuration, Configuration], float] = joint_space_distance,
) -> Path:
    """Truncate the path just before its first discontinuity in joint space.

    Even when consecutive Cartesian waypoints are evenly spaced, the corresponding joint values
    may "jump" (e.g., when IK flips to another solution branch). A pair of consecutive
    configurations is a jump if their distance exceeds the mean consecutive distance of the
    whole path multiplied by the threshold. The mean is computed once, over the original path.

    :param path: Sequence of configurations to be checked (left unmodified)
    :param jump_threshold: Multiple of the mean distance considered a jump (0.0 disables the check)
    :param distance_fn: Function measuring the distance between two configurations
    :return: Prefix of the path ending just before the first jump (the full path if none)
    :raises ValueError: If the jump threshold is negative
    """
    if jump_threshold < 0.0:
        raise ValueError(f"Jump threshold must be non-negative, got {jump_threshold}.")
    if jump_threshold == 0.0 or len(path) < 2:
        return path

    distances = consecutive_distances(path, distance_fn)
    max_allowed = float(np.mean(distances)) * jump_threshold

    for i, distance in enumerate(distances):
        if distance > max_allowed:
            logger.warning(
                f"Joint-space jump of {distance:.4f} between waypoints {i} and {i + 1} exceeds "
                f"{max_allowed:.4f}; truncating the path from {len(path)} to {i + 1} waypoints.",
            )
            return path[: i + 1]

    return path
