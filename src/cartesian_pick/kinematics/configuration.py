"""Define a type alias to represent robot joint configurations."""

from __future__ import annotations

from typing import Dict

Configuration = Dict[str, float]
"""A map from joint names to positions (rad or m)."""


def joint_space_distance(config_a: Configuration, config_b: Configuration) -> float:
    """Compute the joint-space distance between two configurations of the same joints.

    The distance is the sum of absolute per-joint differences, matching how MoveIt measures
    the distance between two states of a joint model group.

    :param config_a: First configuration used to compute the distance
    :param config_b: Second configuration used to compute the distance
    :return: Sum over all joints of the absolute difference in joint values
    :raises KeyError: If the configurations don't specify the same set of joints
    """
    if config_a.keys() != config_b.keys():
        raise KeyError(f"Configurations specify different joints: {config_a} vs {config_b}.")

    return float(sum(abs(config_a[name] - config_b[name]) for name in config_a))
