"""Unit tests for iterative parabolic time parameterization of joint-space paths."""

from __future__ import annotations

import math

import hypothesis.strategies as st
import pytest
from hypothesis import given, settings

from cartesian_pick.errors import DegenerateTrajectoryError, JointLimitViolationError
from cartesian_pick.kinematics import JointLimits, PlanningGroup
from cartesian_pick.motion_planning import IterativeParabolicTimeParameterization

from .strategies.motion_strategies import planning_problems

LIMIT_RTOL = 1e-6
scalings = st.floats(min_value=0.1, max_value=1.0)


@settings(deadline=None, max_examples=60)
@given(planning_problems(), scalings, scalings)
def test_trajectory_respects_joint_limits(
    problem,
    velocity_scaling: float,
    acceleration_scaling: float,
) -> None:
    """Verify that timed trajectories start and stop at rest within the (scaled) joint limits."""
    # Arrange - Given a random group with random limits, and a path of its joints
    group, path = problem
    parameterizer = IterativeParabolicTimeParameterization(
        max_velocity_scaling=velocity_scaling,
        max_acceleration_scaling=acceleration_scaling,
    )

    # Act - Time-parameterize the path
    trajectory = parameterizer.parameterize(path, group)

    # Assert - Expect one point per waypoint, following the path exactly
    assert len(trajectory) == len(path)
    for point, config in zip(trajectory.points, path):
        assert point.positions == pytest.approx(config)

    # Expect time to start at zero and never decrease
    times = [point.time_s for point in trajectory.points]
    assert times[0] == 0.0
    assert all(t_next >= t for t, t_next in zip(times, times[1:]))
    assert trajectory.duration_s > 0.0

    # Expect the arm to be at rest at both ends
    for name in group.joint_names:
        assert trajectory.points[0].velocities[name] == 0.0
        assert trajectory.points[-1].velocities[name] == 0.0

    # Expect no velocity or acceleration beyond its (scaled) limit
    for point in trajectory.points:
        for name in group.joint_names:
            limits = group.limits_for(name)
            v_max = limits.max_velocity * velocity_scaling
            a_max = limits.max_acceleration * acceleration_scaling
            assert abs(point.velocities[name]) <= v_max * (1.0 + LIMIT_RTOL)
            assert abs(point.accelerations[name]) <= a_max * (1.0 + LIMIT_RTOL)


def test_segment_durations_follow_velocity_limit() -> None:
    """Verify that a long, uniform path moves at the velocity limit through its middle."""
    # Arrange - A single joint moving 1 cm per waypoint, limited to 0.1 m/s and 10 m/s^2
    group = PlanningGroup(
        name="lift",
        joint_names=("lift",),
        joint_limits={"lift": JointLimits(-1.0, 1.0, max_velocity=0.1, max_acceleration=10.0)},
    )
    path = [{"lift": 0.01 * i} for i in range(11)]

    # Act - Time-parameterize the path
    trajectory = IterativeParabolicTimeParameterization().parameterize(path, group)

    # Assert - Expect interior segments to take 0.1 s (1 cm at 0.1 m/s)
    times = [point.time_s for point in trajectory.points]
    interior_durations = [t_next - t for t, t_next in zip(times[1:-2], times[2:-1])]
    assert interior_durations == pytest.approx([0.1] * len(interior_durations))
    assert trajectory.points[5].velocities["lift"] == pytest.approx(0.1)


@pytest.mark.parametrize("num_waypoints", [0, 1])
def test_degenerate_paths_are_rejected(num_waypoints: int) -> None:
    """Verify that a path needs at least two waypoints to become a trajectory."""
    group = PlanningGroup("arm", ("a",), {"a": JointLimits(-1.0, 1.0)})
    path = [{"a": 0.0}] * num_waypoints

    with pytest.raises(DegenerateTrajectoryError):
        IterativeParabolicTimeParameterization().parameterize(path, group)


def test_waypoints_outside_position_limits_are_rejected() -> None:
    """Verify that time parameterization enforces the joint position limits."""
    # Arrange - A path whose final waypoint exceeds the upper limit of joint 'a'
    group = PlanningGroup("arm", ("a",), {"a": JointLimits(-1.0, 1.0)})
    path = [{"a": 0.9}, {"a": 1.0}, {"a": 1.1}]

    # Act/Assert - Expect a joint limit violation
    with pytest.raises(JointLimitViolationError):
        IterativeParabolicTimeParameterization().parameterize(path, group)


def test_mismatched_joints_are_rejected() -> None:
    """Verify that paths must specify exactly the joints of the planning group."""
    group = PlanningGroup("arm", ("a", "b"), {})
    path = [{"a": 0.0}, {"a": 0.1}]

    with pytest.raises(ValueError):
        IterativeParabolicTimeParameterization().parameterize(path, group)


@pytest.mark.parametrize("scaling", [0.0, -0.5, 1.5])
def test_invalid_scaling_factors_are_rejected(scaling: float) -> None:
    """Verify that velocity and acceleration scaling factors must lie within (0, 1]."""
    with pytest.raises(ValueError):
        IterativeParabolicTimeParameterization(max_velocity_scaling=scaling)
    with pytest.raises(ValueError):
        IterativeParabolicTimeParameterization(max_acceleration_scaling=scaling)


def test_repeated_waypoint_brings_the_arm_to_rest() -> None:
    """Verify that the arm decelerates to a stop at a repeated waypoint and restarts from rest."""
    # Arrange - A single joint whose path pauses at 0.2 (a waypoint repeated twice)
    group = PlanningGroup(
        name="lift",
        joint_names=("lift",),
        joint_limits={"lift": JointLimits(-1.0, 1.0, max_velocity=1.0, max_acceleration=1.0)},
    )
    path = [{"lift": value} for value in (0.0, 0.1, 0.2, 0.2, 0.3, 0.4, 0.5)]

    # Act - Time-parameterize the path
    trajectory = IterativeParabolicTimeParameterization().parameterize(path, group)

    # Assert - Expect the arm at rest at both copies of the repeated waypoint
    points = trajectory.points
    assert len(points) == len(path)
    assert points[2].velocities["lift"] == 0.0
    assert points[3].velocities["lift"] == 0.0
    assert points[3].time_s == points[2].time_s

    # Expect the segments into and out of the pause to allow stopping within the limit
    min_rest_segment_s = math.sqrt(2.0 * 0.1 / 1.0)
    assert points[2].time_s - points[1].time_s >= min_rest_segment_s
    assert points[4].time_s - points[3].time_s >= min_rest_segment_s

    # Expect velocity changes between timed waypoints to respect the acceleration limit
    for prev, curr in zip(points, points[1:]):
        dt = curr.time_s - prev.time_s
        if dt > 0.0:
            implied = abs(curr.velocities["lift"] - prev.velocities["lift"]) / dt
            assert implied <= 1.0 * (1.0 + LIMIT_RTOL)
        assert abs(curr.accelerations["lift"]) <= 1.0 * (1.0 + LIMIT_RTOL)
