"""Unit tests for the PickPlaceOrchestrator, run against a simulated arm."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterator

import pytest

from cartesian_pick.errors import FailureKind
from cartesian_pick.execution import ExecutionOutcome, MotionGoalDispatcher, TrajectoryExecutor
from cartesian_pick.kinematics import Configuration
from cartesian_pick.motion_planning import (
    CartesianPathPlanner,
    IterativeParabolicTimeParameterization,
    TopDownGraspPipeline,
)
from cartesian_pick.parallelism import CallLoopThread
from cartesian_pick.robots import KinematicsSolver, SimulatedMotionPlanningAction, SimulatedScaraArm
from cartesian_pick.spatial import Pose3D
from cartesian_pick.tasks import PickPhase, PickPlaceOrchestrator, PickSequenceConfig
from cartesian_pick.visualization import VisualizationSink

from .examples.fake_robots import BrokenVisualizer, RecordingVisualizer

HOME = {"shoulder_yaw": 0.3, "elbow_yaw": 1.2, "lift": 0.2, "wrist_yaw": 0.0}
OBJECT_POSE = Pose3D.from_xyz_rpy(0.45, 0.05, 0.02)

FULL_HISTORY = [
    PickPhase.IDLE,
    PickPhase.GRASP_SELECTED,
    PickPhase.AT_HOVER,
    PickPhase.DESCENDED,
    PickPhase.ASCENDED,
    PickPhase.DONE,
]


class BranchFlippingSolver(KinematicsSolver):
    """Wraps the arm's kinematics, flipping the wrist by a full turn at one IK call."""

    def __init__(self, arm: SimulatedScaraArm, flip_at_call: int) -> None:
        self._arm = arm
        self._flip_at_call = flip_at_call
        self.num_ik_calls = 0

    def solve_ik(self, link_name: str, target: Pose3D, seed: Configuration) -> Configuration | None:
        self.num_ik_calls += 1
        solution = self._arm.solve_ik(link_name, target, seed)
        if solution is not None and self.num_ik_calls == self._flip_at_call:
            solution["wrist_yaw"] += 6.283185307179586
        return solution

    def compute_fk(self, link_name: str, configuration: Configuration) -> Pose3D:
        return self._arm.compute_fk(link_name, configuration)


@pytest.fixture
def arm() -> Iterator[SimulatedScaraArm]:
    """Provide a simulated arm whose joint states are published by a background thread."""
    simulated_arm = SimulatedScaraArm(HOME)
    spin_thread = CallLoopThread(simulated_arm.spin_once, loop_hz=200.0, name="joint_states")
    yield simulated_arm
    spin_thread.stop()


class OrchestratorHarness:
    """Assembles an orchestrator around a simulated arm, recording settle delays."""

    def __init__(
        self,
        arm: SimulatedScaraArm,
        config: PickSequenceConfig | None = None,
        action: SimulatedMotionPlanningAction | None = None,
        visualizer: VisualizationSink | None = None,
        planning_solver: KinematicsSolver | None = None,
    ) -> None:
        self.config = config or PickSequenceConfig()
        self.action = action or SimulatedMotionPlanningAction(arm)
        self.settle_delays: list[float] = []

        dispatcher = MotionGoalDispatcher(
            self.action,
            group_name=self.config.group_name,
            link_name=self.config.link_name,
            visualizer=visualizer,
        )
        self.orchestrator = PickPlaceOrchestrator(
            config=self.config,
            grasp_pipeline=TopDownGraspPipeline(arm, arm.link_name, lambda: arm.configuration),
            dispatcher=dispatcher,
            planner=CartesianPathPlanner(planning_solver or arm, arm.group),
            time_parameterizer=IterativeParabolicTimeParameterization(),
            executor=TrajectoryExecutor(arm),
            state_monitor=arm,
            group=arm.group,
            visualizer=visualizer,
            sleep_fn=self.settle_delays.append,
        )


def test_full_sequence_descends_and_lifts(arm: SimulatedScaraArm) -> None:
    """Verify that the default sequence visits every phase, moving 5 cm down and back up."""
    # Arrange - An orchestrator with default settings
    harness = OrchestratorHarness(arm)

    # Act - Run the sequence for a reachable object
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect success after visiting every phase in order
    assert result.success
    assert result.failure is None
    assert result.history == FULL_HISTORY
    assert harness.orchestrator.phase == PickPhase.DONE

    # Expect 50 one-millimeter steps (plus the start) in each direction, then a settle delay
    descend, lift = result.trajectories
    assert len(descend) == 51
    assert len(lift) == 51
    assert harness.settle_delays == [0.5, 0.5]

    # Expect the descent to lower the lift joint by 5 cm, and the lift to raise it back
    assert descend.points[-1].positions["lift"] == pytest.approx(
        descend.points[0].positions["lift"] - 0.05,
    )
    assert lift.points[-1].positions["lift"] == pytest.approx(descend.points[0].positions["lift"])
    assert arm.compute_fk(arm.link_name, arm.configuration).position.z == pytest.approx(0.09)


def test_infeasible_descent_fails_at_hover(arm: SimulatedScaraArm) -> None:
    """Verify that a descent achieving zero distance fails instead of reaching DESCENDED."""
    # Arrange - Hover exactly at the lowest reachable height, so no step down is possible
    config = replace(PickSequenceConfig(), hover_height_m=arm.geometry.base_height_m)
    harness = OrchestratorHarness(arm, config)

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect failure directly after the hover phase
    assert result.phase == PickPhase.FAILED
    assert result.failure == FailureKind.PLANNING_INFEASIBLE
    assert result.history == [
        PickPhase.IDLE,
        PickPhase.GRASP_SELECTED,
        PickPhase.AT_HOVER,
        PickPhase.FAILED,
    ]
    assert result.trajectories == []
    assert arm.executed == []


def test_no_feasible_grasp_fails_without_dispatching(arm: SimulatedScaraArm) -> None:
    """Verify that a missing grasp ends the sequence before any motion is requested."""
    # Arrange - An object far outside the arm's workspace
    harness = OrchestratorHarness(arm)

    # Act - Run the sequence
    result = harness.orchestrator.run(Pose3D.from_xyz_rpy(2.0, 0.0, 0.02))

    # Assert - Expect IDLE -> FAILED with no requests sent to the motion planner
    assert result.phase == PickPhase.FAILED
    assert result.failure == FailureKind.NO_FEASIBLE_GRASP
    assert result.history == [PickPhase.IDLE, PickPhase.FAILED]
    assert harness.action.requests == []


def test_repeated_runs_give_equivalent_trajectories(arm: SimulatedScaraArm) -> None:
    """Verify that two runs from the same configuration produce equivalent trajectories."""
    # Arrange - An orchestrator with default settings
    harness = OrchestratorHarness(arm)

    # Act - Run the sequence twice, returning the arm to its initial configuration in between
    first = harness.orchestrator.run(OBJECT_POSE)
    arm.set_configuration(HOME)
    harness.orchestrator.reset()
    second = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect equal waypoint counts and path lengths for both straight lines
    assert first.success and second.success
    for traj_a, traj_b in zip(first.trajectories, second.trajectories, strict=True):
        assert len(traj_a) == len(traj_b)
        assert traj_a.path_length() == pytest.approx(traj_b.path_length())


def test_run_requires_idle_phase(arm: SimulatedScaraArm) -> None:
    """Verify that a finished orchestrator must be reset before running again."""
    # Arrange - An orchestrator that has completed a sequence
    harness = OrchestratorHarness(arm)
    harness.orchestrator.run(OBJECT_POSE)

    # Act/Assert - Expect a second run without a reset to be refused
    with pytest.raises(RuntimeError):
        harness.orchestrator.run(OBJECT_POSE)

    harness.orchestrator.reset()
    assert harness.orchestrator.phase == PickPhase.IDLE


def test_unreachable_hover_fails_dispatch(arm: SimulatedScaraArm) -> None:
    """Verify that a hover goal the planner aborts ends the sequence."""
    # Arrange - A target-point offset so long that the link origin can't be placed
    config = replace(PickSequenceConfig(), hover_x_offset_m=2.0)
    harness = OrchestratorHarness(arm, config)

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect failure straight after grasp selection
    assert result.failure == FailureKind.DISPATCH_FAILED
    assert result.history == [PickPhase.IDLE, PickPhase.GRASP_SELECTED, PickPhase.FAILED]


def test_unresponsive_planner_times_out(arm: SimulatedScaraArm) -> None:
    """Verify that a hover goal without a result before the deadline ends the sequence."""
    # Arrange - A planner that never responds, and a short result timeout
    config = replace(PickSequenceConfig(), result_timeout_s=0.05)
    action = SimulatedMotionPlanningAction(arm, responsive=False)
    harness = OrchestratorHarness(arm, config, action=action)

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect a timeout, distinguished from a planner failure
    assert result.failure == FailureKind.DISPATCH_TIMEOUT
    assert result.phase == PickPhase.FAILED


def test_missing_joint_states_fail_as_stale() -> None:
    """Verify that straight lines aren't planned from an outdated robot state."""
    # Arrange - A simulated arm whose joint states are never published
    silent_arm = SimulatedScaraArm(HOME)
    config = replace(PickSequenceConfig(), state_timeout_s=0.05)
    harness = OrchestratorHarness(silent_arm, config)

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect failure after reaching the hover pose, before any trajectory is executed
    assert result.failure == FailureKind.STALE_STATE
    assert result.history[-2:] == [PickPhase.AT_HOVER, PickPhase.FAILED]
    assert silent_arm.executed == []


def test_rejected_trajectory_fails_the_descent(arm: SimulatedScaraArm) -> None:
    """Verify that a trajectory refused by the execution subsystem ends the sequence."""
    # Arrange - An arm refusing every trajectory
    arm.reject_pushes = True
    harness = OrchestratorHarness(arm)

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect a rejection after the hover phase, without any settle delay
    assert result.failure == FailureKind.EXECUTION_REJECTED
    assert result.history[-2:] == [PickPhase.AT_HOVER, PickPhase.FAILED]
    assert harness.settle_delays == []


@pytest.mark.parametrize(
    ("forced_outcomes", "last_phase"),
    [
        ([ExecutionOutcome.TIMED_OUT], PickPhase.AT_HOVER),
        ([ExecutionOutcome.SUCCEEDED, ExecutionOutcome.CONTROL_FAILED], PickPhase.DESCENDED),
    ],
)
def test_failed_execution_ends_the_sequence(
    arm: SimulatedScaraArm,
    forced_outcomes: list[ExecutionOutcome],
    last_phase: PickPhase,
) -> None:
    """Verify that an execution failure during either straight line ends the sequence."""
    # Arrange - An arm whose executions end with the given outcomes
    arm.forced_outcomes.extend(forced_outcomes)
    harness = OrchestratorHarness(arm)

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect failure after the last successful phase, with no retry
    assert result.failure == FailureKind.EXECUTION_FAILED
    assert result.history[-2:] == [last_phase, PickPhase.FAILED]
    assert len(arm.executed) == len(forced_outcomes)


def test_partial_descent_proceeds_unless_full_distance_is_required(
    arm: SimulatedScaraArm,
) -> None:
    """Verify that a partially feasible descent is used by default but may be refused."""
    # Arrange - Hover 2 cm above the lowest reachable height, then request a 5 cm descent
    low_hover = replace(PickSequenceConfig(), hover_height_m=arm.geometry.base_height_m + 0.02)
    harness = OrchestratorHarness(arm, low_hover)

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect the sequence to finish with a descent of about 2 cm
    assert result.success
    descend = result.trajectories[0]
    assert 20 <= len(descend) <= 21
    assert len(result.trajectories[1]) == 51

    # Arrange/Act - Require the full distance and run again from the same configuration
    strict = replace(low_hover, require_full_distance=True)
    arm.set_configuration(HOME)
    strict_result = OrchestratorHarness(arm, strict).orchestrator.run(OBJECT_POSE)

    # Assert - Expect the partial descent to be refused
    assert strict_result.failure == FailureKind.PLANNING_INFEASIBLE
    assert strict_result.history[-2:] == [PickPhase.AT_HOVER, PickPhase.FAILED]


def test_joint_space_jump_truncates_the_descent(arm: SimulatedScaraArm) -> None:
    """Verify that the descent stops short of a wrist flip, recording a warning."""
    # Arrange - A solver flipping the wrist at the 25th IK call, and an active jump filter
    config = replace(PickSequenceConfig(), jump_threshold=5.0)
    harness = OrchestratorHarness(arm, config, planning_solver=BranchFlippingSolver(arm, 25))

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect the descent to end just before the flip, and the sequence to finish
    assert result.success
    assert result.warnings == [FailureKind.JOINT_SPACE_DISCONTINUITY]
    assert len(result.trajectories[0]) == 25
    assert len(result.trajectories[1]) == 51


def test_joint_space_jump_at_first_step_fails_the_descent(arm: SimulatedScaraArm) -> None:
    """Verify that a wrist flip on the very first step leaves nothing to execute."""
    # Arrange - A solver flipping the wrist at the first IK call of the descent
    config = replace(PickSequenceConfig(), jump_threshold=5.0)
    harness = OrchestratorHarness(arm, config, planning_solver=BranchFlippingSolver(arm, 1))

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect the descent to fail as infeasible, without executing anything
    assert not result.success
    assert result.failure == FailureKind.PLANNING_INFEASIBLE
    assert result.warnings == [FailureKind.JOINT_SPACE_DISCONTINUITY]
    assert result.history[-2:] == [PickPhase.AT_HOVER, PickPhase.FAILED]
    assert result.trajectories == []
    assert arm.executed == []


def test_visualization_failures_never_abort_motion(arm: SimulatedScaraArm) -> None:
    """Verify that the sequence completes even when every visualization call fails."""
    harness = OrchestratorHarness(arm, visualizer=BrokenVisualizer())

    result = harness.orchestrator.run(OBJECT_POSE)

    assert result.success
    assert result.history == FULL_HISTORY


def test_goals_and_trajectories_are_displayed(arm: SimulatedScaraArm) -> None:
    """Verify that the hover goal and both straight-line trajectories are visualized."""
    # Arrange - A visualizer recording everything it displays
    visualizer = RecordingVisualizer()
    harness = OrchestratorHarness(arm, visualizer=visualizer)

    # Act - Run the sequence
    result = harness.orchestrator.run(OBJECT_POSE)

    # Assert - Expect one goal marker and both trajectories, labeled by motion
    assert [label for _, label in visualizer.markers] == ["goal"]
    assert [label for _, label in visualizer.trajectories] == ["descend", "lift"]
    assert [traj for traj, _ in visualizer.trajectories] == result.trajectories
