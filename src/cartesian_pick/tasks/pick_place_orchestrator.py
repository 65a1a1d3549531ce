"""Define a state machine sequencing the hover, straight-line descent, and lift of a pick."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

from cartesian_pick.errors import (
    DegenerateTrajectoryError,
    ExecutionRejectedError,
    FailureKind,
    JointLimitViolationError,
)
from cartesian_pick.execution import ExecutionOutcome
from cartesian_pick.motion_planning import MotionGoal, truncate_on_jump
from cartesian_pick.spatial import Point3D
from cartesian_pick.tasks.outcome import Outcome
from cartesian_pick.visualization import safe_publish

if TYPE_CHECKING:
    from cartesian_pick.execution import MotionGoalDispatcher, TrajectoryExecutor
    from cartesian_pick.kinematics import PlanningGroup
    from cartesian_pick.motion_planning import (
        CartesianPathPlanner,
        GraspCandidate,
        GraspPipeline,
        IterativeParabolicTimeParameterization,
        Trajectory,
    )
    from cartesian_pick.robots import StateMonitor
    from cartesian_pick.spatial import Pose3D
    from cartesian_pick.tasks.pick_sequence_config import PickSequenceConfig
    from cartesian_pick.visualization import VisualizationSink

logger = logging.getLogger(__name__)

DOWN = (0.0, 0.0, -1.0)
UP = (0.0, 0.0, 1.0)


class PickPhase(Enum):
    """A phase of the pick/lift sequence; DONE and FAILED are terminal."""

    IDLE = "idle"
    GRASP_SELECTED = "grasp_selected"
    AT_HOVER = "at_hover"
    DESCENDED = "descended"
    ASCENDED = "ascended"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PickSequenceResult:
    """A summary of one run of the pick/lift sequence."""

    phase: PickPhase
    message: str
    failure: FailureKind | None = None

    history: list[PickPhase] = field(default_factory=list)
    """Phases visited during the run, in order (beginning with IDLE)."""

    trajectories: list[Trajectory] = field(default_factory=list)
    """Straight-line trajectories that were handed to the executor."""

    warnings: list[FailureKind] = field(default_factory=list)
    """Non-fatal problems encountered (e.g., paths truncated at joint-space jumps)."""

    @property
    def success(self) -> bool:
        """Check whether the sequence ran to completion."""
        return self.phase == PickPhase.DONE


class PickPlaceOrchestrator:
    """Runs a pick sequence: select a grasp, hover above it, descend, and lift straight up.

    Each transition happens at most once per run; any failure moves the sequence to FAILED
    without retrying or undoing earlier motions. Call `reset()` to run another sequence.
    """

    def __init__(
        self,
        config: PickSequenceConfig,
        grasp_pipeline: GraspPipeline,
        dispatcher: MotionGoalDispatcher,
        planner: CartesianPathPlanner,
        time_parameterizer: IterativeParabolicTimeParameterization,
        executor: TrajectoryExecutor,
        state_monitor: StateMonitor,
        group: PlanningGroup,
        visualizer: VisualizationSink | None = None,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the orchestrator with the components performing each phase.

        :param config: Settings of the pick sequence
        :param grasp_pipeline: Pipeline generating and selecting grasp candidates
        :param dispatcher: Dispatcher used to reach the hover pose with the global planner
        :param planner: Planner computing the straight-line descent and lift
        :param time_parameterizer: Converts planned paths into timed trajectories
        :param executor: Executes timed trajectories on the arm
        :param state_monitor: Source of the robot state that each straight line starts from
        :param group: Planning group moved along the straight lines
        :param visualizer: Optional sink used to display planned trajectories
        :param sleep_fn: Function used for the settle delay after each straight line
        """
        self.config = config
        self._grasp_pipeline = grasp_pipeline
        self._dispatcher = dispatcher
        self._planner = planner
        self._time_parameterizer = time_parameterizer
        self._executor = executor
        self._state_monitor = state_monitor
        self._group = group
        self._visualizer = visualizer
        self._sleep_fn = sleep_fn

        self.phase = PickPhase.IDLE
        self._history: list[PickPhase] = [PickPhase.IDLE]
        self._trajectories: list[Trajectory] = []
        self._warnings: list[FailureKind] = []
        self._last_motion_s: float | None = None

    def reset(self) -> None:
        """Return the orchestrator to IDLE so that another sequence can be run."""
        self.phase = PickPhase.IDLE
        self._history = [PickPhase.IDLE]
        self._trajectories = []
        self._warnings = []

    def run(self, target_pose: Pose3D) -> PickSequenceResult:
        """Run the full pick/lift sequence for an object at the given pose.

        :param target_pose: Pose of the object to be picked
        :return: Result describing the final phase and any failure
        :raises RuntimeError: If the orchestrator isn't IDLE
        """
        if self.phase != PickPhase.IDLE:
            raise RuntimeError(f"Cannot start a pick from phase {self.phase.name}; reset first.")

        grasp_outcome = self._select_grasp(target_pose)
        if not grasp_outcome.success:
            return self._fail(grasp_outcome)
        self._advance(PickPhase.GRASP_SELECTED)

        hover_outcome = self._move_to_hover(grasp_outcome.output)
        if not hover_outcome.success:
            return self._fail(hover_outcome)
        self._advance(PickPhase.AT_HOVER)

        straight_lines = (
            ("descend", DOWN, self.config.descend_distance_m, PickPhase.DESCENDED),
            ("lift", UP, self.config.lift_distance_m, PickPhase.ASCENDED),
        )
        for label, direction, distance_m, next_phase in straight_lines:
            line_outcome = self._move_straight(label, direction, distance_m)
            if not line_outcome.success:
                return self._fail(line_outcome)
            self._advance(next_phase)

        self._advance(PickPhase.DONE)
        logger.info("Pick sequence completed.")
        return self._result("Pick sequence completed.")

    def _advance(self, phase: PickPhase) -> None:
        logger.info(f"Pick sequence: {self.phase.name} -> {phase.name}")
        self.phase = phase
        self._history.append(phase)

    def _fail(self, outcome: Outcome) -> PickSequenceResult:
        logger.error(f"Pick sequence failed during {self.phase.name}: {outcome.message}")
        failed_from = self.phase
        self._advance(PickPhase.FAILED)
        return self._result(f"Failed after {failed_from.name}: {outcome.message}", outcome.failure)

    def _result(self, message: str, failure: FailureKind | None = None) -> PickSequenceResult:
        return PickSequenceResult(
            phase=self.phase,
            message=message,
            failure=failure,
            history=list(self._history),
            trajectories=list(self._trajectories),
            warnings=list(self._warnings),
        )

    def _select_grasp(self, target_pose: Pose3D) -> Outcome[GraspCandidate]:
        """Generate grasp candidates for the target and select the best usable one."""
        candidates = self._grasp_pipeline.generate_candidates(target_pose)
        best = self._grasp_pipeline.select_best(candidates) if candidates else None
        if best is None:
            return Outcome.failed(
                FailureKind.NO_FEASIBLE_GRASP,
                f"None of {len(candidates)} grasp candidates is feasible.",
            )

        logger.info(f"Selected grasp (quality {best.quality:.3f}): {best.pose}")
        return Outcome(True, "Selected a grasp.", output=best)

    def _move_to_hover(self, grasp: GraspCandidate) -> Outcome[None]:
        """Move to the hover pose above the grasp using the global motion planner."""
        hover_pose = grasp.pose.with_position(
            Point3D(grasp.pose.position.x, grasp.pose.position.y, self.config.hover_height_m),
        )
        goal = MotionGoal(
            pose=hover_pose,
            position_tolerance_m=self.config.position_tolerance_m,
            orientation_tolerance_rad=self.config.orientation_tolerance_rad,
            target_point_offset=Point3D(self.config.hover_x_offset_m, 0.0, 0.0),
        )

        reached = self._dispatcher.move_to(
            goal,
            planning_timeout_s=self.config.allowed_planning_time_s,
            result_timeout_s=self.config.result_timeout_s,
        )
        self._last_motion_s = time.monotonic()

        if not reached:
            if self._dispatcher.last_state is None:
                return Outcome.failed(FailureKind.DISPATCH_TIMEOUT, "Timed out moving to hover.")
            return Outcome.failed(
                FailureKind.DISPATCH_FAILED,
                f"Motion to hover pose ended in state {self._dispatcher.last_state.name}.",
            )

        return Outcome(True, "Reached the hover pose.")

    def _move_straight(
        self,
        label: str,
        direction: tuple[float, float, float],
        distance_m: float,
    ) -> Outcome[Trajectory]:
        """Plan, time, and execute a straight-line motion starting from a fresh robot state.

        :param label: Name of the motion (used in messages and displays)
        :param direction: Unit direction of the motion in the base frame
        :param distance_m: Distance (meters) the link should travel
        :return: Outcome containing the executed trajectory if the motion succeeded
        """
        state = self._state_monitor.wait_for_state(
            newer_than_s=self._last_motion_s,
            timeout_s=self.config.state_timeout_s,
        )
        if state is None:
            return Outcome.failed(
                FailureKind.STALE_STATE,
                f"No fresh robot state within {self.config.state_timeout_s:.1f} s ({label}).",
            )
        start = {name: state.configuration[name] for name in self._group.joint_names}

        plan = self._planner.plan(
            start,
            self.config.link_name,
            direction,
            distance_m,
            self.config.max_step_m,
        )
        if plan.is_empty:
            return Outcome.failed(
                FailureKind.PLANNING_INFEASIBLE,
                f"Could not take a single step along the '{label}' line.",
            )

        kept_path = truncate_on_jump(plan.path, self.config.jump_threshold)
        if len(kept_path) < len(plan.path):
            self._warnings.append(FailureKind.JOINT_SPACE_DISCONTINUITY)
            plan = plan.truncated(len(kept_path))
            if plan.is_empty:
                return Outcome.failed(
                    FailureKind.PLANNING_INFEASIBLE,
                    f"Joint-space jump at the first step of the '{label}' line.",
                )

        if not plan.is_complete:
            if self.config.require_full_distance:
                return Outcome.failed(
                    FailureKind.PLANNING_INFEASIBLE,
                    f"Planned {plan.achieved_distance_m:.4f} of {distance_m:.4f} m ({label}).",
                )
            logger.warning(
                f"Proceeding with partial '{label}' path: {plan.achieved_distance_m:.4f} of "
                f"{distance_m:.4f} m.",
            )

        try:
            trajectory = self._time_parameterizer.parameterize(plan.path, self._group)
        except DegenerateTrajectoryError as error:
            return Outcome.failed(FailureKind.DEGENERATE_TRAJECTORY, str(error))
        except JointLimitViolationError as error:
            return Outcome.failed(FailureKind.JOINT_LIMIT_VIOLATION, str(error))

        if self._visualizer is not None:
            visualizer = self._visualizer
            safe_publish(lambda: visualizer.publish_trajectory(trajectory, label), label)

        try:
            execution_outcome = self._executor.execute(trajectory)
        except ExecutionRejectedError as error:
            return Outcome.failed(FailureKind.EXECUTION_REJECTED, str(error))
        finally:
            self._last_motion_s = time.monotonic()

        self._trajectories.append(trajectory)
        if execution_outcome != ExecutionOutcome.SUCCEEDED:
            return Outcome.failed(
                FailureKind.EXECUTION_FAILED,
                f"Execution of '{label}' ended with {execution_outcome.name}.",
            )

        self._sleep_fn(self.config.settle_time_s)
        return Outcome(True, f"Completed the '{label}' motion.", output=trajectory)
