"""Implement a simulated SCARA arm providing kinematics, execution, and state monitoring."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from cartesian_pick.execution.motion_plan_request import GoalState
from cartesian_pick.execution.outcome import ExecutionOutcome
from cartesian_pick.kinematics import (
    Configuration,
    JointLimits,
    PlanningGroup,
    RobotState,
    joint_space_distance,
)
from cartesian_pick.motion_planning.motion_goal import MotionGoal
from cartesian_pick.parallelism import wait_until
from cartesian_pick.robots.execution_subsystem import ExecutionSubsystem
from cartesian_pick.robots.kinematics_solver import KinematicsSolver
from cartesian_pick.robots.motion_planning_action import MotionPlanningAction
from cartesian_pick.robots.state_monitor import StateMonitor
from cartesian_pick.spatial import DEFAULT_FRAME, Pose3D

if TYPE_CHECKING:
    from cartesian_pick.execution.motion_plan_request import MotionPlanRequest
    from cartesian_pick.motion_planning import Trajectory

logger = logging.getLogger(__name__)

SCARA_JOINTS = ("shoulder_yaw", "elbow_yaw", "lift", "wrist_yaw")
"""Joints of the simulated SCARA arm in their canonical order."""


@dataclass(frozen=True)
class ScaraGeometry:
    """Link lengths and offsets of a SCARA arm whose tool points straight down."""

    upper_arm_m: float = 0.35
    forearm_m: float = 0.30

    base_height_m: float = -0.05
    """Height (meters) of the tool link when the lift joint is at zero."""

    tool_link: str = "tool_link"

    start_tolerance: float = 0.01
    """Maximum joint-space distance between the arm and a pushed trajectory's first waypoint."""


def scara_planning_group(name: str = "arm") -> PlanningGroup:
    """Construct the planning group of the simulated SCARA arm."""
    return PlanningGroup(
        name=name,
        joint_names=SCARA_JOINTS,
        joint_limits={
            "shoulder_yaw": JointLimits(-2.6, 2.6, max_velocity=1.5, max_acceleration=3.0),
            "elbow_yaw": JointLimits(-2.6, 2.6, max_velocity=1.5, max_acceleration=3.0),
            "lift": JointLimits(0.0, 0.45, max_velocity=0.25, max_acceleration=0.5),
            "wrist_yaw": JointLimits(-math.tau, math.tau, max_velocity=3.0, max_acceleration=6.0),
        },
    )


def _wrap_near(angle_rad: float, reference_rad: float) -> float:
    """Shift an angle by a multiple of 2*pi so that it is as close as possible to a reference."""
    return angle_rad + 2.0 * math.pi * round((reference_rad - angle_rad) / (2.0 * math.pi))


class SimulatedScaraArm(KinematicsSolver, ExecutionSubsystem, StateMonitor):
    """A kinematic simulation of a four-joint SCARA arm.

    Executed trajectories move the simulated joints instantly, but the monitored state only
    changes when `spin_once` publishes it, as with joint states arriving over a transport layer.
    """

    def __init__(
        self,
        initial: Configuration,
        geometry: ScaraGeometry | None = None,
        group: PlanningGroup | None = None,
    ) -> None:
        """Initialize the simulated arm at the given configuration.

        :param initial: Initial joint values of the arm
        :param geometry: Link lengths and offsets of the arm (defaults used if None)
        :param group: Planning group of the arm (defaults to `scara_planning_group()`)
        """
        self.geometry = geometry or ScaraGeometry()
        self.group = group or scara_planning_group()
        self.group.validate(initial)

        self._lock = threading.Lock()
        self._joint_values: Configuration = dict(initial)
        self._published: RobotState | None = None

        self._queued: Trajectory | None = None
        self._active: Trajectory | None = None
        self.executed: list[Trajectory] = []
        """Trajectories whose execution has finished (in order)."""

        self.reject_pushes = False
        self.forced_outcomes: list[ExecutionOutcome] = []
        """Outcomes returned by upcoming executions, before defaulting to success."""

    @property
    def link_name(self) -> str:
        """Retrieve the name of the arm's tool link."""
        return self.geometry.tool_link

    @property
    def configuration(self) -> Configuration:
        """Retrieve the arm's true (not necessarily published) configuration."""
        with self._lock:
            return dict(self._joint_values)

    def set_configuration(self, configuration: Configuration) -> None:
        """Move the arm instantly to the given configuration."""
        self.group.validate(configuration)
        with self._lock:
            self._joint_values = dict(configuration)

    # Kinematics

    def _check_link(self, link_name: str) -> None:
        if link_name != self.geometry.tool_link:
            raise ValueError(f"Simulated arm has no kinematics for link '{link_name}'.")

    def compute_fk(self, link_name: str, configuration: Configuration) -> Pose3D:
        """Compute the pose of the tool link when the arm is at the given configuration."""
        self._check_link(link_name)
        l1, l2 = self.geometry.upper_arm_m, self.geometry.forearm_m
        q1, q2 = configuration["shoulder_yaw"], configuration["elbow_yaw"]

        return Pose3D.from_xyz_rpy(
            x=l1 * math.cos(q1) + l2 * math.cos(q1 + q2),
            y=l1 * math.sin(q1) + l2 * math.sin(q1 + q2),
            z=self.geometry.base_height_m + configuration["lift"],
            roll_rad=math.pi,
            yaw_rad=q1 + q2 + configuration["wrist_yaw"],
            ref_frame=DEFAULT_FRAME,
        )

    def solve_ik(self, link_name: str, target: Pose3D, seed: Configuration) -> Configuration | None:
        """Solve IK analytically, choosing the elbow branch nearest to the seed.

        :return: Configuration placing the tool link at the target, or None if unreachable
        """
        self._check_link(link_name)
        rotation = target.orientation.to_rotation_matrix()
        if not np.allclose(rotation[:, 2], [0.0, 0.0, -1.0], atol=1e-6):
            return None  # The tool can only point straight down

        tool_yaw = math.atan2(rotation[1, 0], rotation[0, 0])
        l1, l2 = self.geometry.upper_arm_m, self.geometry.forearm_m
        x, y, z = target.position.to_tuple()

        cos_elbow = (x * x + y * y - l1 * l1 - l2 * l2) / (2.0 * l1 * l2)
        if abs(cos_elbow) > 1.0:
            return None

        candidates: list[Configuration] = []
        for sin_elbow in (math.sqrt(1.0 - cos_elbow**2), -math.sqrt(1.0 - cos_elbow**2)):
            q2 = math.atan2(sin_elbow, cos_elbow)
            q1 = math.atan2(y, x) - math.atan2(l2 * sin_elbow, l1 + l2 * cos_elbow)
            q1 = _wrap_near(q1, seed["shoulder_yaw"])
            q4 = _wrap_near(tool_yaw - q1 - q2, seed["wrist_yaw"])
            candidate = {
                "shoulder_yaw": q1,
                "elbow_yaw": q2,
                "lift": z - self.geometry.base_height_m,
                "wrist_yaw": q4,
            }
            if not self.group.violated_joints(candidate):
                candidates.append(candidate)

        if not candidates:
            return None

        return min(candidates, key=lambda c: joint_space_distance(c, seed))

    # Trajectory execution

    def clear(self) -> None:
        """Discard any queued trajectory."""
        self._queued = None

    def push(self, trajectory: Trajectory) -> bool:
        """Queue the trajectory if it is well-formed and starts at the arm's configuration."""
        if self.reject_pushes or not trajectory.points:
            return False

        if set(trajectory.joint_names) != set(self.group.joint_names):
            logger.warning(f"Rejected trajectory for joints {trajectory.joint_names}.")
            return False

        start_distance = joint_space_distance(trajectory.points[0].positions, self.configuration)
        if start_distance > self.geometry.start_tolerance:
            logger.warning(f"Rejected trajectory starting {start_distance:.4f} from the arm.")
            return False

        self._queued = trajectory
        return True

    def execute_async(self) -> None:
        """Begin executing the queued trajectory."""
        if self._queued is None:
            raise RuntimeError("Cannot execute: no trajectory has been queued.")
        self._active, self._queued = self._queued, None

    def wait_for_completion(self) -> ExecutionOutcome:
        """Finish the active trajectory, moving the arm to where it stopped."""
        if self._active is None:
            raise RuntimeError("Cannot wait for completion: no trajectory is executing.")

        trajectory, self._active = self._active, None
        outcome = ExecutionOutcome.SUCCEEDED
        if self.forced_outcomes:
            outcome = self.forced_outcomes.pop(0)

        # Unsuccessful executions leave the arm partway along the trajectory
        stop_index = -1 if outcome == ExecutionOutcome.SUCCEEDED else len(trajectory) // 2
        self.set_configuration(trajectory.points[stop_index].positions)
        self.executed.append(trajectory)
        return outcome

    # State monitoring

    def spin_once(self) -> None:
        """Publish the arm's current joint values as a new state snapshot."""
        with self._lock:
            self._published = RobotState(dict(self._joint_values), stamp_s=time.monotonic())

    def missing_joints(self) -> list[str]:
        """Retrieve the joints for which no state has been published yet."""
        published = self._published
        if published is None:
            return list(self.group.joint_names)
        return [name for name in self.group.joint_names if name not in published.configuration]

    def current_state(self) -> RobotState | None:
        """Retrieve the latest published state of the arm."""
        return self._published if self.have_complete_state() else None


class SimulatedMotionPlanningAction(MotionPlanningAction):
    """A simulated planning-and-execution action that moves a simulated arm to goal poses."""

    def __init__(self, arm: SimulatedScaraArm, *, responsive: bool = True) -> None:
        """Initialize the simulated action server for the given arm.

        :param arm: Simulated arm moved by successful goals
        :param responsive: If False, goals never leave the ACTIVE state (to simulate timeouts)
        """
        self._arm = arm
        self.responsive = responsive
        self.server_available = True
        self.requests: list[MotionPlanRequest] = []
        self._state = GoalState.LOST

    def wait_for_server(self, timeout_s: float) -> bool:
        """Wait until the simulated server is marked as available."""
        return wait_until(lambda: self.server_available, timeout_s=timeout_s)

    def send_goal(self, request: MotionPlanRequest) -> None:
        """Plan to the goal by solving IK and, if it succeeds, move the arm there."""
        self.requests.append(request)
        self._state = GoalState.ACTIVE
        if not self.responsive:
            return

        if request.group_name != self._arm.group.name:
            self._state = GoalState.REJECTED
            return

        goal = MotionGoal(
            pose=request.goal_pose,
            position_tolerance_m=request.position_tolerance_m,
            orientation_tolerance_rad=request.orientation_tolerance_rad,
            target_point_offset=request.target_point_offset,
        )
        solution = self._arm.solve_ik(
            request.link_name,
            goal.link_origin_pose(),
            seed=self._arm.configuration,
        )
        if solution is None:
            self._state = GoalState.ABORTED
            return

        self._arm.set_configuration(solution)
        self._state = GoalState.SUCCEEDED

    def wait_for_result(self, timeout_s: float) -> bool:
        """Wait until the latest goal reaches a terminal state."""
        return wait_until(lambda: self._state.is_terminal, timeout_s=timeout_s)

    def get_state(self) -> GoalState:
        """Retrieve the state of the latest goal."""
        return self._state
