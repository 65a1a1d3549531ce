"""Define a class that sends single-pose goals to an external planning-and-execution action."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cartesian_pick.execution.motion_plan_request import GoalState, MotionPlanRequest
from cartesian_pick.visualization import safe_publish

if TYPE_CHECKING:
    from cartesian_pick.motion_planning import MotionGoal
    from cartesian_pick.robots import MotionPlanningAction
    from cartesian_pick.visualization import VisualizationSink

logger = logging.getLogger(__name__)


class MotionGoalDispatcher:
    """Moves a link to a goal pose using an external (non-straight-line) motion planner."""

    def __init__(
        self,
        action: MotionPlanningAction,
        group_name: str,
        link_name: str,
        num_planning_attempts: int = 1,
        visualizer: VisualizationSink | None = None,
    ) -> None:
        """Initialize the dispatcher with the action client it sends goals through.

        :param action: Client of the planning-and-execution action service
        :param group_name: Name of the planning group moved to reach goals
        :param link_name: Name of the link constrained to the goal pose
        :param num_planning_attempts: Number of planning attempts requested per goal
        :param visualizer: Optional sink used to display goal poses
        """
        self._action = action
        self.group_name = group_name
        self.link_name = link_name
        self.num_planning_attempts = num_planning_attempts
        self._visualizer = visualizer

        self.last_state: GoalState | None = None
        """Terminal state of the latest goal (None if the latest wait timed out)."""

    def wait_for_server(self, timeout_s: float) -> bool:
        """Wait until the action server is available to receive goals."""
        available = self._action.wait_for_server(timeout_s)
        if not available:
            logger.warning(f"Action server unavailable after waiting {timeout_s:.1f} seconds.")
        return available

    def move_to(self, goal: MotionGoal, planning_timeout_s: float, result_timeout_s: float) -> bool:
        """Plan and execute a motion to the given goal, blocking until it resolves or times out.

        If the wait times out, the outcome of the goal is indeterminate: the arm may or may not
        have moved.

        :param goal: Goal pose, tolerances, and target-point offset for the link
        :param planning_timeout_s: Time (seconds) the planner is allowed to spend planning
        :param result_timeout_s: Maximum duration (seconds) to wait for a terminal state
        :return: True if the goal succeeded, False on timeout or any other terminal state
        """
        request = MotionPlanRequest(
            group_name=self.group_name,
            link_name=self.link_name,
            goal_pose=goal.pose,
            position_tolerance_m=goal.position_tolerance_m,
            orientation_tolerance_rad=goal.orientation_tolerance_rad,
            target_point_offset=goal.target_point_offset,
            num_planning_attempts=self.num_planning_attempts,
            allowed_planning_time_s=planning_timeout_s,
        )

        logger.info(
            f"Sending planning goal for '{self.link_name}' with target-point offset "
            f"{goal.target_point_offset}: {goal.pose}",
        )
        if self._visualizer is not None:
            visualizer = self._visualizer
            safe_publish(lambda: visualizer.publish_pose_marker(goal.pose, "goal"), "goal pose")

        self.last_state = None
        self._action.send_goal(request)

        if not self._action.wait_for_result(result_timeout_s):
            logger.error(
                f"No result within {result_timeout_s:.1f} seconds; the goal's outcome is unknown.",
            )
            return False

        state = self._action.get_state()
        self.last_state = state
        if state != GoalState.SUCCEEDED:
            logger.error(f"Motion to goal failed with state: {state.value}.")
            return False

        logger.info("Motion to goal succeeded.")
        return True
