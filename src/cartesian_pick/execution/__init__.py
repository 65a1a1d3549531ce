"""Import classes that execute trajectories and dispatch motion goals."""

from .motion_goal_dispatcher import MotionGoalDispatcher as MotionGoalDispatcher
from .motion_plan_request import GoalState as GoalState
from .motion_plan_request import MotionPlanRequest as MotionPlanRequest
from .outcome import ExecutionOutcome as ExecutionOutcome
from .trajectory_executor import TrajectoryExecutor as TrajectoryExecutor
