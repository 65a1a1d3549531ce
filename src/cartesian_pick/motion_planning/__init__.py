"""Import classes and definitions enabling straight-line motion planning."""

from .cartesian_planner import CartesianPathPlanner as CartesianPathPlanner
from .cartesian_planner import CartesianPlanResult as CartesianPlanResult
from .grasping import GraspCandidate as GraspCandidate
from .grasping import GraspPipeline as GraspPipeline
from .grasping import TopDownGraspPipeline as TopDownGraspPipeline
from .jump_filter import consecutive_distances as consecutive_distances
from .jump_filter import truncate_on_jump as truncate_on_jump
from .motion_goal import MotionGoal as MotionGoal
from .time_parameterization import (
    IterativeParabolicTimeParameterization as IterativeParabolicTimeParameterization,
)
from .trajectories import Path as Path
from .trajectories import Trajectory as Trajectory
from .trajectories import TrajectoryPoint as TrajectoryPoint
