"""Import classes and definitions for robot kinematics."""

from .configuration import Configuration as Configuration
from .configuration import joint_space_distance as joint_space_distance
from .planning_group import JointLimits as JointLimits
from .planning_group import PlanningGroup as PlanningGroup
from .robot_state import RobotState as RobotState
