"""Import interfaces to external robot services and their simulated implementations."""

from .execution_subsystem import ExecutionSubsystem as ExecutionSubsystem
from .kinematics_solver import KinematicsSolver as KinematicsSolver
from .motion_planning_action import MotionPlanningAction as MotionPlanningAction
from .simulated_arm import SCARA_JOINTS as SCARA_JOINTS
from .simulated_arm import ScaraGeometry as ScaraGeometry
from .simulated_arm import SimulatedMotionPlanningAction as SimulatedMotionPlanningAction
from .simulated_arm import SimulatedScaraArm as SimulatedScaraArm
from .simulated_arm import scara_planning_group as scara_planning_group
from .state_monitor import StateMonitor as StateMonitor
