"""Run the vertical pick/lift sequence against a simulated SCARA arm.

To run this script, use the commands:

    pip install -e .
    python scripts/vertical_approach_demo.py --config config/vertical_approach.yaml

"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from cartesian_pick.execution import MotionGoalDispatcher, TrajectoryExecutor
from cartesian_pick.io import configure_logging, console
from cartesian_pick.motion_planning import (
    CartesianPathPlanner,
    IterativeParabolicTimeParameterization,
    TopDownGraspPipeline,
)
from cartesian_pick.parallelism import CallLoopThread
from cartesian_pick.robots import SimulatedMotionPlanningAction, SimulatedScaraArm
from cartesian_pick.spatial import Pose3D
from cartesian_pick.tasks import PickPlaceOrchestrator, PickSequenceConfig
from cartesian_pick.visualization import ConsoleVisualizationSink

INITIAL_CONFIGURATION = {"shoulder_yaw": 0.3, "elbow_yaw": 1.2, "lift": 0.2, "wrist_yaw": 0.0}
STATE_PUBLISH_HZ = 50.0


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML file of pick sequence settings (defaults are used if omitted).",
)
@click.option(
    "--object-xyz",
    nargs=3,
    type=float,
    default=(0.45, 0.05, 0.02),
    show_default=True,
    help="Position (meters) of the object to be picked.",
)
@click.option("--object-yaw", type=float, default=0.0, help="Yaw (radians) of the object.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
def vertical_approach(
    config_path: Path | None,
    object_xyz: tuple[float, float, float],
    object_yaw: float,
    log_level: str,
) -> None:
    """Select a grasp, hover above it, descend straight down, and lift straight back up."""
    configure_logging(logging.getLevelName(log_level.upper()))
    config = PickSequenceConfig.from_yaml(config_path) if config_path else PickSequenceConfig()

    arm = SimulatedScaraArm(INITIAL_CONFIGURATION)
    if config.link_name != arm.link_name or config.group_name != arm.group.name:
        raise click.BadParameter(
            f"Simulated arm moves group '{arm.group.name}' with link '{arm.link_name}'.",
            param_hint="--config",
        )

    visualizer = ConsoleVisualizationSink()
    dispatcher = MotionGoalDispatcher(
        SimulatedMotionPlanningAction(arm),
        group_name=config.group_name,
        link_name=config.link_name,
        num_planning_attempts=config.num_planning_attempts,
        visualizer=visualizer,
    )
    orchestrator = PickPlaceOrchestrator(
        config=config,
        grasp_pipeline=TopDownGraspPipeline(arm, config.link_name, lambda: arm.configuration),
        dispatcher=dispatcher,
        planner=CartesianPathPlanner(arm, arm.group),
        time_parameterizer=IterativeParabolicTimeParameterization(
            max_velocity_scaling=config.max_velocity_scaling,
            max_acceleration_scaling=config.max_acceleration_scaling,
        ),
        executor=TrajectoryExecutor(arm),
        state_monitor=arm,
        group=arm.group,
        visualizer=visualizer,
    )

    spin_thread = CallLoopThread(arm.spin_once, loop_hz=STATE_PUBLISH_HZ, name="joint_states")
    try:
        if not dispatcher.wait_for_server(timeout_s=config.result_timeout_s):
            console.print("[red]Motion planning action server is unavailable.[/]")
            return

        x, y, z = object_xyz
        result = orchestrator.run(Pose3D.from_xyz_rpy(x, y, z, yaw_rad=object_yaw))
    finally:
        spin_thread.stop()

    if result.success:
        console.print(f"[green]{result.message}[/]")
    else:
        console.print(f"[red]{result.message}[/] ({result.failure.name if result.failure else ''})")

    console.print(f"Phases visited: {' -> '.join(phase.name for phase in result.history)}")
    for trajectory in result.trajectories:
        console.print(
            f"  {len(trajectory)} waypoints, {trajectory.duration_s:.3f} s, "
            f"joint-space length {trajectory.path_length():.4f}",
        )


if __name__ == "__main__":
    vertical_approach()
