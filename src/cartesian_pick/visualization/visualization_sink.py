"""Define a write-only interface for visualizing goal poses and planned trajectories."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from cartesian_pick.io.logging import console

if TYPE_CHECKING:
    from cartesian_pick.motion_planning import Trajectory
    from cartesian_pick.spatial import Pose3D

logger = logging.getLogger(__name__)


class VisualizationSink(ABC):
    """A fire-and-forget destination for visualization markers and trajectory displays."""

    @abstractmethod
    def publish_pose_marker(self, pose: Pose3D, label: str) -> None:
        """Display a marker at the given pose."""
        ...

    @abstractmethod
    def publish_trajectory(self, trajectory: Trajectory, label: str) -> None:
        """Display the given planned trajectory."""
        ...


@dataclass(frozen=True)
class ConsoleVisualizationConfig:
    """Settings controlling how much detail is printed by the console visualizer."""

    max_listed_waypoints: int = 3
    """Number of waypoints printed from each end of a displayed trajectory."""

    muted: bool = False


class ConsoleVisualizationSink(VisualizationSink):
    """Visualizes poses and trajectories by printing summaries to the console."""

    def __init__(self, config: ConsoleVisualizationConfig | None = None) -> None:
        """Initialize the visualizer with its display settings."""
        self.config = config or ConsoleVisualizationConfig()

    def publish_pose_marker(self, pose: Pose3D, label: str) -> None:
        """Print the given pose as a marker."""
        if not self.config.muted:
            console.print(f"[cyan]Marker[/] [bold]{label}[/]: {pose}")

    def publish_trajectory(self, trajectory: Trajectory, label: str) -> None:
        """Print a summary of the given trajectory."""
        if self.config.muted:
            return

        console.print(
            f"[cyan]Trajectory[/] [bold]{label}[/]: {len(trajectory)} waypoints over "
            f"{trajectory.duration_s:.3f} s (joints: {', '.join(trajectory.joint_names)})",
        )
        n = self.config.max_listed_waypoints
        shown = trajectory.points if len(trajectory) <= 2 * n else trajectory.points[:n]
        for point in shown:
            values = ", ".join(f"{v:.4f}" for v in point.positions.values())
            console.print(f"  t={point.time_s:.3f}s [{values}]")
        if len(trajectory) > 2 * n:
            console.print(f"  ... ({len(trajectory) - 2 * n} waypoints omitted)")
            for point in trajectory.points[-n:]:
                values = ", ".join(f"{v:.4f}" for v in point.positions.values())
                console.print(f"  t={point.time_s:.3f}s [{values}]")


def safe_publish(publish: Callable[[], None], description: str) -> bool:
    """Call a visualization function, logging (rather than propagating) any error it raises.

    :param publish: Zero-argument function performing the visualization
    :param description: Short description of what is visualized (used in the log message)
    :return: True if the visualization succeeded, else False
    """
    try:
        publish()
    except Exception:  # noqa: BLE001
        logger.warning(f"Visualization of {description} failed; continuing.", exc_info=True)
        return False

    return True
