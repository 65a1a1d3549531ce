"""Define the settings used by the vertical pick/lift sequence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from cartesian_pick.io.config_schemata import PickSequenceFileSchema
from cartesian_pick.io.yaml_utils import load_yaml_data

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class PickSequenceConfig:
    """Configures the pre-grasp hover, straight-line approach, and retreat of a pick."""

    group_name: str = "arm"
    link_name: str = "tool_link"
    """Name of the link that is moved to the hover pose and along the straight lines."""

    hover_height_m: float = 0.09
    """Height (meters, in the base frame) of the pre-grasp hover pose."""

    hover_x_offset_m: float = 0.15
    """Offset (meters) along the link's x-axis of the point constrained to the hover pose."""

    position_tolerance_m: float = 1e-4
    orientation_tolerance_rad: float = 1e-2
    num_planning_attempts: int = 1
    allowed_planning_time_s: float = 5.0
    result_timeout_s: float = 5.0

    descend_distance_m: float = 0.05
    lift_distance_m: float = 0.05

    max_step_m: float = 0.001
    """Maximum Cartesian distance (meters) between consecutive configurations on a line."""

    jump_threshold: float = 0.0
    """Multiple of the mean joint-space step considered a jump (0.0 disables the filter)."""

    require_full_distance: bool = False
    """Fail a straight-line phase unless its full distance was planned."""

    max_velocity_scaling: float = 1.0
    max_acceleration_scaling: float = 1.0

    settle_time_s: float = 0.5
    """Pause (seconds) after each straight-line motion, allowing transients to decay."""

    state_timeout_s: float = 2.0
    """Maximum duration (seconds) to wait for a fresh robot state before planning."""

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> PickSequenceConfig:
        """Load and validate pick sequence settings from a YAML file.

        :param yaml_path: Path to a YAML file with an optional top-level `pick_sequence` key
        :return: Constructed PickSequenceConfig instance
        :raises ValueError: If the YAML data doesn't match the expected schema
        """
        yaml_data = load_yaml_data(yaml_path)
        try:
            schema = PickSequenceFileSchema.model_validate(yaml_data)
        except ValidationError as error:
            raise ValueError(f"Invalid pick sequence settings in {yaml_path}:\n{error}") from error

        return cls(**schema.pick_sequence.model_dump())
