"""Define Pydantic models for validating pick/lift sequence YAML configuration files."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PickSequenceSchema(BaseModel):
    """Schema for the settings of a vertical pick/lift sequence."""

    group_name: str = Field(default="arm", min_length=1)
    link_name: str = Field(default="tool_link", min_length=1)

    # Pre-grasp hover
    hover_height_m: float = Field(default=0.09, description="Height (m) of the hover pose")
    hover_x_offset_m: float = Field(default=0.15, description="Target-point offset (m) along x")
    position_tolerance_m: float = Field(default=1e-4, gt=0)
    orientation_tolerance_rad: float = Field(default=1e-2, gt=0)
    num_planning_attempts: int = Field(default=1, ge=1)
    allowed_planning_time_s: float = Field(default=5.0, gt=0)
    result_timeout_s: float = Field(default=5.0, gt=0)

    # Straight-line approach and retreat
    descend_distance_m: float = Field(default=0.05, gt=0)
    lift_distance_m: float = Field(default=0.05, gt=0)
    max_step_m: float = Field(default=0.001, gt=0)
    jump_threshold: float = Field(default=0.0, ge=0)
    require_full_distance: bool = False
    max_velocity_scaling: float = Field(default=1.0, gt=0, le=1)
    max_acceleration_scaling: float = Field(default=1.0, gt=0, le=1)

    # Waits
    settle_time_s: float = Field(default=0.5, ge=0)
    state_timeout_s: float = Field(default=2.0, gt=0)

    model_config = ConfigDict(extra="forbid")


class PickSequenceFileSchema(BaseModel):
    """Schema for a YAML file containing pick/lift sequence settings."""

    pick_sequence: PickSequenceSchema = Field(default_factory=PickSequenceSchema)

    model_config = ConfigDict(extra="forbid")
