"""Define a minimal dataclass to represent the outcome of a phase of the pick sequence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from cartesian_pick.errors import FailureKind

OutputT = TypeVar("OutputT")
"""Type variable representing output data associated with an outcome."""


@dataclass(frozen=True)
class Outcome(Generic[OutputT]):
    """An outcome (and optional output value) from one phase of the pick sequence."""

    success: bool
    message: str
    output: OutputT | None = None
    """Optional output value resulting from the phase (defaults to None)."""

    failure: FailureKind | None = None
    """Kind of failure that ended the phase (None if the phase succeeded)."""

    def __post_init__(self) -> None:
        """Verify that failed outcomes (and only failed outcomes) carry a failure kind."""
        if self.success == (self.failure is not None):
            raise ValueError(f"Outcome (success={self.success}) has failure kind {self.failure}.")

    @classmethod
    def failed(cls, failure: FailureKind, message: str) -> Outcome:
        """Construct an unsuccessful outcome of the given kind."""
        return cls(success=False, message=message, failure=failure)
