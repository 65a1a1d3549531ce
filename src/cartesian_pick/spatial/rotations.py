"""Define classes to represent 3D rotations and orientations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from pyquaternion import Quaternion as Q
from trimesh.transformations import euler_from_quaternion, quaternion_from_euler, quaternion_matrix

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass(frozen=True)
class EulerRPY:
    """A 3D rotation represented using three fixed-frame Euler angles."""

    roll_rad: float
    pitch_rad: float
    yaw_rad: float

    def to_tuple(self) -> tuple[float, float, float]:
        """Convert the Euler angles into a (roll, pitch, yaw) tuple."""
        return (float(self.roll_rad), float(self.pitch_rad), float(self.yaw_rad))

    def to_quaternion(self) -> Quaternion:
        """Convert the Euler angles into an equivalent unit quaternion."""
        w, x, y, z = quaternion_from_euler(self.roll_rad, self.pitch_rad, self.yaw_rad, axes="sxyz")
        return Quaternion(x=x, y=y, z=z, w=w)


@dataclass(frozen=True)
class Quaternion:
    """A unit quaternion representing the orientation of a link or grasp.

    The quaternion is normalized when constructed, so any non-zero (x,y,z,w) is accepted.
    """

    x: float
    y: float
    z: float
    w: float

    def __post_init__(self) -> None:
        """Normalize the quaternion after it is initialized."""
        norm = float(np.linalg.norm([self.x, self.y, self.z, self.w]))
        if norm == 0:
            raise ValueError(f"Cannot normalize a zero-valued quaternion: {self}")

        # Frozen dataclass: bypass __setattr__ to store the normalized values
        object.__setattr__(self, "x", float(self.x) / norm)
        object.__setattr__(self, "y", float(self.y) / norm)
        object.__setattr__(self, "z", float(self.z) / norm)
        object.__setattr__(self, "w", float(self.w) / norm)

    def rotate(self, vector: NDArray[np.float64]) -> NDArray[np.float64]:
        """Rotate the given 3-vector by this quaternion (pyquaternion stores w first)."""
        q = Q(self.w, self.x, self.y, self.z)
        return np.asarray(q.rotate(vector), dtype=np.float64)

    def to_array(self) -> NDArray[np.float64]:
        """Convert the quaternion to a NumPy array of the form [x,y,z,w]."""
        return np.array([self.x, self.y, self.z, self.w])

    def to_euler_rpy(self) -> EulerRPY:
        """Convert the quaternion into equivalent Euler roll, pitch, and yaw angles."""
        r, p, y = euler_from_quaternion(quaternion=[self.w, self.x, self.y, self.z], axes="sxyz")
        return EulerRPY(float(r), float(p), float(y))

    def to_rotation_matrix(self) -> NDArray[np.float64]:
        """Convert the quaternion to a 3x3 rotation matrix (trimesh puts w first)."""
        return quaternion_matrix(quaternion=[self.w, self.x, self.y, self.z])[:3, :3]

    def approx_equal(self, other: Quaternion, rtol: float = 1e-05, atol: float = 1e-08) -> bool:
        """Evaluate whether another Quaternion is approximately equal to this one.

        Note: A quaternion is considered equal to its negation, as they express the same rotation.
        """
        self_array = self.to_array()
        other_array = other.to_array()

        return bool(
            np.allclose(self_array, other_array, rtol=rtol, atol=atol)
            or np.allclose(-self_array, other_array, rtol=rtol, atol=atol),
        )
