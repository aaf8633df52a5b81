"""Planar geometry for field-relative platform math.

Field frame conventions:
- Origin at a field corner, +X away from the blue driver station, +Y left
- Headings in radians, counter-clockwise positive, 0 along +X
- Points and velocities are numpy float64 arrays of shape (2,)

Angles are always compared on the shortest path: ``wrap_angle`` maps any
angle into [-pi, pi), so there is no discontinuity at the +/-pi boundary.
"""

import math
from dataclasses import dataclass

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

TWO_PI = 2.0 * math.pi


# =============================================================================
# Vector Utilities
# =============================================================================


@beartype
def vec2(x: float, y: float) -> NDArray[np.float64]:
    """Build a 2D float64 vector."""
    return np.array([x, y], dtype=np.float64)


@beartype
def as_vec2(value: NDArray | tuple[float, float] | list[float]) -> NDArray[np.float64]:
    """Coerce a point-like value into a float64 array of shape (2,)."""
    arr = np.asarray(value, dtype=np.float64)
    if arr.shape != (2,):
        raise ValueError(f"Expected a 2D vector, got shape {arr.shape}")
    return arr


@beartype
def frozen_vec2(value: NDArray | tuple[float, float] | list[float]) -> NDArray[np.float64]:
    """Copy a point into a read-only float64 array."""
    arr = as_vec2(value).copy()
    arr.flags.writeable = False
    return arr


@beartype
def distance(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    """Euclidean distance between two points [m]."""
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


@beartype
def angle_of(v: NDArray[np.float64]) -> float:
    """Direction of a vector [rad], in (-pi, pi]."""
    return math.atan2(float(v[1]), float(v[0]))


# =============================================================================
# Angle Utilities
# =============================================================================


@beartype
def wrap_angle(angle: float) -> float:
    """Wrap an angle into [-pi, pi)."""
    wrapped = math.fmod(angle + math.pi, TWO_PI)
    if wrapped < 0.0:
        wrapped += TWO_PI
    return wrapped - math.pi


@beartype
def angle_difference(a: float, b: float) -> float:
    """Shortest signed angle a - b [rad]."""
    return wrap_angle(a - b)


# =============================================================================
# Pose
# =============================================================================


@beartype
@dataclass(frozen=True)
class Pose:
    """Platform pose on the field.

    Attributes:
        x: Field X position [m]
        y: Field Y position [m]
        heading: Heading [rad], counter-clockwise from +X
    """
    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0

    @property
    def translation(self) -> NDArray[np.float64]:
        """Position as a 2D vector [m]."""
        return vec2(self.x, self.y)

    @classmethod
    def from_translation(
        cls,
        translation: NDArray[np.float64],
        heading: float = 0.0,
    ) -> "Pose":
        """Create a pose from a 2D position vector."""
        return cls(x=float(translation[0]), y=float(translation[1]), heading=heading)
