"""Value types for shoot-on-the-move targeting.

- PlatformState: per-tick snapshot of the moving platform (field frame)
- FixedTarget: the physical goal the projectile must reach
- LaunchPowerState: launcher wheel speed setpoint
- ShotSolution: motion-compensated firing solution

All of these are frozen. Array fields are copied into read-only float64
arrays on construction, so a value handed to a consumer can never change
underneath it. A new ShotSolution replaces the old one wholesale.
"""

from dataclasses import dataclass, field

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from sotm.geometry import Pose, frozen_vec2


def _zeros() -> NDArray[np.float64]:
    return np.zeros(2, dtype=np.float64)


# =============================================================================
# Platform State
# =============================================================================


@beartype
@dataclass(frozen=True, eq=False)
class PlatformState:
    """Snapshot of the platform at one control tick.

    Attributes:
        position: [x, y] field position [m]
        heading: Heading [rad]
        velocity: [vx, vy] field-relative velocity [m/s]
        acceleration: [ax, ay] filtered field-relative acceleration [m/s^2]
    """
    position: NDArray[np.float64]
    heading: float
    velocity: NDArray[np.float64] = field(default_factory=_zeros)
    acceleration: NDArray[np.float64] = field(default_factory=_zeros)

    def __post_init__(self) -> None:
        """Freeze array fields."""
        object.__setattr__(self, "position", frozen_vec2(self.position))
        object.__setattr__(self, "velocity", frozen_vec2(self.velocity))
        object.__setattr__(self, "acceleration", frozen_vec2(self.acceleration))

    @classmethod
    def from_pose(
        cls,
        pose: Pose,
        velocity: NDArray[np.float64],
        acceleration: NDArray[np.float64] | None = None,
    ) -> "PlatformState":
        """Create state from a pose plus velocity/acceleration vectors."""
        return cls(
            position=pose.translation,
            heading=pose.heading,
            velocity=velocity,
            acceleration=_zeros() if acceleration is None else acceleration,
        )

    @property
    def pose(self) -> Pose:
        """Position and heading as a Pose."""
        return Pose.from_translation(self.position, self.heading)

    @property
    def speed(self) -> float:
        """Linear speed magnitude [m/s]."""
        return float(np.hypot(self.velocity[0], self.velocity[1]))


# =============================================================================
# Target
# =============================================================================


@beartype
@dataclass(frozen=True, eq=False)
class FixedTarget:
    """Physical goal on the field.

    Attributes:
        position: [x, y] center of the goal opening [m]
        opening_width: Width of the opening, measured along field Y [m]
    """
    position: NDArray[np.float64]
    opening_width: float

    def __post_init__(self) -> None:
        """Validate and freeze."""
        if self.opening_width <= 0:
            raise ValueError(f"opening_width must be positive, got {self.opening_width}")
        object.__setattr__(self, "position", frozen_vec2(self.position))


# =============================================================================
# Launcher Power
# =============================================================================


@beartype
@dataclass(frozen=True)
class LaunchPowerState:
    """Launcher wheel speed setpoint.

    Attributes:
        left_speed: Left wheel speed [rpm]
        right_speed: Right wheel speed [rpm]
    """
    left_speed: float = 0.0
    right_speed: float = 0.0

    @property
    def is_idle(self) -> bool:
        """True when both wheels are commanded to zero."""
        return self.left_speed == 0.0 and self.right_speed == 0.0


# =============================================================================
# Shot Solution
# =============================================================================


@beartype
@dataclass(frozen=True, eq=False)
class ShotSolution:
    """Motion-compensated firing solution.

    Attributes:
        virtual_goal: [x, y] point to aim at so the shot lands in the goal [m]
        launch_angle: Launcher angle [rad]
        power: Launcher wheel speeds
        distance: Distance from the platform to the virtual goal [m]
        flight_time: Predicted projectile flight time [s]
        iterations: Solver iterations used
        converged: Whether the solver met its convergence tolerance
    """
    virtual_goal: NDArray[np.float64]
    launch_angle: float
    power: LaunchPowerState
    distance: float
    flight_time: float
    iterations: int = 0
    converged: bool = True

    def __post_init__(self) -> None:
        """Freeze the aim point."""
        object.__setattr__(self, "virtual_goal", frozen_vec2(self.virtual_goal))
