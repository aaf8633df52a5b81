"""Readiness gate: is it safe to feed a projectile right now?

Three independent checks must all pass:

- Facing: the platform heading, extended as a line, crosses the goal
  opening. Degenerate headings (cos(heading) == 0, so the line never
  reaches the goal plane) are conservatively treated as not facing.
- Launch angle: launcher angle error is within the distance-scaled
  tolerance.
- Power: the launcher reports its wheels are at speed.

The heading tolerance map is evaluated and reported as well; it only gates
firing when ``require_heading_tolerance`` is set.
"""

import math
from dataclasses import dataclass

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from sotm.ballistics import ToleranceMaps
from sotm.dynamics.state import ShotSolution
from sotm.geometry import Pose, angle_difference
from sotm.units import to_degrees

# cos(pi/2) is ~6e-17 in floating point, never exactly zero
_PERPENDICULAR_EPS = 1e-12


@beartype
def is_facing(
    pose: Pose,
    window_center: NDArray[np.float64],
    opening_width: float,
) -> bool:
    """Whether the heading line passes through the goal opening.

    The opening is a window of ``opening_width`` along field Y, centered on
    ``window_center``. The heading line is y = m*x + b through the platform
    with m = tan(heading); it must cross x = window_center.x inside the window.

    Args:
        pose: Platform pose
        window_center: [x, y] center of the opening [m]
        opening_width: Opening width [m]

    Returns:
        True if the heading line crosses the opening
    """
    if abs(math.cos(pose.heading)) < _PERPENDICULAR_EPS:
        return False

    slope = math.tan(pose.heading)
    if not math.isfinite(slope):
        return False

    intercept = pose.y - slope * pose.x
    y_cross = slope * float(window_center[0]) + intercept

    upper = float(window_center[1]) + opening_width / 2
    lower = float(window_center[1]) - opening_width / 2

    return lower <= y_cross <= upper


@beartype
@dataclass(frozen=True)
class Readiness:
    """Outcome of one readiness evaluation.

    Attributes:
        facing: Heading line crosses the goal opening
        angle_aligned: Launcher angle within tolerance
        at_power: Launcher wheels at speed
        heading_within_tolerance: Heading error within the heading map value
        angle_error_deg: Commanded minus measured launcher angle [deg]
        heading_error_deg: Platform heading minus heading setpoint [deg]
        require_heading: Whether heading tolerance gates ``ready``
    """
    facing: bool
    angle_aligned: bool
    at_power: bool
    heading_within_tolerance: bool
    angle_error_deg: float
    heading_error_deg: float
    require_heading: bool = False

    @property
    def ready(self) -> bool:
        """All firing conditions hold."""
        ok = self.facing and self.angle_aligned and self.at_power
        if self.require_heading:
            ok = ok and self.heading_within_tolerance
        return ok


@beartype
@dataclass(frozen=True)
class ReadinessEvaluator:
    """Evaluate the readiness gate against a shot solution.

    Attributes:
        tolerances: Distance-scaled tolerance maps
        require_heading_tolerance: Also gate on heading error
    """
    tolerances: ToleranceMaps
    require_heading_tolerance: bool = False

    def evaluate(
        self,
        pose: Pose,
        heading_setpoint: float,
        solution: ShotSolution,
        launcher_angle: float,
        launcher_at_setpoint: bool,
        window_center: NDArray[np.float64],
        opening_width: float,
    ) -> Readiness:
        """Run all checks.

        Args:
            pose: Platform pose
            heading_setpoint: Heading the aim controller is driving to [rad]
            solution: Current firing solution
            launcher_angle: Measured launcher angle [rad]
            launcher_at_setpoint: Launcher power check
            window_center: Center of the opening used for the facing test
            opening_width: Width of the opening [m]
        """
        angle_error = to_degrees(angle_difference(solution.launch_angle, launcher_angle))
        heading_error = to_degrees(angle_difference(pose.heading, heading_setpoint))

        return Readiness(
            facing=is_facing(pose, window_center, opening_width),
            angle_aligned=abs(angle_error)
            <= self.tolerances.launch_angle_tolerance(solution.distance),
            at_power=bool(launcher_at_setpoint),
            heading_within_tolerance=abs(heading_error)
            <= self.tolerances.heading_tolerance(solution.distance),
            angle_error_deg=angle_error,
            heading_error_deg=heading_error,
            require_heading=self.require_heading_tolerance,
        )
