"""Ballistic calibration model and distance-scaled tolerances.

The launcher is characterized empirically: for a set of measured distances
we record the projectile flight time, the launcher angle that scores, and
the wheel speeds used. Between knots the tables interpolate linearly;
outside the calibrated range they clamp to the nearest endpoint (the model
never extrapolates).

Example:
    >>> from sotm.ballistics import BallisticModel, InterpolatingTable, PowerTable
    >>>
    >>> model = BallisticModel(
    ...     time_table=InterpolatingTable.from_points({1.5: 0.55, 4.0: 0.9}),
    ...     angle_table=InterpolatingTable.from_points({1.5: 57.0, 4.0: 40.0}),
    ...     power_table=PowerTable.from_points({1.5: (3000.0, 2400.0), 4.0: (4800.0, 3800.0)}),
    ... )
    >>> model.flight_time(4.0)
    0.9
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from sotm.dynamics.state import LaunchPowerState
from sotm.units import degrees

# =============================================================================
# Helpers
# =============================================================================


def _sorted_points(
    points: Mapping[float, object] | Sequence[tuple[float, object]],
) -> list[tuple[float, object]]:
    items = list(points.items()) if isinstance(points, Mapping) else list(points)
    return sorted(((float(d), v) for d, v in items), key=lambda p: p[0])


def _frozen(values: Sequence[float] | NDArray) -> NDArray[np.float64]:
    arr = np.array(values, dtype=np.float64)
    arr.flags.writeable = False
    return arr


def _validate_knots(distances: NDArray[np.float64], *columns: NDArray[np.float64]) -> None:
    if distances.ndim != 1 or distances.size == 0:
        raise ValueError("Table needs at least one knot")
    for column in columns:
        if column.shape != distances.shape:
            raise ValueError("distances and values must have same length")
        if not np.all(np.isfinite(column)):
            raise ValueError("Table values must be finite")
    if not np.all(np.isfinite(distances)):
        raise ValueError("Table distances must be finite")
    if np.any(np.diff(distances) <= 0):
        raise ValueError("Table distances must be strictly increasing")


# =============================================================================
# Interpolating Tables
# =============================================================================


@beartype
@dataclass(frozen=True, eq=False)
class InterpolatingTable:
    """Piecewise-linear scalar lookup keyed on distance.

    Attributes:
        distances: Knot distances [m], strictly increasing
        values: Value at each knot
    """
    distances: NDArray[np.float64]
    values: NDArray[np.float64]

    def __post_init__(self) -> None:
        """Validate knots and freeze storage."""
        object.__setattr__(self, "distances", _frozen(self.distances))
        object.__setattr__(self, "values", _frozen(self.values))
        _validate_knots(self.distances, self.values)

    @classmethod
    def from_points(
        cls,
        points: Mapping[float, float] | Sequence[tuple[float, float]],
    ) -> "InterpolatingTable":
        """Create a table from {distance: value} or [(distance, value), ...]."""
        ordered = _sorted_points(points)
        return cls(
            distances=_frozen([d for d, _ in ordered]),
            values=_frozen([float(v) for _, v in ordered]),
        )

    def get(self, distance: float) -> float:
        """Interpolated value at ``distance``, clamped to the table range."""
        return float(np.interp(distance, self.distances, self.values))

    def __call__(self, distance: float) -> float:
        return self.get(distance)

    def points(self) -> list[tuple[float, float]]:
        """Knots as (distance, value) pairs."""
        return [(float(d), float(v)) for d, v in zip(self.distances, self.values)]

    def is_monotonic_non_increasing(self) -> bool:
        return bool(np.all(np.diff(self.values) <= 0))


@beartype
@dataclass(frozen=True, eq=False)
class PowerTable:
    """Piecewise-linear LaunchPowerState lookup keyed on distance.

    Each wheel is interpolated independently.
    """
    distances: NDArray[np.float64]
    left_speeds: NDArray[np.float64]
    right_speeds: NDArray[np.float64]

    def __post_init__(self) -> None:
        """Validate knots and freeze storage."""
        object.__setattr__(self, "distances", _frozen(self.distances))
        object.__setattr__(self, "left_speeds", _frozen(self.left_speeds))
        object.__setattr__(self, "right_speeds", _frozen(self.right_speeds))
        _validate_knots(self.distances, self.left_speeds, self.right_speeds)

    @classmethod
    def from_points(
        cls,
        points: Mapping[float, tuple[float, float]] | Sequence[tuple[float, tuple[float, float]]],
    ) -> "PowerTable":
        """Create a table from {distance: (left_rpm, right_rpm)}."""
        ordered = _sorted_points(points)
        return cls(
            distances=_frozen([d for d, _ in ordered]),
            left_speeds=_frozen([float(v[0]) for _, v in ordered]),
            right_speeds=_frozen([float(v[1]) for _, v in ordered]),
        )

    def get(self, distance: float) -> LaunchPowerState:
        """Interpolated wheel speeds at ``distance``, clamped to the table range."""
        return LaunchPowerState(
            left_speed=float(np.interp(distance, self.distances, self.left_speeds)),
            right_speed=float(np.interp(distance, self.distances, self.right_speeds)),
        )

    def __call__(self, distance: float) -> LaunchPowerState:
        return self.get(distance)

    def points(self) -> list[tuple[float, tuple[float, float]]]:
        """Knots as (distance, (left, right)) pairs."""
        return [
            (float(d), (float(left), float(right)))
            for d, left, right in zip(self.distances, self.left_speeds, self.right_speeds)
        ]


# =============================================================================
# Ballistic Model
# =============================================================================


@beartype
@dataclass(frozen=True)
class BallisticModel:
    """Distance -> (flight time, launch angle, launch power) calibration.

    Stateless after construction; all lookups are pure.

    Attributes:
        time_table: Distance [m] -> projectile flight time [s]
        angle_table: Distance [m] -> launcher angle [deg]
        power_table: Distance [m] -> launcher wheel speeds [rpm]
    """
    time_table: InterpolatingTable
    angle_table: InterpolatingTable
    power_table: PowerTable

    def flight_time(self, distance: float) -> float:
        """Predicted flight time [s] at ``distance``."""
        return self.time_table.get(distance)

    def launch_angle(self, distance: float) -> float:
        """Launcher angle [rad] at ``distance``."""
        return degrees(self.angle_table.get(distance))

    def launch_angle_deg(self, distance: float) -> float:
        """Launcher angle [deg] at ``distance``."""
        return self.angle_table.get(distance)

    def launch_power(self, distance: float) -> LaunchPowerState:
        """Launcher wheel speeds at ``distance``."""
        return self.power_table.get(distance)


# =============================================================================
# Tolerance Maps
# =============================================================================


@beartype
@dataclass(frozen=True)
class ToleranceMaps:
    """Distance-scaled alignment tolerances.

    Both maps tighten (never loosen) as distance grows, since the same
    angular error puts the projectile further off target at long range.

    Attributes:
        heading_map: Distance [m] -> platform heading tolerance [deg]
        launch_angle_map: Distance [m] -> launcher angle tolerance [deg]
    """
    heading_map: InterpolatingTable
    launch_angle_map: InterpolatingTable

    def __post_init__(self) -> None:
        """Validate monotonicity."""
        if not self.heading_map.is_monotonic_non_increasing():
            raise ValueError("heading tolerance must not increase with distance")
        if not self.launch_angle_map.is_monotonic_non_increasing():
            raise ValueError("launch angle tolerance must not increase with distance")

    def heading_tolerance(self, distance: float) -> float:
        """Allowed heading error [deg] at ``distance``."""
        return self.heading_map.get(distance)

    def launch_angle_tolerance(self, distance: float) -> float:
        """Allowed launcher angle error [deg] at ``distance``."""
        return self.launch_angle_map.get(distance)
