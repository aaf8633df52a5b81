"""Field-relative acceleration from successive velocity samples.

The localization layer reports velocity only. Acceleration is the finite
difference of two consecutive samples, smoothed per axis by a 2-tap moving
average to knock down single-tick odometry noise.

Example:
    >>> from sotm.gnc.estimation import AccelerationEstimator
    >>>
    >>> estimator = AccelerationEstimator(period=0.02)
    >>> estimator.reset(velocity)
    >>> accel = estimator.update(next_velocity)  # [ax, ay] m/s^2
"""

from dataclasses import dataclass, field

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from sotm.geometry import as_vec2
from sotm.gnc.control.filters import MovingAverageFilter


@beartype
@dataclass
class AccelerationEstimator:
    """Finite-difference acceleration with per-axis moving-average smoothing.

    Attributes:
        period: Nominal tick period [s] used as the difference interval
        taps: Moving-average window per axis
    """
    period: float = 0.020
    taps: int = 2

    _previous_velocity: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(2), init=False, repr=False
    )
    _filter_x: MovingAverageFilter = field(init=False, repr=False)
    _filter_y: MovingAverageFilter = field(init=False, repr=False)
    _last: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(2), init=False, repr=False
    )

    def __post_init__(self) -> None:
        """Validate and build per-axis filters."""
        if self.period <= 0:
            raise ValueError(f"period must be positive, got {self.period}")
        self._filter_x = MovingAverageFilter(taps=self.taps)
        self._filter_y = MovingAverageFilter(taps=self.taps)

    def reset(self, velocity: NDArray[np.float64] | None = None) -> None:
        """Zero filter history and seed the previous velocity sample."""
        self._filter_x.reset()
        self._filter_y.reset()
        self._previous_velocity = (
            np.zeros(2) if velocity is None else as_vec2(velocity).copy()
        )
        self._last = np.zeros(2)

    def update(self, velocity: NDArray[np.float64]) -> NDArray[np.float64]:
        """Consume one velocity sample and return filtered acceleration [m/s^2]."""
        velocity = as_vec2(velocity)
        raw = (velocity - self._previous_velocity) / self.period
        self._previous_velocity = velocity.copy()
        self._last = np.array(
            [
                self._filter_x.calculate(float(raw[0])),
                self._filter_y.calculate(float(raw[1])),
            ],
            dtype=np.float64,
        )
        return self._last.copy()

    @property
    def acceleration(self) -> NDArray[np.float64]:
        """Most recent filtered acceleration [m/s^2]."""
        return self._last.copy()

    @property
    def previous_velocity(self) -> NDArray[np.float64]:
        """Velocity sample the next update will difference against [m/s]."""
        return self._previous_velocity.copy()
