"""Discrete filters for per-tick signal shaping.

- SlewRateLimiter: bounds how fast a command may change
- MovingAverageFilter: N-tap boxcar average

Both are stepped once per control tick and hold their own history.
"""

from collections import deque
from dataclasses import dataclass, field

import numpy as np
from beartype import beartype

# =============================================================================
# Slew Rate Limiter
# =============================================================================


@beartype
@dataclass
class SlewRateLimiter:
    """Limit the rate of change of a command.

    Attributes:
        rate_limit: Maximum change per second (units of the signal / s)
        initial_value: Output before the first update
    """
    rate_limit: float
    initial_value: float = 0.0

    _last: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate and seed output."""
        if self.rate_limit <= 0:
            raise ValueError(f"rate_limit must be positive, got {self.rate_limit}")
        self._last = self.initial_value

    def calculate(self, value: float, dt: float) -> float:
        """Step toward ``value`` by at most ``rate_limit * dt``."""
        if dt <= 0:
            return self._last
        max_delta = self.rate_limit * dt
        delta = float(np.clip(value - self._last, -max_delta, max_delta))
        self._last = self._last + delta
        return self._last

    def reset(self, value: float = 0.0) -> None:
        """Jump the output to ``value`` with no rate limiting."""
        self._last = value


# =============================================================================
# Moving Average
# =============================================================================


@beartype
@dataclass
class MovingAverageFilter:
    """Boxcar average over the last ``taps`` samples.

    History starts zero-filled, so the first outputs ramp up from zero
    rather than echoing the first sample.
    """
    taps: int = 2

    _history: deque = field(default_factory=deque, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate and allocate history."""
        if self.taps < 1:
            raise ValueError(f"taps must be >= 1, got {self.taps}")
        self.reset()

    def calculate(self, value: float) -> float:
        """Push a sample and return the current average."""
        self._history.append(value)
        return float(sum(self._history) / self.taps)

    def reset(self) -> None:
        """Clear history back to zeros."""
        self._history = deque([0.0] * self.taps, maxlen=self.taps)
