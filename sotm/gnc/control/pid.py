"""PID controller implementation.

Provides a general-purpose PID controller with:
- Anti-windup for integral term
- Derivative filtering
- Output saturation
- Continuous (wrapping) input for angular setpoints

Example:
    >>> from sotm.gnc.control import PIDController
    >>>
    >>> # Heading controller that wraps at +/-pi
    >>> ctrl = PIDController(kp=0.8, kd=0.01, continuous_input=(-math.pi, math.pi))
    >>>
    >>> # Compute control output
    >>> command = ctrl.calculate(heading, target_heading, dt=0.02)
"""

import math
from dataclasses import dataclass, field

import numpy as np
from beartype import beartype

# =============================================================================
# PID Gains
# =============================================================================


@beartype
@dataclass
class PIDGains:
    """PID controller gains.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0


# =============================================================================
# PID Controller
# =============================================================================


@beartype
@dataclass
class PIDController:
    """General-purpose PID controller.

    Implements the parallel PID form:
        u = kp * e + ki * integral(e) + kd * de/dt

    Features:
    - Anti-windup with integral clamping
    - First-order derivative filter
    - Output saturation
    - Continuous input: with ``continuous_input=(lo, hi)`` the error is
      wrapped into that range, so the controller always takes the short
      way around (e.g. 179 deg -> -179 deg is a 2 deg move)

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
        output_limits: (min, max) output limits
        integral_limits: (min, max) integral term limits (anti-windup)
        derivative_filter: Low-pass coefficient for derivative (1 = unfiltered)
        continuous_input: (min, max) input range that wraps around
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0
    output_limits: tuple[float, float] | None = None
    integral_limits: tuple[float, float] | None = None
    derivative_filter: float = 1.0
    continuous_input: tuple[float, float] | None = None

    # Internal state
    _integral: float = field(default=0.0, init=False, repr=False)
    _prev_error: float | None = field(default=None, init=False, repr=False)
    _prev_derivative: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 0.0 < self.derivative_filter <= 1.0:
            raise ValueError("derivative_filter must be in (0, 1]")
        if self.continuous_input is not None:
            lo, hi = self.continuous_input
            if hi <= lo:
                raise ValueError("continuous_input must be (min, max) with max > min")

    @classmethod
    def from_gains(
        cls,
        gains: PIDGains,
        output_limits: tuple[float, float] | None = None,
        continuous_input: tuple[float, float] | None = None,
    ) -> "PIDController":
        """Create controller from PIDGains object."""
        return cls(
            kp=gains.kp,
            ki=gains.ki,
            kd=gains.kd,
            output_limits=output_limits,
            continuous_input=continuous_input,
        )

    def reset(self) -> None:
        """Reset controller state (integral and derivative history)."""
        self._integral = 0.0
        self._prev_error = None
        self._prev_derivative = 0.0

    def wrap_error(self, error: float) -> float:
        """Wrap an error into the continuous input range (centered on zero)."""
        if self.continuous_input is None:
            return error
        lo, hi = self.continuous_input
        half = (hi - lo) / 2.0
        span = hi - lo
        wrapped = math.fmod(error + half, span)
        if wrapped < 0.0:
            wrapped += span
        return wrapped - half

    def update(self, error: float, dt: float) -> float:
        """Compute PID control output.

        Args:
            error: Current error (setpoint - measurement)
            dt: Time step [s]

        Returns:
            Control output
        """
        if dt <= 0:
            return 0.0

        error = self.wrap_error(error)

        # Proportional term
        p_term = self.kp * error

        # Integral term with anti-windup
        self._integral += error * dt
        if self.integral_limits:
            self._integral = float(np.clip(
                self._integral,
                self.integral_limits[0],
                self.integral_limits[1]
            ))
        i_term = self.ki * self._integral

        # Derivative term with filtering
        if self._prev_error is not None:
            raw_derivative = self.wrap_error(error - self._prev_error) / dt
            alpha = self.derivative_filter
            self._prev_derivative = (
                alpha * raw_derivative +
                (1 - alpha) * self._prev_derivative
            )
        d_term = self.kd * self._prev_derivative

        self._prev_error = error

        # Total output
        output = p_term + i_term + d_term

        # Output saturation
        if self.output_limits:
            output = np.clip(output, self.output_limits[0], self.output_limits[1])

        return float(output)

    def calculate(self, measurement: float, setpoint: float, dt: float) -> float:
        """Compute output from a measurement and setpoint.

        Args:
            measurement: Current process value
            setpoint: Desired process value
            dt: Time step [s]

        Returns:
            Control output
        """
        return self.update(setpoint - measurement, dt)

