"""Aim controller: heading toward the virtual goal while the driver translates.

The driver keeps full control of translation; this controller owns only
the angular axis. Each tick it produces one field-relative DriveCommand:

- forward / strafe: driver input, scaled, slew-rate limited, deadbanded
- angular: PID on heading with continuous input, clamped to [-1, 1] and
  scaled to the maximum turn rate

The heading setpoint is the bearing from the goal to the platform plus a
mounting offset. The default offset of pi turns that into the bearing from
the platform to the goal, so the platform forward axis faces the goal.

Example:
    >>> from sotm.gnc.control import AimController
    >>>
    >>> aim = AimController()
    >>> command = aim.command(pose, solution.virtual_goal, forward_input=0.3,
    ...                       strafe_input=0.0, max_speed=4.5, dt=0.02)
    >>> drive.drive(command.drive)
"""

import math
from dataclasses import dataclass, field

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from sotm.geometry import Pose, angle_difference, angle_of, wrap_angle
from sotm.gnc.control.filters import SlewRateLimiter
from sotm.gnc.control.pid import PIDController, PIDGains
from sotm.units import inches

# =============================================================================
# Commands
# =============================================================================


@beartype
@dataclass(frozen=True)
class DriveCommand:
    """One tick of drive output.

    Attributes:
        forward: Field +X velocity [m/s]
        strafe: Field +Y velocity [m/s]
        angular: Angular velocity [rad/s], counter-clockwise positive
        field_relative: Translation is in field frame
        open_loop: Drive wheels run open-loop
        turn_open_loop: Steering runs open-loop
    """
    forward: float = 0.0
    strafe: float = 0.0
    angular: float = 0.0
    field_relative: bool = True
    open_loop: bool = True
    turn_open_loop: bool = False


@beartype
@dataclass(frozen=True)
class AimCommand:
    """Drive output plus the heading bookkeeping behind it.

    Attributes:
        drive: Command to send to the drive actuator
        setpoint: Commanded heading [rad]
        heading_error: Current heading minus setpoint [rad], wrapped
    """
    drive: DriveCommand
    setpoint: float
    heading_error: float


# =============================================================================
# Configuration
# =============================================================================


@beartype
@dataclass
class AimConfig:
    """Aim controller configuration.

    Attributes:
        gains: Heading PID gains (output is a fraction of max turn rate)
        max_angular_velocity: Turn rate at full controller output [rad/s]
        mount_offset: Added to the goal-to-platform bearing; pi faces
            platform forward at the goal [rad]
        max_translational_acceleration: Driver translation slew limit [m/s^2]
        translation_scale: Fraction of max speed available to the driver
        translation_deadband: Commands below this are zeroed [m/s]
    """
    gains: PIDGains = field(default_factory=lambda: PIDGains(kp=0.8, ki=0.0, kd=0.01))
    max_angular_velocity: float = 3.0 * math.pi / 2.0
    mount_offset: float = math.pi
    max_translational_acceleration: float = 8.0
    translation_scale: float = 0.5
    translation_deadband: float = inches(0.5)

    def __post_init__(self) -> None:
        """Validate."""
        if self.max_angular_velocity <= 0:
            raise ValueError("max_angular_velocity must be positive")
        if self.max_translational_acceleration <= 0:
            raise ValueError("max_translational_acceleration must be positive")
        if self.translation_deadband < 0:
            raise ValueError("translation_deadband must be non-negative")


# =============================================================================
# Aim Controller
# =============================================================================


@beartype
def heading_setpoint(
    position: NDArray[np.float64],
    virtual_goal: NDArray[np.float64],
    mount_offset: float = math.pi,
) -> float:
    """Bearing from ``virtual_goal`` to ``position`` plus ``mount_offset`` [rad].

    With the default offset the platform forward axis points at the goal.
    """
    return wrap_angle(angle_of(position - virtual_goal) + mount_offset)


@beartype
@dataclass
class AimController:
    """Heading controller plus driver translation shaping."""
    config: AimConfig = field(default_factory=AimConfig)

    _pid: PIDController = field(init=False, repr=False)
    _forward_limiter: SlewRateLimiter = field(init=False, repr=False)
    _strafe_limiter: SlewRateLimiter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Build PID and limiters."""
        self._pid = PIDController.from_gains(
            self.config.gains,
            continuous_input=(-math.pi, math.pi),
        )
        self._forward_limiter = SlewRateLimiter(self.config.max_translational_acceleration)
        self._strafe_limiter = SlewRateLimiter(self.config.max_translational_acceleration)

    def reset(self) -> None:
        """Clear PID memory and zero both translation limiters."""
        self._pid.reset()
        self._forward_limiter.reset(0.0)
        self._strafe_limiter.reset(0.0)

    def _shape(self, limiter: SlewRateLimiter, value: float, dt: float) -> float:
        limited = limiter.calculate(value, dt)
        if abs(limited) < self.config.translation_deadband:
            # Zero the limiter too, otherwise it keeps creeping out of the deadband
            limiter.reset(0.0)
            return 0.0
        return limited

    def translation(
        self,
        forward_input: float,
        strafe_input: float,
        max_speed: float,
        dt: float,
    ) -> tuple[float, float]:
        """Shape driver joystick input into field velocities [m/s].

        Args:
            forward_input: Joystick forward axis, [-1, 1] (stick-up negative)
            strafe_input: Joystick strafe axis, [-1, 1]
            max_speed: Platform top speed [m/s]
            dt: Time step [s]
        """
        scale = max_speed * self.config.translation_scale
        forward = self._shape(self._forward_limiter, -forward_input * scale, dt)
        strafe = self._shape(self._strafe_limiter, strafe_input * scale, dt)
        return forward, strafe

    def angular(self, pose: Pose, setpoint: float, dt: float) -> float:
        """Angular velocity toward ``setpoint`` [rad/s]."""
        output = self._pid.calculate(pose.heading, setpoint, dt)
        output = float(np.clip(output, -1.0, 1.0))
        return output * self.config.max_angular_velocity

    def command(
        self,
        pose: Pose,
        virtual_goal: NDArray[np.float64],
        forward_input: float,
        strafe_input: float,
        max_speed: float,
        dt: float,
    ) -> AimCommand:
        """Compute the full drive command for this tick."""
        setpoint = heading_setpoint(pose.translation, virtual_goal, self.config.mount_offset)
        forward, strafe = self.translation(forward_input, strafe_input, max_speed, dt)
        angular = self.angular(pose, setpoint, dt)

        return AimCommand(
            drive=DriveCommand(forward=forward, strafe=strafe, angular=angular),
            setpoint=setpoint,
            heading_error=angle_difference(pose.heading, setpoint),
        )
