"""Control algorithms for the aiming platform.

Provides the PID controller, discrete filters, and the aim controller that
turns the platform toward the virtual goal.
"""

from sotm.gnc.control.aim import (
    AimCommand,
    AimConfig,
    AimController,
    DriveCommand,
    heading_setpoint,
)
from sotm.gnc.control.filters import (
    MovingAverageFilter,
    SlewRateLimiter,
)
from sotm.gnc.control.pid import (
    PIDController,
    PIDGains,
)

__all__ = [
    "AimCommand",
    "AimConfig",
    "AimController",
    "DriveCommand",
    "MovingAverageFilter",
    "PIDController",
    "PIDGains",
    "SlewRateLimiter",
    "heading_setpoint",
]
