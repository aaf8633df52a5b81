"""sotm - Shoot-on-the-move targeting for mobile launcher platforms.

This package provides the library pieces for firing accurately from a
moving platform: ballistic calibration tables, the virtual goal solver,
heading control, the readiness gate, and a step-driven simulation of the
platform hardware. The per-tick state machine lives in ``onboard``.

Example:
    >>> from sotm import VirtualGoalSolver, default_calibration
    >>> from sotm.dynamics import FixedTarget, PlatformState
    >>> from sotm.geometry import vec2
    >>>
    >>> solver = VirtualGoalSolver(default_calibration().ballistics)
    >>> platform = PlatformState(position=vec2(0.0, 0.0), heading=0.0,
    ...                          velocity=vec2(1.0, 0.0))
    >>> solution = solver.solve(platform, FixedTarget(vec2(4.0, 0.0), 1.05))
    >>> print(f"Aim at {solution.virtual_goal}, {solution.flight_time:.2f} s")
"""

__version__ = "0.1.0"

from sotm.ballistics import (
    BallisticModel,
    InterpolatingTable,
    PowerTable,
    ToleranceMaps,
)
from sotm.calibration import (
    CalibrationData,
    default_calibration,
    load_calibration,
    save_calibration,
)
from sotm.dynamics import (
    FixedTarget,
    LaunchPowerState,
    PlatformState,
    ShotSolution,
)
from sotm.geometry import Pose
from sotm.gnc.control import (
    AimConfig,
    AimController,
    DriveCommand,
    PIDController,
)
from sotm.gnc.estimation import AccelerationEstimator
from sotm.gnc.guidance import (
    Readiness,
    ReadinessEvaluator,
    VirtualGoalSolver,
    is_facing,
)
from sotm.telemetry import (
    LoggingTelemetry,
    NullTelemetry,
    RecordingTelemetry,
    TelemetrySink,
)

__all__ = [
    # Version
    "__version__",
    # Ballistics
    "BallisticModel",
    "InterpolatingTable",
    "PowerTable",
    "ToleranceMaps",
    # Calibration
    "CalibrationData",
    "default_calibration",
    "load_calibration",
    "save_calibration",
    # Data model
    "FixedTarget",
    "LaunchPowerState",
    "PlatformState",
    "Pose",
    "ShotSolution",
    # GNC
    "AccelerationEstimator",
    "AimConfig",
    "AimController",
    "DriveCommand",
    "PIDController",
    "Readiness",
    "ReadinessEvaluator",
    "VirtualGoalSolver",
    "is_facing",
    # Telemetry
    "LoggingTelemetry",
    "NullTelemetry",
    "RecordingTelemetry",
    "TelemetrySink",
]
