"""GNC (Guidance, Navigation, Control) module for shoot-on-the-move.

Provides the virtual goal solver and readiness gate (guidance), the
acceleration estimator (navigation), and heading control (control).

Example:
    >>> from sotm.gnc.control import AimController
    >>> from sotm.gnc.guidance import VirtualGoalSolver
    >>>
    >>> solver = VirtualGoalSolver(model)
    >>> aim = AimController()
"""

from sotm.gnc.control import (
    AimController,
    PIDController,
)
from sotm.gnc.estimation import (
    AccelerationEstimator,
)
from sotm.gnc.guidance import (
    ReadinessEvaluator,
    VirtualGoalSolver,
)

__all__ = [
    # Control
    "AimController",
    "PIDController",
    # Estimation
    "AccelerationEstimator",
    # Guidance
    "ReadinessEvaluator",
    "VirtualGoalSolver",
]
