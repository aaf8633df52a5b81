"""Guidance for shoot-on-the-move.

Provides the virtual goal solver (where to aim) and the readiness gate
(when to fire).
"""

from sotm.gnc.guidance.readiness import (
    Readiness,
    ReadinessEvaluator,
    is_facing,
)
from sotm.gnc.guidance.virtual_goal import (
    VirtualGoalSolver,
)

__all__ = [
    "Readiness",
    "ReadinessEvaluator",
    "VirtualGoalSolver",
    "is_facing",
]
