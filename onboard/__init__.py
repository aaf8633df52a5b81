"""Onboard software for shoot-on-the-move.

This package contains code that runs on the platform:
- interfaces: collaborator protocols (localization, actuators, goals)
- firing_cycle: the per-tick solve/track/fire state machine

The ``sotm`` package provides the library pieces (ballistics, solver,
controllers) and simulated collaborators.
"""

from onboard.firing_cycle import (
    CycleState,
    FiringCycle,
    FiringCycleConfig,
    TickResult,
)

__all__ = [
    "CycleState",
    "FiringCycle",
    "FiringCycleConfig",
    "TickResult",
]
