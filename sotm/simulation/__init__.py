"""Simulation of the firing cycle's collaborators.

Provides the step-driven field simulation: the caller owns the loop, the
firing cycle issues commands, and the simulated devices respond.

Example:
    >>> from sotm.simulation import SimulatedPlatform, SimulatedLauncher, run_engagement
    >>>
    >>> platform = SimulatedPlatform(x=2.0, y=5.5)
    >>> launcher = SimulatedLauncher()
    >>> result = run_engagement(cycle, platform, launcher, ticks=200)
"""

from sotm.simulation.engagement import (
    EngagementResult,
    EngagementSample,
    run_engagement,
)
from sotm.simulation.field import (
    MarkerBoard,
    SimulatedFeed,
    SimulatedLauncher,
    SimulatedPlatform,
    StaticTargetGeometry,
)

__all__ = [
    "EngagementResult",
    "EngagementSample",
    "MarkerBoard",
    "SimulatedFeed",
    "SimulatedLauncher",
    "SimulatedPlatform",
    "StaticTargetGeometry",
    "run_engagement",
]
