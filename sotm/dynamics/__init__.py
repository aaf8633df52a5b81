"""Value types describing the platform, the goal, and firing solutions."""

from sotm.dynamics.state import (
    FixedTarget,
    LaunchPowerState,
    PlatformState,
    ShotSolution,
)

__all__ = [
    "FixedTarget",
    "LaunchPowerState",
    "PlatformState",
    "ShotSolution",
]
