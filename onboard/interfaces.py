"""Collaborator interfaces the firing cycle talks to.

This is onboard software: localization, actuators and the goal lookup all
live elsewhere on the platform. The firing cycle only sees these
protocols, so the same code runs against real hardware or against the
simulated collaborators in ``sotm.simulation``.
"""

from typing import Protocol

import numpy as np
from numpy.typing import NDArray

from sotm.dynamics.state import FixedTarget, LaunchPowerState, ShotSolution
from sotm.geometry import Pose
from sotm.gnc.control.aim import DriveCommand


class Localization(Protocol):
    """Pose and velocity estimate of the platform."""

    def pose(self) -> Pose:
        """Current field pose."""
        ...

    def field_velocity(self) -> NDArray[np.float64]:
        """Current field-relative [vx, vy] velocity [m/s]."""
        ...

    def suppress_secondary_correction(self, suppress: bool) -> None:
        """Stop (or resume) fusing the secondary vision correction."""
        ...


class TargetGeometry(Protocol):
    """Goal lookup for the current alliance/context."""

    def target(self) -> FixedTarget:
        ...


class DriveActuator(Protocol):
    def drive(self, command: DriveCommand) -> None:
        ...


class LauncherActuator(Protocol):
    """Angle-adjustable launcher with speed-controlled wheels."""

    def set_angle(self, angle: float) -> None:
        """Command launcher angle [rad]."""
        ...

    def set_power(self, power: LaunchPowerState) -> None:
        ...

    def angle(self) -> float:
        """Measured launcher angle [rad]."""
        ...

    def at_setpoint(self) -> bool:
        """Whether the wheels are at the commanded speed."""
        ...

    def hold_position(self) -> None:
        """Re-seed the angle profile from the current measured angle."""
        ...

    def stop(self) -> None:
        ...


class FeedActuator(Protocol):
    def fire(self) -> None:
        """Push one projectile into the launcher."""
        ...

    def stop(self) -> None:
        ...


class Visualizer(Protocol):
    """Cosmetic field display (simulation / dashboard only)."""

    def show_virtual_goal(self, point: NDArray[np.float64]) -> None:
        ...

    def clear_virtual_goal(self) -> None:
        ...

    def show_launch(self, pose: Pose, solution: ShotSolution) -> None:
        ...
