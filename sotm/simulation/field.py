"""Simulated field collaborators for the firing cycle.

Provides stand-ins for the hardware the firing cycle talks to, in a
step-driven style: the caller owns the loop and advances each simulated
device with ``step(dt)`` after the control code has issued its commands.

- SimulatedPlatform: localization + drive (kinematic, field-relative)
- SimulatedLauncher: angle and wheel speeds slew toward their setpoints
- SimulatedFeed: counts fire/stop commands
- StaticTargetGeometry: returns a fixed goal
- MarkerBoard: records visualizer markers

Example:
    >>> platform = SimulatedPlatform(x=2.0, y=5.5, heading=0.0)
    >>> launcher = SimulatedLauncher(instant=True)
    >>> cycle = FiringCycle(platform, StaticTargetGeometry(goal), platform,
    ...                     launcher, SimulatedFeed())
    >>> cycle.start()
    >>> for _ in range(100):
    ...     cycle.tick()
    ...     platform.step(0.02)
    ...     launcher.step(0.02)
"""

import math
from dataclasses import dataclass, field

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from sotm.dynamics.state import FixedTarget, LaunchPowerState, ShotSolution
from sotm.geometry import Pose, as_vec2, wrap_angle
from sotm.gnc.control.aim import DriveCommand

# =============================================================================
# Platform
# =============================================================================


@beartype
@dataclass
class SimulatedPlatform:
    """Kinematic platform: velocities take effect immediately.

    Attributes:
        x: Field X [m]
        y: Field Y [m]
        heading: Heading [rad]
        scripted_velocity: If set, translation ignores drive commands and
            moves at this fixed field velocity [m/s]
        lock_heading: Ignore angular commands
    """
    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0
    scripted_velocity: NDArray[np.float64] | None = None
    lock_heading: bool = False

    _velocity: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(2), init=False, repr=False
    )
    _angular: float = field(default=0.0, init=False, repr=False)
    _suppressed: bool = field(default=False, init=False, repr=False)
    _commands: list[DriveCommand] = field(default_factory=list, init=False, repr=False)
    time: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        """Seed velocity from the script."""
        if self.scripted_velocity is not None:
            self.scripted_velocity = as_vec2(self.scripted_velocity).copy()
            self._velocity = self.scripted_velocity.copy()

    # Localization ------------------------------------------------------------

    def pose(self) -> Pose:
        return Pose(x=self.x, y=self.y, heading=self.heading)

    def field_velocity(self) -> NDArray[np.float64]:
        return self._velocity.copy()

    def suppress_secondary_correction(self, suppress: bool) -> None:
        self._suppressed = suppress

    @property
    def correction_suppressed(self) -> bool:
        return self._suppressed

    # Drive ---------------------------------------------------------------------

    def drive(self, command: DriveCommand) -> None:
        self._commands.append(command)
        if self.scripted_velocity is None:
            self._velocity = np.array([command.forward, command.strafe], dtype=np.float64)
        if not self.lock_heading:
            self._angular = command.angular

    @property
    def commands(self) -> list[DriveCommand]:
        """Every drive command received, oldest first."""
        return list(self._commands)

    @property
    def last_command(self) -> DriveCommand | None:
        return self._commands[-1] if self._commands else None

    def set_velocity(self, velocity: NDArray[np.float64]) -> None:
        """Change the scripted velocity."""
        self.scripted_velocity = as_vec2(velocity).copy()
        self._velocity = self.scripted_velocity.copy()

    # Propagation -------------------------------------------------------------

    def step(self, dt: float) -> Pose:
        """Advance the platform by ``dt`` seconds."""
        self.x = float(self.x + self._velocity[0] * dt)
        self.y = float(self.y + self._velocity[1] * dt)
        self.heading = wrap_angle(self.heading + self._angular * dt)
        self.time += dt
        return self.pose()


# =============================================================================
# Launcher
# =============================================================================


def _approach(current: float, target: float, max_delta: float) -> float:
    return current + float(np.clip(target - current, -max_delta, max_delta))


@beartype
@dataclass
class SimulatedLauncher:
    """Launcher whose angle and wheel speeds slew toward their setpoints.

    Attributes:
        angle_rate: Maximum angle slew [rad/s]
        wheel_acceleration: Maximum wheel speed change [rpm/s]
        power_tolerance: Wheel speed error that counts as at setpoint [rpm]
        instant: Setpoints take effect immediately
        initial_angle: Starting launcher angle [rad]
    """
    angle_rate: float = math.radians(180.0)
    wheel_acceleration: float = 20000.0
    power_tolerance: float = 50.0
    instant: bool = False
    initial_angle: float = 0.0

    _angle: float = field(default=0.0, init=False, repr=False)
    _target_angle: float = field(default=0.0, init=False, repr=False)
    _power: LaunchPowerState = field(default_factory=LaunchPowerState, init=False, repr=False)
    _target_power: LaunchPowerState = field(
        default_factory=LaunchPowerState, init=False, repr=False
    )
    stop_count: int = field(default=0, init=False)
    hold_count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        """Start at rest."""
        self._angle = self.initial_angle
        self._target_angle = self.initial_angle

    def set_angle(self, angle: float) -> None:
        self._target_angle = angle
        if self.instant:
            self._angle = angle

    def set_power(self, power: LaunchPowerState) -> None:
        self._target_power = power
        if self.instant:
            self._power = power

    def angle(self) -> float:
        return self._angle

    def at_setpoint(self) -> bool:
        if self._target_power.is_idle:
            return False
        return (
            abs(self._power.left_speed - self._target_power.left_speed) <= self.power_tolerance
            and abs(self._power.right_speed - self._target_power.right_speed)
            <= self.power_tolerance
        )

    def hold_position(self) -> None:
        self._target_angle = self._angle
        self.hold_count += 1

    def stop(self) -> None:
        self._target_power = LaunchPowerState()
        if self.instant:
            self._power = LaunchPowerState()
        self.stop_count += 1

    @property
    def target_angle(self) -> float:
        return self._target_angle

    @property
    def power(self) -> LaunchPowerState:
        return self._power

    @property
    def target_power(self) -> LaunchPowerState:
        return self._target_power

    @property
    def is_stopped(self) -> bool:
        return self._target_power.is_idle

    def step(self, dt: float) -> None:
        """Slew angle and wheels toward their setpoints."""
        self._angle = _approach(self._angle, self._target_angle, self.angle_rate * dt)
        max_rpm = self.wheel_acceleration * dt
        self._power = LaunchPowerState(
            left_speed=_approach(self._power.left_speed, self._target_power.left_speed, max_rpm),
            right_speed=_approach(
                self._power.right_speed, self._target_power.right_speed, max_rpm
            ),
        )


# =============================================================================
# Feed, Goals, Markers
# =============================================================================


@beartype
@dataclass
class SimulatedFeed:
    """Feed that counts commands."""
    fire_count: int = field(default=0, init=False)
    stop_count: int = field(default=0, init=False)
    running: bool = field(default=False, init=False)

    def fire(self) -> None:
        self.fire_count += 1
        self.running = True

    def stop(self) -> None:
        self.stop_count += 1
        self.running = False


@beartype
@dataclass
class StaticTargetGeometry:
    """Always returns the same goal."""
    goal: FixedTarget
    lookup_count: int = field(default=0, init=False)

    def target(self) -> FixedTarget:
        self.lookup_count += 1
        return self.goal


@beartype
@dataclass
class MarkerBoard:
    """Visualizer that remembers what it was asked to draw."""
    virtual_goal: NDArray[np.float64] | None = field(default=None, init=False)
    goal_history: list[NDArray[np.float64]] = field(default_factory=list, init=False)
    launches: list[tuple[Pose, ShotSolution]] = field(default_factory=list, init=False)

    def show_virtual_goal(self, point: NDArray[np.float64]) -> None:
        self.virtual_goal = np.array(point, dtype=np.float64)
        self.goal_history.append(self.virtual_goal.copy())

    def clear_virtual_goal(self) -> None:
        self.virtual_goal = None

    def show_launch(self, pose: Pose, solution: ShotSolution) -> None:
        self.launches.append((pose, solution))
