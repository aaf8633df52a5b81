"""Shoot-on-the-move firing cycle.

Runs once per control tick (50 Hz) while the driver holds the shoot
button. Each tick it:

1. Reads pose and velocity, updates the acceleration estimate
2. Re-solves the virtual goal if a recompute is pending (restarting the
   cycle clock)
3. Commands launcher angle/power from the current solution and drives
   the heading toward the virtual goal
4. Evaluates readiness and the cycle boundary: predicted flight time has
   elapsed, or the platform has nearly stopped
5. At the boundary, fires once if ready, and always schedules a recompute

The caller owns the loop: ``start()`` once, ``tick()`` every period,
``stop()`` when the button is released or the mode ends. The cycle never
finishes on its own.

This is onboard software - designed to run on the platform.

Example:
    >>> from onboard import FiringCycle
    >>>
    >>> cycle = FiringCycle(localization, goals, drive, launcher, feed,
    ...                     forward_input=stick.forward, strafe_input=stick.strafe)
    >>> cycle.start()
    >>> while button.held():
    ...     cycle.tick()
    ...     wait_for_next_period()
    >>> cycle.stop()
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

import numpy as np
from numpy.typing import NDArray

from onboard.interfaces import (
    DriveActuator,
    FeedActuator,
    LauncherActuator,
    Localization,
    TargetGeometry,
    Visualizer,
)
from sotm.calibration import CalibrationData, default_calibration
from sotm.dynamics.state import FixedTarget, PlatformState, ShotSolution
from sotm.geometry import as_vec2
from sotm.gnc.control.aim import AimCommand, AimConfig, AimController
from sotm.gnc.estimation import AccelerationEstimator
from sotm.gnc.guidance import Readiness, ReadinessEvaluator, VirtualGoalSolver
from sotm.telemetry import NullTelemetry, TelemetrySink
from sotm.units import inches, to_degrees

logger = logging.getLogger(__name__)

# Telemetry keys
ACCEL_X_KEY = "Auto Shoot/Acceleration X"
ACCEL_Y_KEY = "Auto Shoot/Acceleration Y"
ITERATIONS_KEY = "Auto Shoot/Iterations"
DESIRED_ANGLE_KEY = "Auto Shoot/Desired Angle"
DRIVE_ERROR_KEY = "Auto Shoot/Drive Angle Error"
FACING_KEY = "Auto Shoot/Facing Speaker"


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class FiringCycleConfig:
    """Firing cycle configuration.

    Attributes:
        period: Control loop period [s]
        feed_latency: Fire command to projectile release delay [s]
        max_iterations: Virtual goal solver iteration cap
        angle_epsilon_deg: Solver convergence threshold [deg]
        min_moving_speed: Below this speed the cycle boundary fires at once [m/s]
        max_speed: Platform top speed when no max-speed input is supplied [m/s]
        aim: Aim controller configuration
        require_heading_tolerance: Also gate firing on the heading tolerance map
        facing_reference: Center of the facing window, the real goal
            ("fixed_target") or the aim point ("virtual_goal")
    """
    period: float = 0.020
    feed_latency: float = 0.100
    max_iterations: int = 5
    angle_epsilon_deg: float = 0.0005
    min_moving_speed: float = inches(3.0)
    max_speed: float = 4.5
    aim: AimConfig = field(default_factory=AimConfig)
    require_heading_tolerance: bool = False
    facing_reference: Literal["fixed_target", "virtual_goal"] = "fixed_target"

    def __post_init__(self) -> None:
        """Validate."""
        if self.period <= 0:
            raise ValueError(f"period must be positive, got {self.period}")
        if self.min_moving_speed < 0:
            raise ValueError("min_moving_speed must be non-negative")
        if self.max_speed <= 0:
            raise ValueError("max_speed must be positive")
        if self.facing_reference not in ("fixed_target", "virtual_goal"):
            raise ValueError(f"Unknown facing_reference: {self.facing_reference!r}")


# =============================================================================
# Cycle State
# =============================================================================


@dataclass
class CycleState:
    """Everything the firing cycle carries from one tick to the next.

    Owned by exactly one FiringCycle and replaced wholesale on start/stop.

    Attributes:
        estimator: Previous velocity sample and acceleration filter history
        aim: Heading PID memory and translation slew limiters
        recompute_pending: Solve a new virtual goal on the next tick
        elapsed: Time since the last solve [s]
        fired: One-shot latch, set when the feed has been commanded
        solution: Current firing solution (None until the first tick)
        ticks: Ticks since start
    """
    estimator: AccelerationEstimator
    aim: AimController
    recompute_pending: bool = True
    elapsed: float = 0.0
    fired: bool = False
    solution: ShotSolution | None = None
    ticks: int = 0

    @classmethod
    def fresh(
        cls,
        config: FiringCycleConfig,
        velocity: NDArray[np.float64] | None = None,
    ) -> "CycleState":
        """Zeroed state with a recompute pending."""
        estimator = AccelerationEstimator(period=config.period)
        estimator.reset(velocity)
        return cls(estimator=estimator, aim=AimController(config.aim))


@dataclass(frozen=True)
class TickResult:
    """What happened during one tick (for logging, tests and plots)."""
    platform: PlatformState
    solution: ShotSolution
    aim: AimCommand
    readiness: Readiness
    recomputed: bool
    boundary: bool
    fired: bool


def _zero() -> float:
    return 0.0


# =============================================================================
# Firing Cycle
# =============================================================================


class FiringCycle:
    """Solve -> track -> fire -> re-solve, one tick at a time."""

    def __init__(
        self,
        localization: Localization,
        target_geometry: TargetGeometry,
        drive: DriveActuator,
        launcher: LauncherActuator,
        feed: FeedActuator,
        forward_input: Callable[[], float] = _zero,
        strafe_input: Callable[[], float] = _zero,
        max_speed_input: Callable[[], float] | None = None,
        config: FiringCycleConfig | None = None,
        calibration: CalibrationData | None = None,
        telemetry: TelemetrySink | None = None,
        visualizer: Visualizer | None = None,
    ) -> None:
        self.localization = localization
        self.target_geometry = target_geometry
        self.drive = drive
        self.launcher = launcher
        self.feed = feed

        self.config = config or FiringCycleConfig()
        self.forward_input = forward_input
        self.strafe_input = strafe_input
        self.max_speed_input = max_speed_input or (lambda: self.config.max_speed)

        calibration = calibration or default_calibration()
        self.solver = VirtualGoalSolver(
            calibration.ballistics,
            feed_latency=self.config.feed_latency,
            max_iterations=self.config.max_iterations,
            angle_epsilon_deg=self.config.angle_epsilon_deg,
        )
        self.readiness = ReadinessEvaluator(
            calibration.tolerances,
            require_heading_tolerance=self.config.require_heading_tolerance,
        )

        self.telemetry = telemetry or NullTelemetry()
        self.visualizer = visualizer

        self._state: CycleState | None = None
        self._target: FixedTarget | None = None

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def requirements(self) -> tuple[object, ...]:
        """Actuators this cycle must own exclusively while active."""
        return (self.drive, self.launcher, self.feed)

    @property
    def active(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> CycleState | None:
        return self._state

    @property
    def target(self) -> FixedTarget | None:
        return self._target

    def is_finished(self) -> bool:
        """Never: the caller decides when to stop."""
        return False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Capture the goal, zero all rolling state, and force a solve."""
        self._target = self.target_geometry.target()
        velocity = as_vec2(self.localization.field_velocity())
        self._state = CycleState.fresh(self.config, velocity)

        self.launcher.hold_position()
        self.localization.suppress_secondary_correction(True)

        logger.info(
            "firing cycle started, goal at (%.3f, %.3f)",
            float(self._target.position[0]),
            float(self._target.position[1]),
        )

    def stop(self, interrupted: bool = False) -> None:
        """Stop all actuation and release localization. Safe to call repeatedly.

        Every teardown step runs even if an earlier one raises. The cycle is
        always left inactive, and the actuator error propagates afterwards.
        """
        was_active = self._state is not None
        try:
            self.feed.stop()
        finally:
            try:
                self.launcher.stop()
            finally:
                state, self._state = self._state, None
                try:
                    if state is not None:
                        state.aim.reset()
                    if self.visualizer is not None:
                        self._cosmetic(self.visualizer.clear_virtual_goal)
                finally:
                    self.localization.suppress_secondary_correction(False)
                    if was_active:
                        logger.info("firing cycle stopped (interrupted=%s)", interrupted)

    def tick(self) -> TickResult:
        """Run one control period.

        Raises:
            RuntimeError: If called before ``start()``
        """
        state = self._state
        target = self._target
        if state is None or target is None:
            raise RuntimeError("FiringCycle.tick() called before start()")
        cfg = self.config

        # 1. Platform state
        pose = self.localization.pose()
        velocity = as_vec2(self.localization.field_velocity())
        acceleration = state.estimator.update(velocity)
        platform = PlatformState.from_pose(pose, velocity, acceleration)

        self._publish(ACCEL_X_KEY, float(acceleration[0]))
        self._publish(ACCEL_Y_KEY, float(acceleration[1]))

        # 2. Solve
        recomputed = False
        if state.recompute_pending or state.solution is None:
            state.solution = self.solver.solve(platform, target)
            state.elapsed = 0.0
            state.recompute_pending = False
            recomputed = True

            logger.debug(
                "solved virtual goal (%.3f, %.3f) in %d iterations, t=%.3f s",
                float(state.solution.virtual_goal[0]),
                float(state.solution.virtual_goal[1]),
                state.solution.iterations,
                state.solution.flight_time,
            )
            self._publish(ITERATIONS_KEY, state.solution.iterations)
            if self.visualizer is not None:
                self._cosmetic(self.visualizer.show_virtual_goal, state.solution.virtual_goal)
        else:
            state.elapsed += cfg.period
        solution = state.solution

        # 3. Actuate
        self.launcher.set_angle(solution.launch_angle)
        self._publish(DESIRED_ANGLE_KEY, to_degrees(solution.launch_angle))
        self.launcher.set_power(solution.power)

        aim = state.aim.command(
            pose,
            solution.virtual_goal,
            forward_input=float(self.forward_input()),
            strafe_input=float(self.strafe_input()),
            max_speed=float(self.max_speed_input()),
            dt=cfg.period,
        )
        self.drive.drive(aim.drive)

        # 4. Readiness and boundary
        window = (
            solution.virtual_goal
            if cfg.facing_reference == "virtual_goal"
            else target.position
        )
        readiness = self.readiness.evaluate(
            pose,
            aim.setpoint,
            solution,
            launcher_angle=float(self.launcher.angle()),
            launcher_at_setpoint=bool(self.launcher.at_setpoint()),
            window_center=window,
            opening_width=target.opening_width,
        )
        self._publish(DRIVE_ERROR_KEY, readiness.heading_error_deg)
        self._publish(FACING_KEY, readiness.facing)

        boundary = (
            state.elapsed >= solution.flight_time
            or platform.speed < cfg.min_moving_speed
        )

        # 5. Fire and restart
        fired = False
        if boundary:
            if readiness.ready and not state.fired:
                self.feed.fire()
                state.fired = True
                fired = True
                logger.info(
                    "fired at distance %.3f m, angle %.2f deg",
                    solution.distance,
                    to_degrees(solution.launch_angle),
                )
                if self.visualizer is not None:
                    self._cosmetic(self.visualizer.show_launch, pose, solution)
            state.recompute_pending = True
            state.elapsed = 0.0

        state.ticks += 1

        return TickResult(
            platform=platform,
            solution=solution,
            aim=aim,
            readiness=readiness,
            recomputed=recomputed,
            boundary=boundary,
            fired=fired,
        )

    # -------------------------------------------------------------------------
    # Best-effort outputs
    # -------------------------------------------------------------------------

    def _publish(self, key: str, value: bool | int | float) -> None:
        try:
            self.telemetry.publish(key, value)
        except Exception:
            logger.warning("telemetry publish failed for %r", key, exc_info=True)

    def _cosmetic(self, fn: Callable[..., None], *args: object) -> None:
        try:
            fn(*args)
        except Exception:
            logger.warning("visualizer update failed", exc_info=True)
