"""Closed-loop engagement runs against simulated collaborators.

Steps a firing cycle together with a SimulatedPlatform and
SimulatedLauncher and records one sample per tick.

Example:
    >>> result = run_engagement(cycle, platform, launcher, ticks=250)
    >>> print(f"Shots fired: {result.shots}")
    >>> df = result.to_dataframe()
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
import polars as pl
from beartype import beartype
from numpy.typing import NDArray

from sotm.simulation.field import SimulatedLauncher, SimulatedPlatform
from sotm.telemetry import RecordingTelemetry
from sotm.units import to_degrees


@beartype
@dataclass(frozen=True)
class EngagementSample:
    """State of the engagement at one tick.

    Attributes:
        time: Time since start [s]
        x, y: Platform position [m]
        heading: Platform heading [rad]
        vx, vy: Platform field velocity [m/s]
        goal_x, goal_y: Virtual goal in use this tick [m]
        launch_angle_deg: Commanded launcher angle [deg]
        heading_error_deg: Heading error to the setpoint [deg]
        ready: Readiness gate passed
        boundary: Cycle boundary reached
        fired: Feed commanded this tick
        recomputed: Solution recomputed this tick
        iterations: Solver iterations for the current solution
    """
    time: float
    x: float
    y: float
    heading: float
    vx: float
    vy: float
    goal_x: float
    goal_y: float
    launch_angle_deg: float
    heading_error_deg: float
    ready: bool
    boundary: bool
    fired: bool
    recomputed: bool
    iterations: int


@beartype
@dataclass
class EngagementResult:
    """Per-tick history of an engagement."""
    samples: list[EngagementSample]

    @property
    def time(self) -> NDArray[np.float64]:
        """Time array [s]."""
        return np.array([s.time for s in self.samples], dtype=np.float64)

    @property
    def position(self) -> NDArray[np.float64]:
        """Platform position history [m], shape (N, 2)."""
        return np.array([[s.x, s.y] for s in self.samples], dtype=np.float64).reshape(-1, 2)

    @property
    def virtual_goals(self) -> NDArray[np.float64]:
        """Virtual goal history [m], shape (N, 2)."""
        return np.array(
            [[s.goal_x, s.goal_y] for s in self.samples], dtype=np.float64
        ).reshape(-1, 2)

    @property
    def shots(self) -> int:
        """Number of fire commands issued."""
        return sum(1 for s in self.samples if s.fired)

    @property
    def fire_times(self) -> list[float]:
        """Times at which the feed was commanded [s]."""
        return [s.time for s in self.samples if s.fired]

    @property
    def recompute_count(self) -> int:
        return sum(1 for s in self.samples if s.recomputed)

    def to_dataframe(self) -> pl.DataFrame:
        """Convert to Polars DataFrame."""
        return pl.DataFrame({
            "time": [s.time for s in self.samples],
            "x": [s.x for s in self.samples],
            "y": [s.y for s in self.samples],
            "heading": [s.heading for s in self.samples],
            "vx": [s.vx for s in self.samples],
            "vy": [s.vy for s in self.samples],
            "goal_x": [s.goal_x for s in self.samples],
            "goal_y": [s.goal_y for s in self.samples],
            "launch_angle_deg": [s.launch_angle_deg for s in self.samples],
            "heading_error_deg": [s.heading_error_deg for s in self.samples],
            "ready": [s.ready for s in self.samples],
            "boundary": [s.boundary for s in self.samples],
            "fired": [s.fired for s in self.samples],
            "recomputed": [s.recomputed for s in self.samples],
            "iterations": [s.iterations for s in self.samples],
        })


def _sample(time: float, tick: Any) -> EngagementSample:
    platform = tick.platform
    solution = tick.solution
    return EngagementSample(
        time=time,
        x=float(platform.position[0]),
        y=float(platform.position[1]),
        heading=float(platform.heading),
        vx=float(platform.velocity[0]),
        vy=float(platform.velocity[1]),
        goal_x=float(solution.virtual_goal[0]),
        goal_y=float(solution.virtual_goal[1]),
        launch_angle_deg=to_degrees(solution.launch_angle),
        heading_error_deg=float(tick.readiness.heading_error_deg),
        ready=bool(tick.readiness.ready),
        boundary=bool(tick.boundary),
        fired=bool(tick.fired),
        recomputed=bool(tick.recomputed),
        iterations=int(solution.iterations),
    )


def run_engagement(
    cycle: Any,
    platform: SimulatedPlatform,
    launcher: SimulatedLauncher,
    ticks: int,
    telemetry: RecordingTelemetry | None = None,
    stop_at_end: bool = True,
) -> EngagementResult:
    """Run a firing cycle for ``ticks`` control periods.

    Starts the cycle if it is not already active. Each tick the cycle runs
    first, then the simulated platform and launcher advance by one period.

    Args:
        cycle: A firing cycle (anything with start/tick/stop/active/config)
        platform: Simulated platform wired into the cycle
        launcher: Simulated launcher wired into the cycle
        ticks: Number of control periods to run
        telemetry: Recording sink to advance once per tick
        stop_at_end: Call ``cycle.stop()`` after the last tick

    Returns:
        EngagementResult with one sample per tick
    """
    if ticks < 0:
        raise ValueError(f"ticks must be non-negative, got {ticks}")

    dt = cycle.config.period
    if not cycle.active:
        cycle.start()

    samples: list[EngagementSample] = []
    for i in range(ticks):
        result = cycle.tick()
        samples.append(_sample(i * dt, result))
        platform.step(dt)
        launcher.step(dt)
        if telemetry is not None:
            telemetry.next_sample()

    if stop_at_end:
        cycle.stop()

    return EngagementResult(samples=samples)
