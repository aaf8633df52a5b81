#!/usr/bin/env python
"""Shoot-on-the-move engagement against the simulated field.

Simulates a platform strafing past the goal while the driver holds the
shoot button:
- Platform starts 4 m from the goal, moving laterally
- The firing cycle turns the launcher toward the virtual goal
- The feed fires once the readiness gate passes at a cycle boundary
- Halfway through, the driver stops and the cycle re-solves immediately

Usage:
    uv run python scripts/shoot_on_the_move.py [--plot engagement.png]
"""

import argparse
import logging

import numpy as np

from onboard import FiringCycle, FiringCycleConfig
from sotm.dynamics import FixedTarget
from sotm.geometry import vec2
from sotm.simulation import (
    MarkerBoard,
    SimulatedFeed,
    SimulatedLauncher,
    SimulatedPlatform,
    StaticTargetGeometry,
    run_engagement,
)
from sotm.telemetry import RecordingTelemetry
from sotm.units import inches


def run_demo(plot_path: str | None = None) -> None:
    """Run the strafing engagement and print a summary."""
    print("=" * 70)
    print("SHOOT ON THE MOVE")
    print("=" * 70)

    goal = FixedTarget(position=vec2(0.0, 5.55), opening_width=inches(41.625))
    platform = SimulatedPlatform(
        x=4.0,
        y=4.5,
        heading=np.pi,
        scripted_velocity=vec2(0.0, 0.4),
    )
    launcher = SimulatedLauncher()
    feed = SimulatedFeed()
    markers = MarkerBoard()
    telemetry = RecordingTelemetry()

    cycle = FiringCycle(
        localization=platform,
        target_geometry=StaticTargetGeometry(goal),
        drive=platform,
        launcher=launcher,
        feed=feed,
        config=FiringCycleConfig(),
        telemetry=telemetry,
        visualizer=markers,
    )

    moving = run_engagement(cycle, platform, launcher, ticks=100, telemetry=telemetry,
                            stop_at_end=False)
    platform.set_velocity(vec2(0.0, 0.0))
    stopped = run_engagement(cycle, platform, launcher, ticks=50, telemetry=telemetry)

    print(f"\n  Moving phase:  {moving.recompute_count} solves, {moving.shots} shot(s)")
    print(f"  Stopped phase: {stopped.recompute_count} solves, {stopped.shots} shot(s)")
    print(f"  Feed commands: {feed.fire_count}")
    if feed.fire_count:
        pose, solution = markers.launches[0]
        print(f"\n  First shot from ({pose.x:.2f}, {pose.y:.2f}) m")
        print(f"    Virtual goal:  ({solution.virtual_goal[0]:.3f}, "
              f"{solution.virtual_goal[1]:.3f}) m")
        print(f"    Distance:      {solution.distance:.3f} m")
        print(f"    Flight time:   {solution.flight_time:.3f} s")
        print(f"    Launch angle:  {np.degrees(solution.launch_angle):.2f} deg")
        print(f"    Iterations:    {solution.iterations}")

    df = moving.to_dataframe()
    print(f"\n  Max |heading error| while moving: "
          f"{df['heading_error_deg'].abs().max():.2f} deg")

    if plot_path:
        from sotm.plotting import plot_engagement

        fig = plot_engagement(moving, target=goal, title="Strafing engagement")
        fig.savefig(plot_path, dpi=120)
        print(f"\n  Saved plot to {plot_path}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--plot", help="Save an engagement plot to this path")
    parser.add_argument("--verbose", action="store_true", help="Show cycle log output")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    run_demo(args.plot)


if __name__ == "__main__":
    main()
