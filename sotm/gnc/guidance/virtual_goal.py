"""Virtual goal solver: where to aim so a moving platform still scores.

A projectile launched from a moving platform inherits the platform's
velocity. Over a flight time t it drifts by roughly t * v, so instead of
aiming at the real goal we aim at a *virtual* goal shifted the other way:

    virtual_goal = goal - t * (v + 0.5 * a * feed_latency)

The acceleration term accounts for the speed change during the mechanical
feed delay between the fire command and release.

The catch is that t itself depends on the distance to the virtual goal,
which depends on t. Flight time varies smoothly and slowly with distance,
so a fixed-point iteration converges in a handful of steps:

1. Seed with the distance to the real goal
2. Compute the virtual goal from the current flight time
3. Re-look-up flight time and launch angle at the new distance
4. Stop once the launch angle changes by less than ``angle_epsilon_deg``

The iteration is capped at ``max_iterations``. If it has not converged by
then, the last iterate is used as-is. Convergence is judged on launch
angle only, a cheap proxy for the aim point having settled.

Example:
    >>> from sotm.calibration import default_calibration
    >>> from sotm.gnc.guidance import VirtualGoalSolver
    >>>
    >>> solver = VirtualGoalSolver(default_calibration().ballistics)
    >>> solution = solver.solve(platform_state, target)
    >>> solution.virtual_goal, np.degrees(solution.launch_angle)
"""

import logging
from dataclasses import dataclass

import numpy as np
from beartype import beartype

from sotm.ballistics import BallisticModel
from sotm.dynamics.state import FixedTarget, PlatformState, ShotSolution
from sotm.geometry import distance
from sotm.units import degrees

logger = logging.getLogger(__name__)


@beartype
@dataclass(frozen=True)
class VirtualGoalSolver:
    """Fixed-point intercept solver.

    Attributes:
        model: Ballistic calibration
        feed_latency: Delay from fire command to projectile release [s]
        max_iterations: Hard cap on fixed-point iterations
        angle_epsilon_deg: Convergence threshold on launch angle change [deg]
    """
    model: BallisticModel
    feed_latency: float = 0.100
    max_iterations: int = 5
    angle_epsilon_deg: float = 0.0005

    def __post_init__(self) -> None:
        """Validate solver settings."""
        if self.feed_latency < 0:
            raise ValueError(f"feed_latency must be non-negative, got {self.feed_latency}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.angle_epsilon_deg < 0:
            raise ValueError("angle_epsilon_deg must be non-negative")

    def solve(self, platform: PlatformState, target: FixedTarget) -> ShotSolution:
        """Compute the motion-compensated firing solution.

        Args:
            platform: Current platform position, velocity and acceleration
            target: Real goal position

        Returns:
            ShotSolution aimed at the virtual goal
        """
        position = platform.position
        goal = target.position

        # Effective drift velocity during flight, including feed-delay acceleration
        drift = platform.velocity + 0.5 * platform.acceleration * self.feed_latency

        shot_distance = distance(position, goal)
        flight_time = self.model.flight_time(shot_distance)
        angle_deg = self.model.launch_angle_deg(shot_distance)

        virtual_goal = goal.copy()
        iterations = 0
        converged = False

        for i in range(self.max_iterations):
            iterations = i + 1

            virtual_goal = goal - flight_time * drift

            new_distance = distance(position, virtual_goal)
            new_flight_time = self.model.flight_time(new_distance)
            new_angle_deg = self.model.launch_angle_deg(new_distance)

            delta = abs(new_angle_deg - angle_deg)

            flight_time = new_flight_time
            angle_deg = new_angle_deg
            shot_distance = new_distance

            if delta <= self.angle_epsilon_deg:
                converged = True
                break

        if not converged:
            logger.debug(
                "virtual goal did not converge in %d iterations (distance %.3f m)",
                iterations,
                shot_distance,
            )

        return ShotSolution(
            virtual_goal=np.asarray(virtual_goal, dtype=np.float64),
            launch_angle=degrees(angle_deg),
            power=self.model.launch_power(shot_distance),
            distance=shot_distance,
            flight_time=flight_time,
            iterations=iterations,
            converged=converged,
        )
