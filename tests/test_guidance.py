"""Tests for the virtual goal solver and the readiness gate."""

import logging
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from sotm.calibration import default_calibration
from sotm.dynamics import FixedTarget, LaunchPowerState, PlatformState, ShotSolution
from sotm.geometry import Pose, vec2
from sotm.gnc.guidance import Readiness, ReadinessEvaluator, VirtualGoalSolver, is_facing


@pytest.fixture
def solver() -> VirtualGoalSolver:
    return VirtualGoalSolver(default_calibration().ballistics)


@pytest.fixture
def target() -> FixedTarget:
    return FixedTarget(position=vec2(4.0, 0.0), opening_width=1.05)


def _solution(distance: float = 4.0, angle_deg: float = 40.0) -> ShotSolution:
    return ShotSolution(
        virtual_goal=vec2(distance, 0.0),
        launch_angle=math.radians(angle_deg),
        power=LaunchPowerState(left_speed=4800.0, right_speed=3800.0),
        distance=distance,
        flight_time=0.9,
    )


# =============================================================================
# Data Model Tests
# =============================================================================


class TestValueTypes:
    """Test the frozen value types."""

    def test_solution_aim_point_is_read_only(self):
        solution = _solution()
        with pytest.raises(ValueError):
            solution.virtual_goal[0] = 0.0

    def test_solution_fields_are_frozen(self):
        import dataclasses

        solution = _solution()
        with pytest.raises(dataclasses.FrozenInstanceError):
            solution.distance = 1.0

    def test_platform_state_copies_inputs(self):
        velocity = vec2(1.0, 0.0)
        state = PlatformState(position=vec2(0.0, 0.0), heading=0.0, velocity=velocity)
        velocity[0] = 5.0
        assert state.velocity[0] == 1.0
        assert_allclose(state.speed, 1.0)

    def test_platform_state_from_pose(self):
        state = PlatformState.from_pose(Pose(x=1.0, y=2.0, heading=0.3), vec2(0.0, 3.0))
        assert_allclose(state.position, [1.0, 2.0])
        assert_allclose(state.acceleration, [0.0, 0.0])
        assert state.pose == Pose(x=1.0, y=2.0, heading=0.3)

    def test_target_width_must_be_positive(self):
        with pytest.raises(ValueError, match="opening_width"):
            FixedTarget(position=vec2(0.0, 0.0), opening_width=0.0)

    def test_power_state(self):
        idle = LaunchPowerState()
        full = LaunchPowerState(left_speed=4000.0, right_speed=2000.0)
        assert idle.is_idle
        assert not full.is_idle
        assert full == LaunchPowerState(left_speed=4000.0, right_speed=2000.0)


# =============================================================================
# Virtual Goal Solver Tests
# =============================================================================


class TestVirtualGoalSolver:
    """Test the fixed-point intercept solver."""

    def test_stationary_aims_at_real_goal(self, solver, target):
        platform = PlatformState(position=vec2(0.0, 0.0), heading=0.0)
        solution = solver.solve(platform, target)

        assert_allclose(solution.virtual_goal, [4.0, 0.0])
        assert solution.converged
        assert solution.iterations == 1
        assert solution.distance == 4.0
        assert solution.flight_time == 0.9
        assert_allclose(solution.launch_angle, math.radians(40.0))
        assert solution.power == LaunchPowerState(left_speed=4800.0, right_speed=3800.0)

    def test_moving_toward_goal_shortens_shot(self, solver, target):
        platform = PlatformState(
            position=vec2(0.0, 0.0), heading=0.0, velocity=vec2(1.0, 0.0)
        )
        solution = solver.solve(platform, target)

        # Aim point sits behind the goal by the drift over the flight
        assert_allclose(solution.virtual_goal[1], 0.0)
        assert_allclose(solution.virtual_goal[0], 3.2105, atol=1e-3)
        assert_allclose(
            solution.virtual_goal, target.position - solution.flight_time * vec2(1.0, 0.0),
            atol=1e-3,
        )
        assert solution.distance < 4.0
        assert solution.flight_time < 0.9
        assert solution.launch_angle > math.radians(40.0)

    def test_iteration_cap(self, solver, target):
        """Large drift does not settle within 5 iterations; the last iterate is kept."""
        platform = PlatformState(
            position=vec2(0.0, 0.0), heading=0.0, velocity=vec2(1.0, 0.0)
        )
        solution = solver.solve(platform, target)
        assert solution.iterations == 5
        assert not solution.converged

    def test_single_iteration(self, target):
        solver = VirtualGoalSolver(default_calibration().ballistics, max_iterations=1)
        platform = PlatformState(
            position=vec2(0.0, 0.0), heading=0.0, velocity=vec2(1.0, 0.0)
        )
        solution = solver.solve(platform, target)
        assert solution.iterations == 1
        assert_allclose(solution.virtual_goal, [3.1, 0.0])

    def test_non_convergence_is_logged(self, solver, target, caplog):
        platform = PlatformState(
            position=vec2(0.0, 0.0), heading=0.0, velocity=vec2(1.0, 0.0)
        )
        with caplog.at_level(logging.DEBUG, logger="sotm.gnc.guidance.virtual_goal"):
            solver.solve(platform, target)
        assert "did not converge" in caplog.text

    def test_strafing_shifts_aim_opposite_to_motion(self, solver, target):
        platform = PlatformState(
            position=vec2(0.0, 0.0), heading=0.0, velocity=vec2(0.0, 0.5)
        )
        solution = solver.solve(platform, target)
        assert solution.virtual_goal[1] < 0.0
        assert_allclose(solution.virtual_goal[0], 4.0)

    def test_acceleration_acts_over_feed_latency(self, solver, target):
        """0.5 * a * latency adds to the drift velocity."""
        accelerating = PlatformState(
            position=vec2(0.0, 0.0), heading=0.0, acceleration=vec2(10.0, 0.0)
        )
        cruising = PlatformState(
            position=vec2(0.0, 0.0), heading=0.0, velocity=vec2(0.5, 0.0)
        )
        assert_allclose(
            solver.solve(accelerating, target).virtual_goal,
            solver.solve(cruising, target).virtual_goal,
        )

    def test_zero_latency_ignores_acceleration(self, target):
        solver = VirtualGoalSolver(default_calibration().ballistics, feed_latency=0.0)
        platform = PlatformState(
            position=vec2(0.0, 0.0), heading=0.0, acceleration=vec2(10.0, 0.0)
        )
        assert_allclose(solver.solve(platform, target).virtual_goal, [4.0, 0.0])

    def test_out_of_range_distance_clamps(self, solver):
        far = FixedTarget(position=vec2(10.0, 0.0), opening_width=1.05)
        solution = solver.solve(PlatformState(position=vec2(0.0, 0.0), heading=0.0), far)
        assert solution.flight_time == 1.18
        assert_allclose(solution.launch_angle, math.radians(34.0))

    @pytest.mark.parametrize("sign", [1.0, -1.0])
    def test_extreme_motion_stays_finite(self, solver, target, sign):
        """Huge drift pushes the aim point far off the table; lookups clamp."""
        platform = PlatformState(
            position=vec2(0.0, 0.0),
            heading=0.0,
            velocity=vec2(sign * 1e6, 0.0),
            acceleration=vec2(sign * 1e9, 0.0),
        )
        solution = solver.solve(platform, target)

        assert solution.iterations <= 5
        # 40 deg seed, then 34 deg twice at the clamped far end
        assert solution.iterations == 2
        assert solution.converged
        assert math.isfinite(solution.launch_angle)
        assert np.all(np.isfinite(solution.virtual_goal))
        assert_allclose(solution.launch_angle, math.radians(34.0))
        assert solution.flight_time == 1.18

    def test_invalid_settings(self):
        model = default_calibration().ballistics
        with pytest.raises(ValueError, match="max_iterations"):
            VirtualGoalSolver(model, max_iterations=0)
        with pytest.raises(ValueError, match="feed_latency"):
            VirtualGoalSolver(model, feed_latency=-0.1)


# =============================================================================
# Facing Tests
# =============================================================================


class TestIsFacing:
    """Test the heading-line window check."""

    def test_straight_at_window(self):
        assert is_facing(Pose(), vec2(4.0, 0.0), 1.0)

    def test_offset_platform_misses(self):
        assert not is_facing(Pose(x=0.0, y=1.0, heading=0.0), vec2(4.0, 0.0), 1.0)

    def test_edge_is_inclusive(self):
        assert is_facing(Pose(x=0.0, y=0.5, heading=0.0), vec2(4.0, 0.0), 1.0)

    def test_angled_heading(self):
        assert is_facing(Pose(heading=math.atan(0.1)), vec2(4.0, 0.0), 1.0)
        assert not is_facing(Pose(heading=math.atan(0.2)), vec2(4.0, 0.0), 1.0)

    def test_reversed_heading_uses_same_line(self):
        assert is_facing(Pose(x=4.0, y=0.0, heading=math.pi), vec2(0.0, 0.0), 1.0)

    def test_perpendicular_heading_is_not_facing(self):
        """The heading line never reaches the goal plane."""
        assert not is_facing(Pose(heading=math.pi / 2), vec2(4.0, 0.0), 100.0)
        assert not is_facing(Pose(heading=-math.pi / 2), vec2(4.0, 0.0), 100.0)


# =============================================================================
# Readiness Tests
# =============================================================================


class TestReadiness:
    """Test the readiness gate."""

    @pytest.fixture
    def evaluator(self) -> ReadinessEvaluator:
        return ReadinessEvaluator(default_calibration().tolerances)

    def _evaluate(self, evaluator, launcher_deg=40.0, at_setpoint=True, heading=0.0,
                  width=1.05):
        return evaluator.evaluate(
            Pose(heading=heading),
            0.0,
            _solution(),
            launcher_angle=math.radians(launcher_deg),
            launcher_at_setpoint=at_setpoint,
            window_center=vec2(4.0, 0.0),
            opening_width=width,
        )

    def test_all_checks_pass(self, evaluator):
        readiness = self._evaluate(evaluator)
        assert readiness.facing
        assert readiness.angle_aligned
        assert readiness.at_power
        assert readiness.ready
        assert_allclose(readiness.angle_error_deg, 0.0, atol=1e-9)

    def test_angle_within_tolerance(self, evaluator):
        """Launcher angle tolerance at 4 m is 0.6 deg."""
        readiness = self._evaluate(evaluator, launcher_deg=40.5)
        assert readiness.angle_aligned
        assert_allclose(readiness.angle_error_deg, -0.5)

    def test_angle_outside_tolerance(self, evaluator):
        readiness = self._evaluate(evaluator, launcher_deg=41.0)
        assert not readiness.angle_aligned
        assert not readiness.ready

    def test_not_at_power(self, evaluator):
        readiness = self._evaluate(evaluator, at_setpoint=False)
        assert not readiness.at_power
        assert not readiness.ready

    def test_not_facing(self, evaluator):
        readiness = self._evaluate(evaluator, heading=math.radians(30.0))
        assert not readiness.facing
        assert not readiness.ready

    def test_heading_tolerance_reported_not_gating(self, evaluator):
        """Heading tolerance at 4 m is 11.875 deg; 12 deg is outside it."""
        readiness = self._evaluate(evaluator, heading=math.radians(12.0), width=2.0)
        assert readiness.facing
        assert not readiness.heading_within_tolerance
        assert_allclose(readiness.heading_error_deg, 12.0)
        assert readiness.ready

    def test_heading_tolerance_gates_when_required(self):
        evaluator = ReadinessEvaluator(
            default_calibration().tolerances, require_heading_tolerance=True
        )
        readiness = self._evaluate(evaluator, heading=math.radians(12.0), width=2.0)
        assert not readiness.ready

    def test_ready_property(self):
        readiness = Readiness(
            facing=True,
            angle_aligned=True,
            at_power=True,
            heading_within_tolerance=False,
            angle_error_deg=0.0,
            heading_error_deg=20.0,
        )
        assert readiness.ready
        assert not Readiness(
            facing=True,
            angle_aligned=True,
            at_power=True,
            heading_within_tolerance=False,
            angle_error_deg=0.0,
            heading_error_deg=20.0,
            require_heading=True,
        ).ready

    def test_tolerance_scales_with_distance(self, evaluator):
        """A 1 deg launcher error passes up close but not at range."""
        close = evaluator.evaluate(
            Pose(), 0.0, _solution(distance=1.36, angle_deg=58.0),
            launcher_angle=math.radians(57.0),
            launcher_at_setpoint=True,
            window_center=vec2(1.36, 0.0),
            opening_width=1.05,
        )
        far = evaluator.evaluate(
            Pose(), 0.0, _solution(distance=4.0, angle_deg=40.0),
            launcher_angle=math.radians(39.0),
            launcher_at_setpoint=True,
            window_center=vec2(4.0, 0.0),
            opening_width=1.05,
        )
        assert close.angle_aligned
        assert not far.angle_aligned

    def test_np_arrays_window(self, evaluator):
        readiness = evaluator.evaluate(
            Pose(), 0.0, _solution(),
            launcher_angle=math.radians(40.0),
            launcher_at_setpoint=True,
            window_center=np.array([4.0, 0.0]),
            opening_width=1.05,
        )
        assert readiness.ready
