"""Tests for PID control, signal filters, the aim controller and acceleration estimation."""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from sotm.geometry import Pose, vec2
from sotm.gnc.control import (
    AimConfig,
    AimController,
    MovingAverageFilter,
    PIDController,
    PIDGains,
    SlewRateLimiter,
    heading_setpoint,
)
from sotm.gnc.estimation import AccelerationEstimator
from sotm.units import inches

# =============================================================================
# PID Tests
# =============================================================================


class TestPIDController:
    """Test the PID controller."""

    def test_proportional_only(self):
        pid = PIDController(kp=2.0)
        assert_allclose(pid.calculate(1.0, 1.5, dt=0.02), 1.0)

    def test_derivative_skipped_on_first_call(self):
        pid = PIDController(kp=0.0, kd=1.0)
        assert pid.update(1.0, dt=0.1) == 0.0
        assert_allclose(pid.update(2.0, dt=0.1), 10.0)

    def test_integral_windup_clamped(self):
        pid = PIDController(kp=0.0, ki=1.0, integral_limits=(-0.5, 0.5))
        for _ in range(100):
            out = pid.update(1.0, dt=0.1)
        assert_allclose(out, 0.5)

    def test_output_limits(self):
        pid = PIDController(kp=10.0, output_limits=(-1.0, 1.0))
        assert pid.update(5.0, dt=0.02) == 1.0
        assert pid.update(-5.0, dt=0.02) == -1.0

    def test_continuous_input_takes_short_way(self):
        """3.1 rad -> -3.1 rad is a small positive move through pi."""
        pid = PIDController(kp=1.0, continuous_input=(-math.pi, math.pi))
        out = pid.calculate(3.1, -3.1, dt=0.02)
        assert out > 0.0
        assert_allclose(out, 2 * math.pi - 6.2, atol=1e-12)

    def test_wrap_error_without_range_is_identity(self):
        pid = PIDController()
        assert pid.wrap_error(7.0) == 7.0

    def test_reset_clears_memory(self):
        pid = PIDController(kp=0.0, ki=1.0)
        pid.update(1.0, dt=1.0)
        pid.reset()
        assert_allclose(pid.update(1.0, dt=1.0), 1.0)

    def test_non_positive_dt_returns_zero(self):
        pid = PIDController(kp=1.0)
        assert pid.update(1.0, dt=0.0) == 0.0

    def test_invalid_continuous_range(self):
        with pytest.raises(ValueError, match="continuous_input"):
            PIDController(continuous_input=(1.0, -1.0))

    def test_invalid_derivative_filter(self):
        with pytest.raises(ValueError, match="derivative_filter"):
            PIDController(derivative_filter=0.0)

    def test_from_gains(self):
        pid = PIDController.from_gains(PIDGains(kp=0.8, ki=0.0, kd=0.01))
        assert (pid.kp, pid.ki, pid.kd) == (0.8, 0.0, 0.01)


# =============================================================================
# Filter Tests
# =============================================================================


class TestSlewRateLimiter:
    """Test slew-rate limiting."""

    def test_limits_step(self):
        limiter = SlewRateLimiter(rate_limit=1.0)
        assert_allclose(limiter.calculate(10.0, dt=0.1), 0.1)
        assert_allclose(limiter.calculate(10.0, dt=0.1), 0.2)

    def test_limits_both_directions(self):
        limiter = SlewRateLimiter(rate_limit=2.0, initial_value=1.0)
        assert_allclose(limiter.calculate(-5.0, dt=0.25), 0.5)

    def test_small_change_passes_through(self):
        limiter = SlewRateLimiter(rate_limit=10.0)
        assert_allclose(limiter.calculate(0.05, dt=0.02), 0.05)

    def test_reset_jumps(self):
        limiter = SlewRateLimiter(rate_limit=1.0)
        limiter.reset(5.0)
        assert limiter.calculate(5.0, 0.02) == 5.0
        assert_allclose(limiter.calculate(0.0, 0.5), 4.5)

    def test_invalid_rate(self):
        with pytest.raises(ValueError, match="rate_limit"):
            SlewRateLimiter(rate_limit=0.0)


class TestMovingAverageFilter:
    """Test the boxcar filter."""

    def test_two_tap_ramps_from_zero(self):
        avg = MovingAverageFilter(taps=2)
        assert avg.calculate(2.0) == 1.0
        assert avg.calculate(4.0) == 3.0
        assert avg.calculate(4.0) == 4.0

    def test_reset(self):
        avg = MovingAverageFilter(taps=2)
        avg.calculate(10.0)
        avg.reset()
        assert avg.calculate(2.0) == 1.0

    def test_invalid_taps(self):
        with pytest.raises(ValueError, match="taps"):
            MovingAverageFilter(taps=0)


# =============================================================================
# Aim Controller Tests
# =============================================================================


class TestHeadingSetpoint:
    """Test the heading setpoint."""

    def test_forward_axis_faces_goal_along_x(self):
        """Goal along +X: the goal-to-platform bearing is pi, plus pi gives heading 0."""
        setpoint = heading_setpoint(vec2(0.0, 0.0), vec2(4.0, 0.0))
        assert_allclose(setpoint, 0.0, atol=1e-12)

    def test_goal_to_the_left(self):
        setpoint = heading_setpoint(vec2(0.0, 0.0), vec2(0.0, 4.0))
        assert_allclose(setpoint, math.pi / 2)

    def test_no_mount_offset(self):
        setpoint = heading_setpoint(vec2(0.0, 0.0), vec2(4.0, 0.0), mount_offset=0.0)
        assert_allclose(abs(setpoint), math.pi)


class TestAimController:
    """Test translation shaping and heading control."""

    def test_forward_axis_is_inverted_and_rate_limited(self):
        aim = AimController()
        forward, strafe = aim.translation(1.0, 0.0, max_speed=4.5, dt=0.02)
        # 8 m/s^2 * 0.02 s
        assert_allclose(forward, -0.16)
        assert strafe == 0.0

    def test_translation_ramps_to_scaled_max(self):
        aim = AimController()
        for _ in range(100):
            forward, strafe = aim.translation(0.0, 1.0, max_speed=4.5, dt=0.02)
        assert_allclose(strafe, 2.25)

    def test_deadband_zeroes_small_commands(self):
        aim = AimController()
        # 0.005 * 2.25 m/s is below half an inch per second
        _, strafe = aim.translation(0.0, 0.005, max_speed=4.5, dt=0.02)
        assert strafe == 0.0

    def test_deadband_resets_limiter(self):
        aim = AimController()
        for _ in range(50):
            aim.translation(0.0, 1.0, max_speed=4.5, dt=0.02)
        aim.reset()
        _, strafe = aim.translation(0.0, 1.0, max_speed=4.5, dt=0.02)
        assert_allclose(strafe, 0.16)

    def test_angular_saturates(self):
        aim = AimController()
        angular = aim.angular(Pose(), setpoint=math.pi / 2, dt=0.02)
        assert_allclose(angular, 3 * math.pi / 2)

    def test_angular_proportional_region(self):
        aim = AimController(AimConfig(gains=PIDGains(kp=0.8, ki=0.0, kd=0.0)))
        angular = aim.angular(Pose(), setpoint=0.1, dt=0.02)
        assert_allclose(angular, 0.08 * 3 * math.pi / 2)

    def test_command_bundles_setpoint_and_error(self):
        aim = AimController()
        result = aim.command(
            Pose(), vec2(0.0, 4.0), forward_input=0.0, strafe_input=0.0,
            max_speed=4.5, dt=0.02,
        )
        assert_allclose(result.setpoint, math.pi / 2)
        assert_allclose(result.heading_error, -math.pi / 2)
        assert result.drive.field_relative
        assert result.drive.open_loop
        assert not result.drive.turn_open_loop
        assert result.drive.angular > 0.0

    def test_turns_toward_setpoint_across_seam(self):
        """Heading just below +pi, setpoint just above -pi: turn counter-clockwise."""
        aim = AimController()
        angular = aim.angular(Pose(heading=3.1), setpoint=-3.1, dt=0.02)
        assert angular > 0.0

    def test_invalid_config(self):
        with pytest.raises(ValueError, match="max_angular_velocity"):
            AimConfig(max_angular_velocity=0.0)
        with pytest.raises(ValueError, match="translation_deadband"):
            AimConfig(translation_deadband=-inches(1.0))


# =============================================================================
# Acceleration Estimator Tests
# =============================================================================


class TestAccelerationEstimator:
    """Test finite-difference acceleration with smoothing."""

    def test_step_in_velocity(self):
        est = AccelerationEstimator(period=0.02)
        est.reset(vec2(0.0, 0.0))

        # 0.02 m/s change over 0.02 s is 1 m/s^2 raw
        assert_allclose(est.update(vec2(0.02, 0.0)), [0.5, 0.0])
        assert_allclose(est.update(vec2(0.02, 0.0)), [0.5, 0.0])
        assert_allclose(est.update(vec2(0.02, 0.0)), [0.0, 0.0])

    def test_constant_acceleration_settles(self):
        est = AccelerationEstimator(period=0.02)
        est.reset(vec2(0.0, 0.0))
        for k in range(1, 10):
            accel = est.update(vec2(0.0, -0.04 * k))
        assert_allclose(accel, [0.0, -2.0])

    def test_seeded_velocity_gives_zero_first_estimate(self):
        est = AccelerationEstimator()
        est.reset(vec2(1.0, 2.0))
        assert_allclose(est.update(vec2(1.0, 2.0)), [0.0, 0.0])

    def test_reset_clears_history(self):
        est = AccelerationEstimator()
        est.reset()
        est.update(vec2(1.0, 0.0))
        est.reset(vec2(1.0, 0.0))
        assert_allclose(est.acceleration, [0.0, 0.0])
        assert_allclose(est.previous_velocity, [1.0, 0.0])

    def test_returns_copies(self):
        est = AccelerationEstimator()
        est.reset()
        out = est.update(vec2(0.02, 0.0))
        out[0] = 100.0
        assert est.acceleration[0] != 100.0

    def test_invalid_period(self):
        with pytest.raises(ValueError, match="period"):
            AccelerationEstimator(period=0.0)

    def test_accepts_plain_arrays(self):
        est = AccelerationEstimator()
        est.reset(np.zeros(2))
        assert est.update(np.array([0.0, 0.0])).shape == (2,)
