from __future__ import annotations

import math

from pygame.math import Vector2, Vector3
from pytest import approx

from mindfield.sim.systems.dynamics import (
    compute_acceleration_from_gradient,
    compute_baseline_drives,
    integrate_motion,
)
from mindfield.sim.utils.vecmath import clamp_length


def test_still_entity_gets_kicked_along_first_axis():
    position = Vector2(1.0, 1.0)
    velocity = Vector2(0.0, 0.0)
    integrate_motion(position, velocity, [0.0, 0.0], dt=0.1, min_speed=0.05, damping=0.99)

    assert velocity.x == approx(0.05)
    assert velocity.y == 0.0
    assert position.x == approx(1.005)


def test_slow_entity_is_rescaled_to_min_speed():
    position = Vector3(0.0, 0.0, 0.0)
    velocity = Vector3(0.01, 0.01, 0.0)
    integrate_motion(position, velocity, [], dt=0.1, min_speed=0.05, damping=1.0)

    assert velocity.length() == approx(0.05)
    assert velocity.x == approx(velocity.y)


def test_acceleration_and_damping_apply_before_position_update():
    position = Vector2(0.0, 0.0)
    velocity = Vector2(1.0, 0.0)
    integrate_motion(position, velocity, [1.0, 0.0], dt=0.1, min_speed=0.05, damping=0.5)

    assert velocity.x == approx(0.55)
    assert position.x == approx(0.055)


def test_missing_acceleration_components_count_as_zero():
    position = [0.0, 0.0, 0.0]
    velocity = [1.0, 1.0, 1.0]
    integrate_motion(position, velocity, [2.0], dt=1.0, min_speed=0.05, damping=1.0)

    assert velocity == approx([3.0, 1.0, 1.0])
    assert position == approx([3.0, 1.0, 1.0])


def test_speed_never_drops_below_min_speed():
    position = Vector2(5.0, 5.0)
    velocity = Vector2(0.3, -0.2)
    for _ in range(200):
        integrate_motion(position, velocity, [0.0, 0.0], dt=0.01, min_speed=0.05, damping=0.9)
        assert velocity.length() >= 0.05 - 1e-9


def test_gradient_acceleration_gain():
    assert compute_acceleration_from_gradient([1.0, -2.0]) == approx([0.1, -0.2])


def test_baseline_drives():
    assert compute_baseline_drives(2.0, 0.3) == approx((0.5, 0.3))
    assert compute_baseline_drives(0.0, 0.3) == approx((1.0, 0.3))
    assert compute_baseline_drives(math.inf, 0.0) == approx((0.0, 0.0))


def test_clamp_length_limits_magnitude_only_when_needed():
    assert clamp_length([3.0, 4.0], 10.0) == [3.0, 4.0]
    assert clamp_length([30.0, 40.0], 10.0) == approx([6.0, 8.0])
    assert clamp_length([30.0, 40.0], 0.0) == [30.0, 40.0]
