"""Tests for auto-focus points and their registry."""

import math

import numpy as np
import pytest
from pygame.math import Vector2

from constants import AUTO_FOCUS_COLORS
from focus import FocusPointRegistry
from settings import FocusPointSettings

CENTER = Vector2(400, 300)


@pytest.fixture
def registry():
    return FocusPointRegistry()


def test_ids_are_stable_and_never_reused(registry):
    ids = [registry.add() for _ in range(3)]
    assert ids == [1, 2, 3]

    registry.remove(2)
    assert registry.ids == [1, 3]
    assert registry.index_of(3) == 1
    assert 2 not in registry
    assert registry.add() == 4


def test_unknown_id_raises(registry):
    with pytest.raises(KeyError):
        registry.get(7)
    with pytest.raises(KeyError):
        registry.remove(7)
    with pytest.raises(KeyError):
        registry.index_of(7)


def test_add_from_settings(registry):
    point_id = registry.add_from_settings(
        FocusPointSettings(orbit_radius=150, speed=0.02, clockwise=False, color=4)
    )
    point = registry.get(point_id)
    assert point.angular_speed == pytest.approx(-0.02)
    assert point.orbit_radius == 150
    assert point.color == AUTO_FOCUS_COLORS[4]


def test_companion_turns_the_other_way(registry, rng):
    registry.add(clockwise=True)
    companion = registry.get(registry.add_companion(rng))
    assert companion.clockwise is False
    assert companion.orbit_radius == 200
    assert companion.speed == pytest.approx(0.025)
    assert 0 <= companion.angle < 2 * math.pi


def test_direction_and_speed_controls(registry):
    point_id = registry.add(speed=0.03, clockwise=True)
    registry.set_clockwise(point_id, False)
    assert registry.get(point_id).angular_speed == pytest.approx(-0.03)

    registry.set_speed(point_id, 0.05)
    assert registry.get(point_id).angular_speed == pytest.approx(-0.05)


def test_update_moves_enabled_points_only(registry):
    moving = registry.add(speed=0.1, orbit_radius=100)
    parked = registry.add(enabled=False, speed=0.1, orbit_radius=100)
    registry.reposition(CENTER)

    registry.update(CENTER)
    point = registry.get(moving)
    assert point.angle == pytest.approx(0.1)
    assert point.position.distance_to(CENTER) == pytest.approx(100)
    assert registry.get(parked).angle == 0.0


def test_indicators_drawn_when_shown(registry, renderer):
    registry.add(show_indicator=True, orbit_radius=120)
    registry.add(show_indicator=False)
    registry.update(CENTER, renderer)
    assert len(renderer.rings) == 1
    assert renderer.rings[0][2] == 240
    assert len(renderer.ellipses) == 1


def test_remove_during_iteration_is_safe(registry):
    for _ in range(3):
        registry.add()
    for point in registry:
        registry.remove(point.id)
    assert len(registry) == 0


def test_sources_table(registry):
    registry.add(spring_multiplier=0.5, size_influence=3.0, orbit_radius=100)
    registry.add(enabled=False)
    registry.reposition(CENTER)

    table = registry.sources(repel_radius=150, repel_force=0.4)
    assert table.dtype == np.float64
    assert table.shape == (1, 5)
    assert table[0].tolist() == pytest.approx([500, 300, 105, 0.2, 3.0])


def test_reserved_ids_are_honoured(registry, rng):
    reserved = registry.reserve_id()
    other = registry.add()
    assert registry.add_companion(rng, point_id=reserved) == reserved
    assert registry.ids == [other, reserved]
    with pytest.raises(ValueError):
        registry.add(point_id=other)
