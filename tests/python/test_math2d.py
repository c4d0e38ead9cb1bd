from __future__ import annotations

import math

from pygame.math import Vector2
from pytest import approx

from boidlab.sim.utils.math2d import (
    _clamp_length,
    _heading_from_velocity,
    _safe_normalize,
    _set_magnitude,
    magnitude,
)


def test_magnitude_and_normalize():
    assert magnitude(Vector2(3.0, 4.0)) == approx(5.0)
    unit = _safe_normalize(Vector2(3.0, 4.0))
    assert (unit.x, unit.y) == (approx(0.6), approx(0.8))


def test_zero_vectors_are_guarded():
    assert _safe_normalize(Vector2()) == Vector2()
    assert _set_magnitude(Vector2(), 4.0) == Vector2()
    assert _clamp_length(Vector2(), 1.0) == Vector2()
    assert _heading_from_velocity(Vector2()) == 0.0


def test_clamp_length_preserves_direction():
    clamped = _clamp_length(Vector2(30.0, 40.0), 5.0)
    assert clamped.length() == approx(5.0)
    assert (clamped.x, clamped.y) == (approx(3.0), approx(4.0))

    short = Vector2(0.1, 0.2)
    untouched = _clamp_length(short, 5.0)
    assert untouched == short
    assert untouched is not short


def test_clamp_length_to_zero_and_set_magnitude():
    assert _clamp_length(Vector2(1.0, 1.0), 0.0) == Vector2()
    scaled = _set_magnitude(Vector2(0.0, -2.0), 4.0)
    assert (scaled.x, scaled.y) == (approx(0.0), approx(-4.0))
    assert _heading_from_velocity(Vector2(0.0, 1.0)) == approx(math.pi / 2)
