from __future__ import annotations

import math

from pygame.math import Vector2


def magnitude(vector: Vector2) -> float:
    return math.sqrt(vector.x * vector.x + vector.y * vector.y)


def _safe_normalize(vector: Vector2) -> Vector2:
    return _safe_normalize_xy(vector.x, vector.y)


def _safe_normalize_xy(x: float, y: float) -> Vector2:
    magnitude_sq = x * x + y * y
    if magnitude_sq == 0.0:
        return Vector2()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(x * inv, y * inv)


def _clamp_length(vector: Vector2, max_length: float) -> Vector2:
    return _clamp_length_xy(vector.x, vector.y, max_length)


def _clamp_length_xy(x: float, y: float, max_length: float) -> Vector2:
    if max_length <= 0:
        return Vector2()
    magnitude_sq = x * x + y * y
    if magnitude_sq <= max_length * max_length:
        return Vector2(x, y)
    inv = max_length / math.sqrt(magnitude_sq)
    return Vector2(x * inv, y * inv)


def _set_magnitude(vector: Vector2, length: float) -> Vector2:
    """Rescale to ``length``; a zero vector stays zero instead of raising like ``scale_to_length``."""
    return _safe_normalize(vector) * length


def _heading_from_velocity(vector: Vector2) -> float:
    if vector.length_squared() < 1e-12:
        return 0.0
    return math.atan2(vector.y, vector.x)
