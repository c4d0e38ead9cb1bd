"""Reynolds' three flocking rules, evaluated against an agent's neighbor cache."""

from __future__ import annotations

import math

from pygame.math import Vector2

from ..core.agent import Agent
from ..utils.math2d import _clamp_length, _set_magnitude


def separation(agent: Agent, weight: float) -> Vector2:
    """Average of unit vectors pointing away from each neighbor.

    Directions are normalized before averaging, so a single neighbor produces
    the same magnitude at any distance. Coincident neighbors add nothing but
    still count toward the average.
    """
    neighbors = agent.neighbors
    if not neighbors:
        return Vector2()

    steer_x = 0.0
    steer_y = 0.0
    pos_x = agent.position.x
    pos_y = agent.position.y
    for other, dist_sq in neighbors:
        if dist_sq <= 0.0:
            continue
        inv = 1.0 / math.sqrt(dist_sq)
        steer_x += (pos_x - other.position.x) * inv
        steer_y += (pos_y - other.position.y) * inv

    scale = weight / len(neighbors)
    return Vector2(steer_x * scale, steer_y * scale)


def alignment(agent: Agent, weight: float, max_speed: float, max_force: float) -> Vector2:
    neighbors = agent.neighbors
    if not neighbors:
        return Vector2()

    average = Vector2()
    for other, _ in neighbors:
        average += other.velocity
    average /= len(neighbors)
    return _steer_towards(agent, _set_magnitude(average, max_speed), weight, max_force)


def cohesion(agent: Agent, weight: float, max_speed: float, max_force: float) -> Vector2:
    neighbors = agent.neighbors
    if not neighbors:
        return Vector2()

    center = Vector2()
    for other, _ in neighbors:
        center += other.position
    center /= len(neighbors)
    return _steer_towards(agent, _set_magnitude(center - agent.position, max_speed), weight, max_force)


def _steer_towards(agent: Agent, desired: Vector2, weight: float, max_force: float) -> Vector2:
    return _clamp_length(desired - agent.velocity, max_force) * weight
