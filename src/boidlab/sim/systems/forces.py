from __future__ import annotations

import math
from typing import Iterable

from pygame.math import Vector2

from ..core.agent import Agent
from ..types.world_state import Obstacle, PointerMode, PointerState

_POINTER_EPSILON = 1e-6


def obstacle_avoidance(agent: Agent, obstacles: Iterable[Obstacle], buffer: float, strength: float) -> Vector2:
    """Sum of linear falloff pushes from every obstacle whose buffered radius contains the agent."""
    force_x = 0.0
    force_y = 0.0
    pos_x = agent.position.x
    pos_y = agent.position.y
    for obstacle in obstacles:
        avoid_radius = obstacle.radius + buffer
        if avoid_radius <= 0.0:
            continue
        offset_x = pos_x - obstacle.position.x
        offset_y = pos_y - obstacle.position.y
        dist_sq = offset_x * offset_x + offset_y * offset_y
        if dist_sq <= 0.0 or dist_sq >= avoid_radius * avoid_radius:
            continue
        dist = math.sqrt(dist_sq)
        push = strength * (1.0 - dist / avoid_radius) / dist
        force_x += offset_x * push
        force_y += offset_y * push
    return Vector2(force_x, force_y)


def pointer_force(agent: Agent, pointer: PointerState) -> Vector2:
    if not pointer.active or pointer.radius <= 0.0:
        return Vector2()
    offset_x = pointer.position.x - agent.position.x
    offset_y = pointer.position.y - agent.position.y
    dist_sq = offset_x * offset_x + offset_y * offset_y
    if dist_sq >= pointer.radius * pointer.radius:
        return Vector2()
    dist = math.sqrt(dist_sq)
    if dist < _POINTER_EPSILON:
        return Vector2()
    pull = pointer.strength * (1.0 - dist / pointer.radius) / dist
    if pointer.mode is PointerMode.REPEL:
        pull = -pull
    return Vector2(offset_x * pull, offset_y * pull)
