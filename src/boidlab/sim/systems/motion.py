from __future__ import annotations

from ..core.agent import Agent
from ..types.world_state import BoundaryMode
from ..utils.math2d import _clamp_length_xy


def integrate(agent: Agent, max_speed: float) -> None:
    """One fixed step: velocity += force, clamp to ``max_speed``, position += velocity, clear the force."""
    velocity = _clamp_length_xy(
        agent.velocity.x + agent.acceleration.x,
        agent.velocity.y + agent.acceleration.y,
        max_speed,
    )
    agent.velocity.update(velocity.x, velocity.y)
    agent.position.update(agent.position.x + velocity.x, agent.position.y + velocity.y)
    agent.acceleration.update(0.0, 0.0)


def apply_boundary(agent: Agent, mode: BoundaryMode, width: float, height: float) -> None:
    if mode is BoundaryMode.WRAP:
        x, y = _wrap(agent.position.x, width), _wrap(agent.position.y, height)
        agent.position.update(x, y)
        return

    x, vx = _bounce(agent.position.x, agent.velocity.x, width)
    y, vy = _bounce(agent.position.y, agent.velocity.y, height)
    agent.position.update(x, y)
    agent.velocity.update(vx, vy)


def _wrap(value: float, bound: float) -> float:
    # Teleport to the opposite edge, not modulo: -0.5 becomes exactly ``bound``.
    if value < 0.0:
        return bound
    if value > bound:
        return 0.0
    return value


def _bounce(value: float, velocity: float, bound: float) -> tuple[float, float]:
    if value <= 0.0 or value >= bound:
        return max(0.0, min(bound, value)), -velocity
    return value, velocity
