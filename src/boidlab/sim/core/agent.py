from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from pygame.math import Vector2

from ..utils.math2d import _heading_from_velocity, magnitude


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector2
    velocity: Vector2
    acceleration: Vector2 = field(default_factory=Vector2)
    # (other agent, squared distance); rebuilt every tick, never owned.
    neighbors: List[Tuple["Agent", float]] = field(default_factory=list)

    @property
    def neighbor_count(self) -> int:
        return len(self.neighbors)

    def speed(self) -> float:
        return magnitude(self.velocity)

    def heading(self) -> float:
        return _heading_from_velocity(self.velocity)

    def apply_force(self, force: Vector2) -> None:
        self.acceleration.x += force.x
        self.acceleration.y += force.y
