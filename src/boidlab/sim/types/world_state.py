from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pygame.math import Vector2


class BoundaryMode(str, Enum):
    WRAP = "wrap"
    BOUNCE = "bounce"


class PointerMode(str, Enum):
    OFF = "off"
    ATTRACT = "attract"
    REPEL = "repel"


_POINTER_CYCLE = (PointerMode.OFF, PointerMode.ATTRACT, PointerMode.REPEL)


def next_pointer_mode(mode: PointerMode) -> PointerMode:
    index = _POINTER_CYCLE.index(mode)
    return _POINTER_CYCLE[(index + 1) % len(_POINTER_CYCLE)]


@dataclass(slots=True)
class Obstacle:
    position: Vector2
    radius: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.position.x, "y": self.position.y, "radius": self.radius}


@dataclass(slots=True)
class PointerState:
    position: Vector2 = field(default_factory=Vector2)
    on_world: bool = False
    mode: PointerMode = PointerMode.OFF
    radius: float = 150.0
    strength: float = 0.4

    @property
    def active(self) -> bool:
        return self.mode is not PointerMode.OFF and self.on_world

    def to_dict(self) -> dict[str, object]:
        return {
            "x": self.position.x,
            "y": self.position.y,
            "on_world": self.on_world,
            "mode": self.mode.value,
            "radius": self.radius,
        }
