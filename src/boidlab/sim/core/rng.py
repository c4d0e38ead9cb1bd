from __future__ import annotations

import math
import random
from typing import Optional

from pygame.math import Vector2


class DeterministicRng:
    """Seeded random source; with ``seed=None`` every reset draws fresh entropy."""

    def __init__(self, seed: Optional[int]):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return low + (high - low) * self._random.random()

    def next_unit_circle(self) -> Vector2:
        angle = self._random.random() * 2.0 * math.pi
        return Vector2(math.cos(angle), math.sin(angle))
