from __future__ import annotations

import math
from typing import Dict, Iterable, List, Tuple

import numpy as np

from ..core.agent import Agent

# Lower bound for the max floor; normalized lookups divide by it.
_MIN_FLOOR = 1e-6


class DensityField:
    """Decaying occupancy grid over the world, indexed ``[column, row]``.

    Each update multiplies every cell by ``decay``, adds one per agent to the
    cell under it and refreshes the running maximum, which never drops below
    ``floor`` so normalized values stay bounded.
    """

    def __init__(self, width: float, height: float, resolution: int = 30, decay: float = 0.95, floor: float = 1.0):
        self._resolution = max(1, int(resolution))
        self._width = float(width)
        self._height = float(height)
        self._cell_width = self._width / self._resolution
        self._cell_height = self._height / self._resolution
        self._decay = float(decay)
        self._floor = max(float(floor), _MIN_FLOOR)
        self._grid = np.zeros((self._resolution, self._resolution), dtype=np.float64)
        self._max_value = self._floor

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def max_value(self) -> float:
        return self._max_value

    @property
    def grid(self) -> np.ndarray:
        view = self._grid.view()
        view.flags.writeable = False
        return view

    def reset(self) -> None:
        self._grid.fill(0.0)
        self._max_value = self._floor

    def cell_for(self, x: float, y: float) -> Tuple[int, int] | None:
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        i = math.floor(x / self._cell_width)
        j = math.floor(y / self._cell_height)
        if 0 <= i < self._resolution and 0 <= j < self._resolution:
            return i, j
        return None

    def update(self, agents: Iterable[Agent]) -> None:
        self._grid *= self._decay
        for agent in agents:
            cell = self.cell_for(agent.position.x, agent.position.y)
            if cell is not None:
                self._grid[cell] += 1.0
        self._max_value = max(self._floor, float(self._grid.max()))

    def cell_value(self, i: int, j: int) -> float:
        if 0 <= i < self._resolution and 0 <= j < self._resolution:
            return float(self._grid[i, j])
        return 0.0

    def normalized_value(self, i: int, j: int) -> float:
        return self.cell_value(i, j) / self._max_value

    def export(self, min_value: float = 0.0) -> Dict[str, object]:
        cells: List[Dict[str, float]] = [
            {"i": int(i), "j": int(j), "value": float(self._grid[i, j])}
            for i, j in zip(*np.nonzero(self._grid > min_value))
        ]
        return {
            "cells": cells,
            "resolution": self._resolution,
            "cell_width": self._cell_width,
            "cell_height": self._cell_height,
            "max": self._max_value,
        }
