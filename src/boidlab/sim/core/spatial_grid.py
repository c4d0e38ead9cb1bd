from __future__ import annotations

import math
from typing import Dict, Iterable, List, Tuple

from pygame.math import Vector2

from .agent import Agent

NeighborList = List[Tuple[Agent, float]]


def find_neighbors(agent: Agent, agents: Iterable[Agent], radius: float, out: NeighborList | None = None) -> NeighborList:
    """Brute-force scan: every other agent strictly inside ``radius``, tagged with its squared distance."""
    if out is None:
        out = []
    else:
        out.clear()
    radius_sq = radius * radius
    pos_x = agent.position.x
    pos_y = agent.position.y
    append = out.append
    for other in agents:
        if other is agent:
            continue
        offset_x = other.position.x - pos_x
        offset_y = other.position.y - pos_y
        dist_sq = offset_x * offset_x + offset_y * offset_y
        if dist_sq < radius_sq:
            append((other, dist_sq))
    return out


class SpatialGrid:
    """Uniform bucket grid returning the same neighbor set as :func:`find_neighbors`."""

    def __init__(self, cell_size: float) -> None:
        self._cell_size = max(1e-6, float(cell_size))
        self._cells: Dict[Tuple[int, int], List[Agent]] = {}
        self._agent_keys: Dict[int, Tuple[int, int]] = {}

    @property
    def cell_size(self) -> float:
        return self._cell_size

    def clear(self) -> None:
        self._cells.clear()
        self._agent_keys.clear()

    def rebuild(self, agents: Iterable[Agent], cell_size: float | None = None) -> None:
        if cell_size is not None:
            self._cell_size = max(1e-6, float(cell_size))
        self.clear()
        for agent in agents:
            self.insert(agent)

    def insert(self, agent: Agent) -> None:
        key = self._cell_key(agent.position)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
        bucket.append(agent)
        self._agent_keys[agent.id] = key

    def relocate(self, agent: Agent) -> None:
        """Move ``agent`` to the bucket matching its current position."""
        old_key = self._agent_keys.get(agent.id)
        new_key = self._cell_key(agent.position)
        if old_key == new_key:
            return
        if old_key is not None:
            bucket = self._cells.get(old_key)
            if bucket:
                bucket.remove(agent)
                if not bucket:
                    del self._cells[old_key]
        bucket = self._cells.get(new_key)
        if bucket is None:
            bucket = []
            self._cells[new_key] = bucket
        bucket.append(agent)
        self._agent_keys[agent.id] = new_key

    def collect_neighbors(self, agent: Agent, radius: float, out: NeighborList | None = None) -> NeighborList:
        if out is None:
            out = []
        else:
            out.clear()
        base_key = self._cell_key(agent.position)
        cell_range = int(math.ceil(radius / self._cell_size))
        radius_sq = radius * radius
        pos_x = agent.position.x
        pos_y = agent.position.y
        cells = self._cells
        append = out.append

        for dx in range(-cell_range, cell_range + 1):
            for dy in range(-cell_range, cell_range + 1):
                bucket = cells.get((base_key[0] + dx, base_key[1] + dy))
                if not bucket:
                    continue
                for other in bucket:
                    if other is agent:
                        continue
                    offset_x = other.position.x - pos_x
                    offset_y = other.position.y - pos_y
                    dist_sq = offset_x * offset_x + offset_y * offset_y
                    if dist_sq < radius_sq:
                        append((other, dist_sq))
        return out

    def _cell_key(self, position: Vector2) -> Tuple[int, int]:
        return (int(position.x // self._cell_size), int(position.y // self._cell_size))
