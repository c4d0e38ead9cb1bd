from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterable, List, Tuple

from ..core.agent import Agent


class TrailBuffer:
    """Last ``capacity`` positions per agent, oldest first. Rendering aid only."""

    def __init__(self, capacity: int = 20):
        self._capacity = max(1, int(capacity))
        self._trails: Dict[int, Deque[Tuple[float, float]]] = {}

    @property
    def capacity(self) -> int:
        return self._capacity

    def clear(self) -> None:
        self._trails.clear()

    def push(self, agents: Iterable[Agent]) -> None:
        for agent in agents:
            trail = self._trails.get(agent.id)
            if trail is None:
                trail = deque(maxlen=self._capacity)
                self._trails[agent.id] = trail
            trail.append((agent.position.x, agent.position.y))

    def get(self, agent_id: int) -> List[Tuple[float, float]]:
        return list(self._trails.get(agent_id, ()))

    def export(self) -> Dict[int, List[Tuple[float, float]]]:
        return {agent_id: list(trail) for agent_id, trail in self._trails.items()}
