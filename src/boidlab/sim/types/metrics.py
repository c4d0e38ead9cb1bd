from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    agents: int
    average_speed: float
    max_speed: float
    average_neighbors: float
    neighbor_checks: int
    density_max: float
    tick_duration_ms: float = 0.0


@dataclass(slots=True)
class FlockStats:
    agent_count: int = 0
    average_speed: float = 0.0
    average_neighbors: float = 0.0
