from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .metrics import FlockStats, TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    agents: List[Dict[str, Any]]
    stats: FlockStats
    metrics: Optional[TickMetrics]
    world: "SnapshotWorld"
    state: "SnapshotState"
    fields: "SnapshotFields"


@dataclass(slots=True)
class SnapshotWorld:
    width: float
    height: float


@dataclass(slots=True)
class SnapshotState:
    paused: bool
    boundary_mode: str
    update_mode: str
    pointer: Dict[str, Any]
    obstacles: List[Dict[str, float]]
    params: Dict[str, float]


@dataclass(slots=True)
class SnapshotFields:
    density: Optional[Dict[str, Any]]
    trails: Optional[Dict[int, List[tuple[float, float]]]]
