from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

logger = logging.getLogger(__name__)

BOUNDARY_MODES = ("wrap", "bounce")
UPDATE_MODES = ("sequential", "simultaneous")
NEIGHBOR_INDEXES = ("brute_force", "grid")

# Names used by the browser controls for the same runtime parameters.
PARAM_ALIASES = {
    "neighborRadius": "neighbor_radius",
    "maxSpeed": "max_speed",
    "maxForce": "max_force",
}


@dataclass
class FlockingParams:
    separation: float = 1.5
    alignment: float = 1.0
    cohesion: float = 1.0
    neighbor_radius: float = 50.0
    max_speed: float = 4.0
    max_force: float = 0.1

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def set(self, name: str, value: Any) -> bool:
        """Assign ``value`` to a known parameter; anything else is left untouched."""
        name = PARAM_ALIASES.get(name, name)
        if name not in self.field_names():
            return False
        number = coerce_parameter(value)
        if number is None:
            return False
        setattr(self, name, number)
        return True


def coerce_parameter(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0.0:
        return None
    return number


@dataclass
class SimulationConfig:
    world_width: float = 1200.0
    world_height: float = 700.0
    agent_count: int = 150
    initial_speed_min: float = 2.0
    initial_speed_max: float = 4.0
    seed: Optional[int] = None
    boundary_mode: str = "wrap"
    update_mode: str = "sequential"
    neighbor_index: str = "brute_force"
    obstacle_buffer: float = 40.0
    obstacle_strength: float = 0.6
    obstacle_radius: float = 30.0
    obstacle_pick_radius: float = 50.0
    pointer_radius: float = 150.0
    pointer_strength: float = 0.4
    density_resolution: int = 30
    density_decay: float = 0.95
    density_floor: float = 1.0
    density_interval: int = 2
    density_enabled: bool = True
    stats_interval: int = 10
    trail_length: int = 20
    trails_enabled: bool = False
    config_version: str = "v1"
    flocking: FlockingParams = field(default_factory=FlockingParams)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 2
    tick_interval: float = 1.0 / 60.0
    # Oldest unacknowledged snapshots are dropped past this many.
    snapshot_queue_limit: int = 120


def _known(raw: dict, names: tuple[str, ...], section: str) -> dict:
    accepted = {}
    for key, value in raw.items():
        if key in names:
            accepted[key] = value
        else:
            logger.warning("Ignoring unknown %s config key %r", section, key)
    return accepted


def _positive(value: Any) -> Optional[float]:
    number = coerce_parameter(value)
    return number if number else None


def _fraction(value: Any) -> Optional[float]:
    number = coerce_parameter(value)
    return number if number is not None and number < 1.0 else None


def _count(minimum: int) -> Callable[[Any], Optional[int]]:
    def check(value: Any) -> Optional[int]:
        number = coerce_parameter(value)
        if number is None or number != int(number) or number < minimum:
            return None
        return int(number)

    return check


def _choice(options: tuple[str, ...]) -> Callable[[Any], Optional[str]]:
    def check(value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        value = value.strip().lower()
        return value if value in options else None

    return check


def _flag(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _seed(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


# Every SimulationConfig field except ``flocking``; a check returns None to reject.
_SIMULATION_CHECKS: dict[str, Callable[[Any], Any]] = {
    "world_width": _positive,
    "world_height": _positive,
    "agent_count": _count(0),
    "initial_speed_min": coerce_parameter,
    "initial_speed_max": coerce_parameter,
    "seed": _seed,
    "boundary_mode": _choice(BOUNDARY_MODES),
    "update_mode": _choice(UPDATE_MODES),
    "neighbor_index": _choice(NEIGHBOR_INDEXES),
    "obstacle_buffer": coerce_parameter,
    "obstacle_strength": coerce_parameter,
    "obstacle_radius": _positive,
    "obstacle_pick_radius": coerce_parameter,
    "pointer_radius": coerce_parameter,
    "pointer_strength": coerce_parameter,
    "density_resolution": _count(1),
    "density_decay": _fraction,
    "density_floor": _positive,
    "density_interval": _count(1),
    "density_enabled": _flag,
    "stats_interval": _count(1),
    "trail_length": _count(1),
    "trails_enabled": _flag,
    "config_version": _text,
}


def _validated(values: dict, checks: dict[str, Callable[[Any], Any]], section: str) -> dict:
    accepted = {}
    for key, value in values.items():
        if key == "seed" and value is None:
            accepted[key] = None
            continue
        parsed = checks[key](value)
        if parsed is None:
            logger.warning("Ignoring invalid %s config value %s=%r", section, key, value)
            continue
        accepted[key] = parsed
    return accepted


def load_config(raw: dict) -> SimulationConfig:
    flocking_raw = dict(raw.get("flocking") or {})
    for alias, name in PARAM_ALIASES.items():
        if alias in flocking_raw:
            flocking_raw[name] = flocking_raw.pop(alias)
    flocking_names = FlockingParams.field_names()
    flocking_values = _validated(
        _known(flocking_raw, flocking_names, "flocking"),
        {name: coerce_parameter for name in flocking_names},
        "flocking",
    )
    sim_names = tuple(_SIMULATION_CHECKS)
    sim_values = _validated(
        _known({k: v for k, v in raw.items() if k != "flocking"}, sim_names, "simulation"),
        _SIMULATION_CHECKS,
        "simulation",
    )
    return SimulationConfig(flocking=FlockingParams(**flocking_values), **sim_values)
