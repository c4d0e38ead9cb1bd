from __future__ import annotations

import logging
import math
from dataclasses import asdict, replace
from time import perf_counter
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pygame.math import Vector2

from .agent import Agent
from .config import UPDATE_MODES, FlockingParams, SimulationConfig, coerce_parameter
from .rng import DeterministicRng
from .spatial_grid import SpatialGrid, find_neighbors
from ..systems import forces, metrics as metrics_system, steering
from ..systems.density import DensityField
from ..systems.motion import apply_boundary, integrate
from ..systems.trails import TrailBuffer
from ..types.metrics import FlockStats, TickMetrics
from ..types.snapshot import Snapshot, SnapshotFields, SnapshotState, SnapshotWorld
from ..types.world_state import BoundaryMode, Obstacle, PointerMode, PointerState, next_pointer_mode

logger = logging.getLogger(__name__)


def _parse_enum(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return None
    return None


class World:
    """Owns the flock and everything it reacts to; advanced one fixed step per :meth:`tick`."""

    def __init__(self, config: SimulationConfig):
        self._config = config
        self._params: FlockingParams = replace(config.flocking)
        self._rng = DeterministicRng(config.seed)
        self._width = float(config.world_width)
        self._height = float(config.world_height)
        self._boundary_mode = _parse_enum(BoundaryMode, config.boundary_mode) or BoundaryMode.WRAP
        self._update_mode = config.update_mode if config.update_mode in UPDATE_MODES else "sequential"
        self._use_grid = config.neighbor_index == "grid"
        self._grid = SpatialGrid(max(1.0, self._params.neighbor_radius))
        self._density = DensityField(
            self._width,
            self._height,
            resolution=config.density_resolution,
            decay=config.density_decay,
            floor=config.density_floor,
        )
        self._density_interval = max(1, int(config.density_interval))
        self._density_enabled = bool(config.density_enabled)
        self._stats_interval = max(1, int(config.stats_interval))
        self._trails = TrailBuffer(config.trail_length)
        self._trails_enabled = bool(config.trails_enabled)
        self._pointer = PointerState(radius=config.pointer_radius, strength=config.pointer_strength)
        self._obstacles: List[Obstacle] = []
        self._agents: List[Agent] = []
        self._paused = False
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self._stats = FlockStats()
        self._bootstrap_population()

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def params(self) -> FlockingParams:
        return self._params

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def boundary_mode(self) -> BoundaryMode:
        return self._boundary_mode

    @property
    def update_mode(self) -> str:
        return self._update_mode

    @property
    def pointer(self) -> PointerState:
        return self._pointer

    @property
    def obstacles(self) -> Tuple[Obstacle, ...]:
        return tuple(self._obstacles)

    @property
    def density(self) -> DensityField:
        return self._density

    @property
    def density_enabled(self) -> bool:
        return self._density_enabled

    @property
    def trails(self) -> TrailBuffer:
        return self._trails

    @property
    def trails_enabled(self) -> bool:
        return self._trails_enabled

    @property
    def stats(self) -> FlockStats:
        return self._stats

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    # -- configuration -------------------------------------------------

    def configure(self, name: str, value: Any) -> bool:
        applied = self._params.set(name, value)
        if not applied:
            logger.debug("Ignored configuration %r=%r", name, value)
        return applied

    def apply_preset(self, values: Mapping[str, Any]) -> List[str]:
        return [name for name, value in values.items() if self.configure(name, value)]

    def set_boundary_mode(self, mode: BoundaryMode | str) -> BoundaryMode:
        parsed = _parse_enum(BoundaryMode, mode)
        if parsed is None:
            logger.debug("Ignored boundary mode %r", mode)
        else:
            self._boundary_mode = parsed
        return self._boundary_mode

    def toggle_boundary_mode(self) -> BoundaryMode:
        if self._boundary_mode is BoundaryMode.WRAP:
            self._boundary_mode = BoundaryMode.BOUNCE
        else:
            self._boundary_mode = BoundaryMode.WRAP
        return self._boundary_mode

    def toggle_pause(self) -> bool:
        self._paused = not self._paused
        return self._paused

    def set_pointer_mode(self, mode: PointerMode | str) -> PointerMode:
        parsed = _parse_enum(PointerMode, mode)
        if parsed is None:
            logger.debug("Ignored pointer mode %r", mode)
        else:
            self._pointer.mode = parsed
        return self._pointer.mode

    def cycle_pointer_mode(self) -> PointerMode:
        self._pointer.mode = next_pointer_mode(self._pointer.mode)
        return self._pointer.mode

    def set_pointer(self, x: float, y: float, on_world: bool = True) -> PointerState:
        if math.isfinite(x) and math.isfinite(y):
            self._pointer.position.update(x, y)
            self._pointer.on_world = bool(on_world)
        return self._pointer

    def clear_pointer(self) -> PointerState:
        self._pointer.on_world = False
        return self._pointer

    def set_density_enabled(self, enabled: bool) -> bool:
        self._density_enabled = bool(enabled)
        return self._density_enabled

    def set_trails_enabled(self, enabled: bool) -> bool:
        self._trails_enabled = bool(enabled)
        if not self._trails_enabled:
            self._trails.clear()
        return self._trails_enabled

    # -- obstacles -----------------------------------------------------

    def add_obstacle(self, x: float, y: float, radius: Optional[float] = None) -> Obstacle | None:
        size = coerce_parameter(self._config.obstacle_radius if radius is None else radius)
        if size is None or size <= 0.0 or not (math.isfinite(x) and math.isfinite(y)):
            logger.debug("Ignored obstacle at (%r, %r) radius %r", x, y, radius)
            return None
        obstacle = Obstacle(position=Vector2(x, y), radius=size)
        self._obstacles.append(obstacle)
        return obstacle

    def remove_nearest_obstacle(self, x: float, y: float) -> Obstacle | None:
        if not self._obstacles or not (math.isfinite(x) and math.isfinite(y)):
            return None
        target = Vector2(x, y)
        nearest = min(self._obstacles, key=lambda obstacle: obstacle.position.distance_squared_to(target))
        pick_radius = self._config.obstacle_pick_radius
        if nearest.position.distance_squared_to(target) > pick_radius * pick_radius:
            logger.debug("No obstacle within %.1f of (%.1f, %.1f)", pick_radius, x, y)
            return None
        self._obstacles.remove(nearest)
        return nearest

    def clear_obstacles(self) -> int:
        removed = len(self._obstacles)
        self._obstacles.clear()
        return removed

    # -- simulation ----------------------------------------------------

    def reset(self) -> None:
        self._rng.reset()
        self._agents.clear()
        self._grid.clear()
        self._trails.clear()
        self._density.reset()
        self._tick = 0
        self._metrics = None
        self._bootstrap_population()

    def tick(self) -> bool:
        if self._paused:
            return False
        start = perf_counter()
        params = self._params
        if self._use_grid:
            self._grid.rebuild(self._agents, cell_size=max(1.0, params.neighbor_radius))

        if self._update_mode == "simultaneous":
            neighbor_checks = self._step_simultaneous(params)
        else:
            neighbor_checks = self._step_sequential(params)

        index = self._tick
        if self._trails_enabled:
            self._trails.push(self._agents)
        if self._density_enabled and index % self._density_interval == 0:
            self._density.update(self._agents)

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            index, neighbor_checks, elapsed_ms, self._density.max_value, self._population_sums()
        )
        self._metrics = metrics
        if index % self._stats_interval == 0:
            self._stats = metrics_system.sample_stats(metrics)
        self._tick += 1
        return True

    def snapshot(self) -> Snapshot:
        state = SnapshotState(
            paused=self._paused,
            boundary_mode=self._boundary_mode.value,
            update_mode=self._update_mode,
            pointer=self._pointer.to_dict(),
            obstacles=[obstacle.to_dict() for obstacle in self._obstacles],
            params=asdict(self._params),
        )
        fields = SnapshotFields(
            density=self._density.export() if self._density_enabled else None,
            trails=self._trails.export() if self._trails_enabled else None,
        )
        return Snapshot(
            tick=self._tick,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            stats=replace(self._stats),
            metrics=self._metrics,
            world=SnapshotWorld(width=self._width, height=self._height),
            state=state,
            fields=fields,
        )

    def _step_sequential(self, params: FlockingParams) -> int:
        # Agents move in place, so later agents see earlier agents' new positions this tick.
        neighbor_checks = 0
        mode = self._boundary_mode
        for agent in self._agents:
            self._collect_neighbors(agent, params.neighbor_radius)
            neighbor_checks += len(agent.neighbors)
            self._accumulate_forces(agent, params)
            integrate(agent, params.max_speed)
            apply_boundary(agent, mode, self._width, self._height)
            if self._use_grid:
                self._grid.relocate(agent)
        return neighbor_checks

    def _step_simultaneous(self, params: FlockingParams) -> int:
        neighbor_checks = 0
        for agent in self._agents:
            self._collect_neighbors(agent, params.neighbor_radius)
            neighbor_checks += len(agent.neighbors)
            self._accumulate_forces(agent, params)
        mode = self._boundary_mode
        for agent in self._agents:
            integrate(agent, params.max_speed)
            apply_boundary(agent, mode, self._width, self._height)
        return neighbor_checks

    def _collect_neighbors(self, agent: Agent, radius: float) -> None:
        if self._use_grid:
            self._grid.collect_neighbors(agent, radius, agent.neighbors)
        else:
            find_neighbors(agent, self._agents, radius, agent.neighbors)

    def _accumulate_forces(self, agent: Agent, params: FlockingParams) -> None:
        agent.apply_force(steering.separation(agent, params.separation))
        agent.apply_force(steering.alignment(agent, params.alignment, params.max_speed, params.max_force))
        agent.apply_force(steering.cohesion(agent, params.cohesion, params.max_speed, params.max_force))
        if self._obstacles:
            agent.apply_force(
                forces.obstacle_avoidance(
                    agent, self._obstacles, self._config.obstacle_buffer, self._config.obstacle_strength
                )
            )
        if self._pointer.active:
            agent.apply_force(forces.pointer_force(agent, self._pointer))

    def _bootstrap_population(self) -> None:
        config = self._config
        for agent_id in range(max(0, int(config.agent_count))):
            position = Vector2(
                self._rng.next_range(0.0, self._width),
                self._rng.next_range(0.0, self._height),
            )
            speed = self._rng.next_range(config.initial_speed_min, config.initial_speed_max)
            velocity = self._rng.next_unit_circle() * speed
            self._agents.append(Agent(id=agent_id, position=position, velocity=velocity))
        self._stats = self._stats_from_state()
        logger.info("Spawned %d agents in %.0fx%.0f world", len(self._agents), self._width, self._height)

    def _population_sums(self) -> tuple[int, float, float, float]:
        speed_sum = 0.0
        max_speed = 0.0
        neighbor_sum = 0.0
        for agent in self._agents:
            speed = agent.speed()
            speed_sum += speed
            if speed > max_speed:
                max_speed = speed
            neighbor_sum += len(agent.neighbors)
        return len(self._agents), speed_sum, max_speed, neighbor_sum

    def _stats_from_state(self) -> FlockStats:
        agents, speed_sum, _, neighbor_sum = self._population_sums()
        if agents == 0:
            return FlockStats()
        return FlockStats(
            agent_count=agents,
            average_speed=speed_sum / agents,
            average_neighbors=neighbor_sum / agents,
        )

    @staticmethod
    def _agent_snapshot(agent: Agent) -> Dict[str, float]:
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "speed": agent.speed(),
            "heading": agent.heading(),
            "neighbors": len(agent.neighbors),
        }
