from __future__ import annotations

from ..types.metrics import FlockStats, TickMetrics


def create_metrics(
    tick: int,
    neighbor_checks: int,
    duration_ms: float,
    density_max: float,
    sums: tuple[int, float, float, float],
) -> TickMetrics:
    agents, speed_sum, max_speed, neighbor_sum = sums
    return TickMetrics(
        tick=tick,
        agents=agents,
        average_speed=0.0 if agents == 0 else speed_sum / agents,
        max_speed=max_speed,
        average_neighbors=0.0 if agents == 0 else neighbor_sum / agents,
        neighbor_checks=neighbor_checks,
        density_max=density_max,
        tick_duration_ms=duration_ms,
    )


def sample_stats(metrics: TickMetrics) -> FlockStats:
    return FlockStats(
        agent_count=metrics.agents,
        average_speed=metrics.average_speed,
        average_neighbors=metrics.average_neighbors,
    )
