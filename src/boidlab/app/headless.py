from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import UPDATE_MODES, SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "agents",
    "avg_speed",
    "max_speed",
    "avg_neighbors",
    "neighbor_checks",
    "density_max",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.agents,
        f"{metrics.average_speed:.4f}",
        f"{metrics.max_speed:.4f}",
        f"{metrics.average_neighbors:.4f}",
        metrics.neighbor_checks,
        f"{metrics.density_max:.4f}",
        f"{tick_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p95": _percentile(sorted_values, 0.95),
        "p99": _percentile(sorted_values, 0.99),
    }


def _correlation(xs: list[float], ys: list[float]) -> float:
    if len(xs) != len(ys) or len(xs) < 2:
        return 0.0
    mean_x = sum(xs) / len(xs)
    mean_y = sum(ys) / len(ys)
    num = 0.0
    denom_x = 0.0
    denom_y = 0.0
    for x, y in zip(xs, ys):
        dx = x - mean_x
        dy = y - mean_y
        num += dx * dy
        denom_x += dx * dx
        denom_y += dy * dy
    denom = math.sqrt(denom_x * denom_y)
    if denom == 0.0:
        return 0.0
    return float(num / denom)


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
    config_path: Optional[Path] = None,
    update_mode: Optional[str] = None,
) -> World:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    if update_mode is not None:
        if update_mode not in UPDATE_MODES:
            raise ValueError(f"Unknown update mode: {update_mode}")
        config.update_mode = update_mode
    world = World(config)
    logger.info("Running %d ticks (seed=%s, update_mode=%s)", steps, config.seed, world.update_mode)

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    neighbor_series: list[float] = []
    neighbor_checks_series: list[float] = []
    max_tick_ms = (-1.0, -1)
    max_neighbor_checks = (-1, -1)

    csv_file = Path(log_path).open("w", newline="") if log_path else None
    try:
        writer = csv.writer(csv_file) if csv_file else None
        if writer:
            writer.writerow(_HEADER)
        for _ in range(steps):
            world.tick()
            metrics = world.metrics
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
            if summary_path:
                tick_ms_series.append(tick_ms)
                speed_series.append(metrics.average_speed)
                neighbor_series.append(metrics.average_neighbors)
                neighbor_checks_series.append(float(metrics.neighbor_checks))
                if tick_ms > max_tick_ms[0]:
                    max_tick_ms = (tick_ms, metrics.tick)
                if metrics.neighbor_checks > max_neighbor_checks[0]:
                    max_neighbor_checks = (metrics.neighbor_checks, metrics.tick)
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "agents": len(world.agents),
            "update_mode": world.update_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "avg_speed": _summary_stats(speed_series),
            "avg_neighbors": _summary_stats(neighbor_series),
            "correlations": {
                "tick_ms_vs_neighbor_checks": _correlation(tick_ms_series, neighbor_checks_series),
            },
            "peaks": {
                "tick_ms": {"value": float(max_tick_ms[0]), "tick": max_tick_ms[1]},
                "neighbor_checks": {"value": max_neighbor_checks[0], "tick": max_neighbor_checks[1]},
            },
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "avg_speed": _summary_stats(speed_series[tail_slice]),
                "avg_neighbors": _summary_stats(neighbor_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless flocking simulation")
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-tick metrics")
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON file to write run summary stats.")
    parser.add_argument("--summary-window", type=int, default=500, help="Tail window size (ticks) for summary stats.")
    parser.add_argument("--update-mode", choices=list(UPDATE_MODES), default=None)
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config_path=args.config,
        update_mode=args.update_mode,
    )


if __name__ == "__main__":
    main()
