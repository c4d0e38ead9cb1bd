import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from pygame.math import Vector2  # noqa: E402

from boidlab.sim.core.agent import Agent  # noqa: E402
from boidlab.sim.core.config import SimulationConfig  # noqa: E402


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-config-tests",
        action="store_true",
        default=False,
        help="run tests that pin default tuning values",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "config_change: marks tests that should only run when default tuning values change",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-config-tests"):
        return

    skip_marker = pytest.mark.skip(
        reason="Run only when default tuning is modified (use --run-config-tests)",
    )

    for item in items:
        if "config_change" in item.keywords:
            item.add_marker(skip_marker)


@pytest.fixture
def make_agent():
    def _make(agent_id: int, x: float = 0.0, y: float = 0.0, vx: float = 0.0, vy: float = 0.0) -> Agent:
        return Agent(id=agent_id, position=Vector2(x, y), velocity=Vector2(vx, vy))

    return _make


@pytest.fixture
def small_config() -> SimulationConfig:
    return SimulationConfig(seed=1234, agent_count=40, world_width=300.0, world_height=200.0)
