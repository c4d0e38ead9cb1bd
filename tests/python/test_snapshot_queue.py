import asyncio
import json

from boidlab.app.server import SimulationController
from boidlab.sim.core.config import AppConfig, SimulationConfig


def _controller() -> SimulationController:
    return SimulationController(AppConfig(simulation=SimulationConfig(seed=5, agent_count=10)))


def test_snapshot_queue_ack_cleanup() -> None:
    controller = _controller()

    async def exercise() -> None:
        controller.world.tick()
        await controller._broadcast_snapshot()
        controller.world.tick()
        await controller._broadcast_snapshot()
        async with controller._queue_lock:
            queued_ticks = [item.tick for item in controller._snapshot_queue]
        assert queued_ticks == [1, 2]
        await controller.acknowledge(1)
        async with controller._queue_lock:
            remaining_ticks = [item.tick for item in controller._snapshot_queue]
        assert remaining_ticks == [2]

    asyncio.run(exercise())


def test_serialized_snapshot_is_json() -> None:
    controller = _controller()
    controller.world.set_trails_enabled(True)
    controller.world.add_obstacle(10.0, 10.0, 5.0)
    controller.world.tick()

    queued = controller._serialize_snapshot()
    message = json.loads(queued.payload)

    assert message["type"] == "snapshot"
    assert message["tick"] == 1
    payload = message["payload"]
    assert len(payload["agents"]) == 10
    assert payload["stats"]["agent_count"] == 10
    assert payload["state"]["obstacles"] == [{"x": 10.0, "y": 10.0, "radius": 5.0}]
    assert payload["fields"]["density"]["resolution"] == 30
    assert set(payload["fields"]["trails"]) == {str(i) for i in range(10)}


def test_reset_clears_queue() -> None:
    controller = _controller()

    async def exercise() -> None:
        controller.world.tick()
        await controller._broadcast_snapshot()
        await controller.reset()
        async with controller._queue_lock:
            ticks = [item.tick for item in controller._snapshot_queue]
        assert ticks == [0]

    asyncio.run(exercise())


def test_snapshot_queue_is_bounded_without_acks() -> None:
    controller = SimulationController(
        AppConfig(simulation=SimulationConfig(seed=5, agent_count=3), snapshot_queue_limit=4)
    )

    async def exercise() -> None:
        for _ in range(10):
            controller.world.tick()
            await controller._broadcast_snapshot()
        async with controller._queue_lock:
            ticks = [item.tick for item in controller._snapshot_queue]
        assert ticks == [7, 8, 9, 10]

    asyncio.run(exercise())
