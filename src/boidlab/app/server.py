from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import Dict, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.config import AppConfig, coerce_parameter
from ..sim.core.world import World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    def __init__(self, config: AppConfig):
        self.config = config
        self.world = World(config.simulation)
        self.broadcast_interval = max(1, config.broadcast_interval)
        self.running = False
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=max(1, config.snapshot_queue_limit))
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._broadcast_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._broadcast_task is None:
            self._broadcast_task = asyncio.create_task(self._loop())
        self.running = True
        logger.info("Simulation loop started")

    async def stop(self) -> None:
        self.running = False
        logger.info("Simulation loop stopped")

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.tick_interval / self.speed_multiplier)
            if not self.running:
                continue
            async with self._lock:
                advanced = self.world.tick()
            if advanced and self.world.tick_count % self.broadcast_interval == 0:
                await self._broadcast_snapshot()

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot()
        payload = {"type": "snapshot", "tick": snapshot.tick, "payload": asdict(snapshot)}
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


def _number(payload: dict, key: str, default: float | None = None) -> float | None:
    value = payload.get(key, default)
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


app = FastAPI(title="Boid Lab Simulation")
controller = SimulationController(AppConfig())


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/api/status")
async def status() -> JSONResponse:
    world = controller.world
    return JSONResponse(
        {
            "running": controller.running,
            "paused": world.paused,
            "tick": world.tick_count,
            "agents": len(world.agents),
            "boundary_mode": world.boundary_mode.value,
            "pointer_mode": world.pointer.mode.value,
            "stats": asdict(world.stats),
            "params": asdict(world.params),
        }
    )


@app.get("/api/density")
async def density() -> JSONResponse:
    return JSONResponse(controller.world.density.export())


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.world.tick_count})


@app.post("/api/control/pause")
async def toggle_pause() -> JSONResponse:
    async with controller._lock:
        paused = controller.world.toggle_pause()
    return JSONResponse({"paused": paused})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = coerce_parameter(payload.get("multiplier", 1.0))
    if speed is not None:
        controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.post("/api/config")
async def configure(payload: dict) -> JSONResponse:
    name = payload.get("field")
    async with controller._lock:
        applied = isinstance(name, str) and controller.world.configure(name, payload.get("value"))
        params = asdict(controller.world.params)
    return JSONResponse({"applied": applied, "params": params})


@app.post("/api/boundary")
async def set_boundary(payload: dict) -> JSONResponse:
    async with controller._lock:
        if "mode" in payload:
            mode = controller.world.set_boundary_mode(payload["mode"])
        else:
            mode = controller.world.toggle_boundary_mode()
    return JSONResponse({"boundary_mode": mode.value})


@app.post("/api/pointer")
async def set_pointer(payload: dict) -> JSONResponse:
    world = controller.world
    async with controller._lock:
        if "mode" in payload:
            world.set_pointer_mode(payload["mode"])
        x = _number(payload, "x")
        y = _number(payload, "y")
        if payload.get("on_world", True) is False:
            world.clear_pointer()
        elif x is not None and y is not None:
            world.set_pointer(x, y)
        pointer = world.pointer.to_dict()
    return JSONResponse(pointer)


@app.post("/api/obstacles")
async def add_obstacle(payload: dict) -> JSONResponse:
    x = _number(payload, "x")
    y = _number(payload, "y")
    if x is None or y is None:
        return JSONResponse({"applied": False, "obstacle": None})
    async with controller._lock:
        obstacle = controller.world.add_obstacle(x, y, payload.get("radius"))
    return JSONResponse({"applied": obstacle is not None, "obstacle": obstacle.to_dict() if obstacle else None})


@app.post("/api/obstacles/remove")
async def remove_obstacle(payload: dict) -> JSONResponse:
    x = _number(payload, "x")
    y = _number(payload, "y")
    removed = None
    if x is not None and y is not None:
        async with controller._lock:
            removed = controller.world.remove_nearest_obstacle(x, y)
    return JSONResponse({"applied": removed is not None, "obstacle": removed.to_dict() if removed else None})


@app.delete("/api/obstacles")
async def clear_obstacles() -> JSONResponse:
    async with controller._lock:
        removed = controller.world.clear_obstacles()
    return JSONResponse({"removed": removed})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    await controller._send_pending_snapshots(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if isinstance(payload, dict) and payload.get("type") == "ack":
                tick = payload.get("tick")
                if isinstance(tick, int):
                    await controller.acknowledge(tick)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)


__all__ = ["app", "controller"]
