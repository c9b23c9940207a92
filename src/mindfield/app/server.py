from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..config import SimulationConfig
from ..sim.core.simulation import Simulation

logger = logging.getLogger("mindfield.server")

# Oldest unacknowledged snapshots are dropped past this length.
MAX_QUEUED_SNAPSHOTS = 64


@dataclass(frozen=True)
class QueuedSnapshot:
    timestamp: int
    payload: str


class SimulationController:
    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.simulation = Simulation(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=MAX_QUEUED_SNAPSHOTS)
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._broadcast_task: asyncio.Task | None = None

    @property
    def timestamp(self) -> int:
        return self.simulation.timestamp

    async def start(self) -> None:
        if self._broadcast_task is None:
            self._broadcast_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.simulation.reset()
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def step_once(self) -> Dict[str, Any]:
        async with self._lock:
            metrics = self.simulation.step()
        await self._broadcast_snapshot()
        return metrics.to_dict()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.dynamics.dt / self.speed_multiplier)
            if not self.running:
                continue
            async with self._lock:
                self.simulation.step()
            if self.timestamp % self.broadcast_interval == 0:
                await self._broadcast_snapshot()

    async def acknowledge(self, timestamp: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].timestamp <= timestamp:
                self._snapshot_queue.popleft()

    def snapshot_payload(self) -> Dict[str, Any]:
        snapshot = self.simulation.snapshot()
        return {
            "timestamp": snapshot.timestamp,
            "metrics": asdict(snapshot.metrics),
            "entities": snapshot.entities,
            "world": asdict(snapshot.world),
            "metadata": asdict(snapshot.metadata),
            "attractions": [list(pair) for pair in snapshot.attractions],
        }

    def _serialize_snapshot(self) -> QueuedSnapshot:
        payload = {"type": "snapshot", "payload": self.snapshot_payload()}
        return QueuedSnapshot(timestamp=self.timestamp, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.timestamp > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.timestamp
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
            logger.info("Dropping disconnected client")
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


def create_app(config: Optional[SimulationConfig] = None) -> FastAPI:
    app = FastAPI(title="Mindfield Simulation Service")
    controller = SimulationController(config if config is not None else SimulationConfig())
    app.state.controller = controller

    @app.on_event("startup")
    async def _startup() -> None:
        await controller.start()

    @app.get("/api/status")
    async def status() -> JSONResponse:
        snapshot = controller.simulation.snapshot()
        return JSONResponse(
            {
                "running": controller.running,
                "timestamp": controller.timestamp,
                "population": len(controller.simulation.entities),
                "metrics": asdict(snapshot.metrics),
            }
        )

    @app.get("/api/snapshot")
    async def snapshot() -> JSONResponse:
        async with controller._lock:
            payload = controller.snapshot_payload()
        return JSONResponse(payload)

    @app.get("/api/config")
    async def current_config() -> JSONResponse:
        return JSONResponse(controller.config.to_dict())

    @app.get("/api/evaluation")
    async def evaluation() -> JSONResponse:
        return JSONResponse(controller.simulation.evaluate().to_dict())

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
        return JSONResponse({"running": controller.running, "timestamp": controller.timestamp})

    @app.post("/api/control/step")
    async def step_simulation() -> JSONResponse:
        metrics = await controller.step_once()
        return JSONResponse({"timestamp": controller.timestamp, "metrics": metrics})

    @app.post("/api/control/speed")
    async def set_speed(payload: dict) -> JSONResponse:
        try:
            speed = float(payload.get("multiplier", 1.0))
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail="multiplier must be a number") from exc
        controller.speed_multiplier = max(0.1, min(5.0, speed))
        return JSONResponse({"multiplier": controller.speed_multiplier})

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
                if payload.get("type") == "ack":
                    timestamp = payload.get("timestamp")
                    if isinstance(timestamp, int):
                        await controller.acknowledge(timestamp)
        except WebSocketDisconnect:
            controller.clients.discard(websocket)
            controller._client_last_sent.pop(websocket, None)

    return app


app = create_app()
controller: SimulationController = app.state.controller


__all__ = ["app", "controller", "create_app", "SimulationController"]
