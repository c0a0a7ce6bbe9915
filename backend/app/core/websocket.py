"""
WebSocket endpoint + Redis PubSub bridge for live schedule updates.

WS /ws/schedule        — push the dashboard to connected clients
publish_schedule       — store listener: every reload → Redis 'schedule:updates'
redis_to_ws_bridge     — background task: Redis PubSub → ConnectionManager.broadcast
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from redis.asyncio import Redis

from schedule.projector import build_dashboard
from schedule.store import StoreState

logger = logging.getLogger("schedule.websocket")

CHANNEL_SCHEDULE = "schedule:updates"

router = APIRouter()


# ---------------------------------------------------------------------------
# Connection Manager
# ---------------------------------------------------------------------------

class ConnectionManager:
    """Manages active WebSocket connections and broadcasts messages."""

    def __init__(self) -> None:
        self.connections: list[WebSocket] = []

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.connections.append(ws)
        logger.info("WS client connected (%d total)", len(self.connections))

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self.connections:
            self.connections.remove(ws)
        logger.info("WS client disconnected (%d remaining)", len(self.connections))

    async def broadcast(self, message: str) -> None:
        dead: list[WebSocket] = []
        for ws in self.connections:
            try:
                await ws.send_text(message)
            except Exception:
                dead.append(ws)
        for ws in dead:
            if ws in self.connections:
                self.connections.remove(ws)
        if dead:
            logger.debug("Removed %d dead WS connections", len(dead))


manager = ConnectionManager()


def snapshot_message(state: StoreState) -> dict:
    dashboard = build_dashboard(state.events)
    return {
        "type": "snapshot",
        "data": dashboard.model_dump(mode="json"),
        "error": state.error_message or None,
    }


def make_publisher(redis: Redis):
    """Store listener that publishes each reloaded dashboard to Redis."""

    async def publish_schedule(state: StoreState) -> None:
        await redis.publish(CHANNEL_SCHEDULE, json.dumps(snapshot_message(state)))

    return publish_schedule


# ---------------------------------------------------------------------------
# WebSocket Endpoint
# ---------------------------------------------------------------------------

@router.websocket("/ws/schedule")
async def ws_schedule(websocket: WebSocket) -> None:
    await manager.connect(websocket)
    try:
        store = websocket.app.state.event_store
        await websocket.send_json(snapshot_message(store.state))

        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        manager.disconnect(websocket)
    except Exception as exc:
        logger.debug("WS error: %s", exc)
        manager.disconnect(websocket)


# ---------------------------------------------------------------------------
# Redis → WebSocket Bridge (background task)
# ---------------------------------------------------------------------------

async def redis_to_ws_bridge(redis: Redis) -> None:
    """Subscribe to Redis PubSub 'schedule:updates' and broadcast to all WS clients."""
    logger.info("Redis→WS bridge started, subscribing to %s", CHANNEL_SCHEDULE)
    pubsub = redis.pubsub()
    await pubsub.subscribe(CHANNEL_SCHEDULE)

    try:
        async for message in pubsub.listen():
            if message["type"] == "message":
                payload = message["data"]
                if isinstance(payload, bytes):
                    payload = payload.decode("utf-8")
                await manager.broadcast(payload)
    except Exception as exc:
        logger.error("Redis→WS bridge error: %s", exc)
    finally:
        await pubsub.unsubscribe(CHANNEL_SCHEDULE)
        await pubsub.close()
