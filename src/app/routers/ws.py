"""WebSocket endpoints for real-time session updates."""

import asyncio
import json
import queue
import threading
from datetime import datetime, timezone
from typing import Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from cockpit.comms.event_bus import EventBus

router = APIRouter(prefix="/ws", tags=["websocket"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LiveClients:
    """Browsers attached to ``/ws/live``."""

    def __init__(self):
        self._sockets: Set[WebSocket] = set()

    def __len__(self) -> int:
        return len(self._sockets)

    async def attach(self, websocket: WebSocket):
        await websocket.accept()
        self._sockets.add(websocket)
        logger.info(f"Trainer client attached ({len(self)} live)")

    def detach(self, websocket: WebSocket):
        self._sockets.discard(websocket)
        logger.info(f"Trainer client detached ({len(self)} live)")

    async def send(self, websocket: WebSocket, message: dict) -> bool:
        """Send one message; False when the socket is gone."""
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.warning(f"Live update not delivered: {e}")
            return False
        return True

    async def broadcast(self, message: dict):
        """Send to every attached client and detach the ones that fail."""
        targets = list(self._sockets)
        results = await asyncio.gather(*(self.send(ws, message) for ws in targets))
        for ws, delivered in zip(targets, results):
            if not delivered:
                self.detach(ws)


clients = LiveClients()


@router.websocket("/live")
async def websocket_live(websocket: WebSocket):
    """WebSocket endpoint for live session events."""
    await clients.attach(websocket)

    await clients.send(
        websocket,
        {
            "type": "connected",
            "timestamp": _now(),
            "message": "SIMULATOR UPLINK ESTABLISHED",
        },
    )

    session = getattr(websocket.app.state, "session", None)
    if session is not None:
        await clients.send(websocket, {"type": "session_state", "data": session.snapshot()})

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
                await handle_client_message(websocket, message)
            except json.JSONDecodeError:
                await clients.send(
                    websocket, {"type": "error", "message": "Invalid JSON"}
                )
    except WebSocketDisconnect:
        clients.detach(websocket)


async def handle_client_message(websocket: WebSocket, message: dict):
    """Handle messages from WebSocket clients."""
    msg_type = message.get("type") if isinstance(message, dict) else None

    if msg_type == "ping":
        await clients.send(websocket, {"type": "pong", "timestamp": _now()})
    elif msg_type == "get_state":
        session = getattr(websocket.app.state, "session", None)
        await clients.send(
            websocket,
            {"type": "session_state", "data": session.snapshot() if session is not None else None},
        )
    else:
        await clients.send(
            websocket,
            {"type": "error", "message": f"Unknown message type: {msg_type}"},
        )


async def broadcast_session_event(event_type: str, data: dict | None):
    """Broadcast a session event to all WebSocket clients."""
    await clients.broadcast(
        {
            "type": event_type,
            "data": data,
            "timestamp": _now(),
        }
    )


def start_session_event_bridge(
    event_bus: EventBus, loop: asyncio.AbstractEventLoop
) -> threading.Event:
    """Start a daemon thread that forwards EventBus events to WebSocket.

    Session events are published from worker threads; this bridges them into
    FastAPI's event loop.  Set the returned Event to stop the bridge.
    """
    sub = event_bus.subscribe()
    stop = threading.Event()

    def bridge_loop():
        while not stop.is_set():
            try:
                msg = sub.get(timeout=1.0)
            except queue.Empty:
                continue
            asyncio.run_coroutine_threadsafe(
                broadcast_session_event(msg.get("type", "unknown"), msg.get("data")),
                loop,
            )
        event_bus.unsubscribe(sub)

    thread = threading.Thread(target=bridge_loop, daemon=True, name="session-ws-bridge")
    thread.start()
    return stop
