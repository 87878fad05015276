"""In-process messaging between the session and the WebSocket bridge."""

from .event_bus import EventBus

__all__ = ["EventBus"]
