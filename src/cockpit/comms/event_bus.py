"""Session event fan-out.

The simulation session announces its lifecycle (scenario generated, step
started / complete / failed, reset, closed) from whichever worker thread ran
the model call.  Each listener owns a bounded queue; the WebSocket bridge is
the usual listener.
"""

from __future__ import annotations

import queue
import threading
from contextlib import suppress


def _offer(q: queue.Queue, msg: dict) -> None:
    """Enqueue ``msg``, evicting the oldest pending event when ``q`` is full."""
    while True:
        try:
            q.put_nowait(msg)
            return
        except queue.Full:
            with suppress(queue.Empty):
                q.get_nowait()


class EventBus:
    """Bounded, thread-safe broadcast of ``{"type", "data"}`` session events."""

    def __init__(self, maxsize: int = 1000) -> None:
        self._maxsize = maxsize
        self._listeners: list[queue.Queue] = []
        self._guard = threading.Lock()

    def subscribe(self) -> queue.Queue:
        listener: queue.Queue = queue.Queue(maxsize=self._maxsize)
        with self._guard:
            self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: queue.Queue) -> None:
        with self._guard:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def subscriber_count(self) -> int:
        with self._guard:
            return len(self._listeners)

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg: dict = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._guard:
            for listener in self._listeners:
                _offer(listener, msg)
