"""Fire-and-forget event notifications.

Observers subscribe callbacks per event name; emitters never wait on or
fail because of an observer.

Usage:
    emitter = EventEmitter()
    emitter.add_listener("adapter_registered", lambda adapter, adapter_id: ...)
    emitter.emit("adapter_registered", adapter, "twitter_archive")
"""

import threading
from collections import defaultdict
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)

Listener = Callable[..., None]

ADAPTER_REGISTERED = "adapter_registered"
ADAPTER_UNREGISTERED = "adapter_unregistered"


class EventEmitter:
    """Keeps listeners per event name and calls them synchronously."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._lock = threading.Lock()

    def add_listener(self, event: str, listener: Listener) -> None:
        """Subscribe a callback to an event."""
        with self._lock:
            self._listeners[event].append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        """Unsubscribe a callback. Unknown callbacks are ignored."""
        with self._lock:
            if listener in self._listeners.get(event, []):
                self._listeners[event].remove(listener)

    def listeners(self, event: str) -> list[Listener]:
        with self._lock:
            return list(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Notify all listeners of an event.

        A listener that raises is logged and skipped.
        """
        for listener in self.listeners(event):
            try:
                listener(*args, **kwargs)
            except Exception as e:
                logger.warning(
                    "event_listener_failed",
                    event_name=event,
                    listener=getattr(listener, "__name__", repr(listener)),
                    error=str(e),
                    error_type=type(e).__name__,
                )
