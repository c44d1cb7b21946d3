"""
Lightweight event bus for decoupled gesture -> consumer communication.

The gesture loop publishes on named channels and the camera, selection
and UI consumers subscribe to them.

Usage:
    bus = EventBus()
    bus.subscribe(Events.UPDATE, on_update)
    bus.emit(Events.UPDATE, update=gesture_update)

Iteration contract:
    emit() dispatches over a snapshot of the listeners, so a handler may
    subscribe or unsubscribe (itself or others) while it runs. A listener
    removed during an emission is not called for the rest of it; a listener
    added during an emission is first called on the next one.
"""

import time
import logging
import threading
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Named-channel publish/subscribe dispatcher.

    Dispatch is synchronous. Listeners with equal priority are called in
    registration order.
    """

    def __init__(self, max_history: int = 100):
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._lock = threading.Lock()
        self._event_history = []
        self._max_history = max_history
        self._enabled = True

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register a listener for an event.

        Args:
            event_name: Event to listen for
            callback: Function to call. Receives **kwargs from emit().
            priority: Higher priority callbacks run first (default 0)
        """
        with self._lock:
            self._listeners[event_name].append((priority, callback))
            # Stable sort keeps registration order within a priority
            self._listeners[event_name].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event_name, getattr(callback, "__name__", callback), priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        """Remove a listener for an event. Unknown listeners are ignored."""
        with self._lock:
            listeners = self._listeners.get(event_name)
            if not listeners:
                return
            self._listeners[event_name] = [
                (p, cb) for p, cb in listeners if cb is not callback
            ]

    def _is_subscribed(self, event_name: str, callback: Callable) -> bool:
        with self._lock:
            return any(cb is callback for _, cb in self._listeners.get(event_name, ()))

    def emit(self, event_name: str, **kwargs):
        """Emit an event to all registered listeners.

        Args:
            event_name: Event name to emit
            **kwargs: Data passed to all listeners
        """
        if not self._enabled:
            return

        with self._lock:
            listeners = list(self._listeners.get(event_name, []))

        self._event_history.append({
            "event": event_name,
            "time": time.time(),
            "data_keys": list(kwargs.keys()),
        })
        if len(self._event_history) > self._max_history:
            self._event_history = self._event_history[-self._max_history:]

        for priority, callback in listeners:
            if not self._is_subscribed(event_name, callback):
                continue
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event_name, getattr(callback, "__name__", callback), e)

    def clear(self, event_name: str = None):
        """Remove all listeners, optionally for a specific event."""
        with self._lock:
            if event_name:
                self._listeners.pop(event_name, None)
            else:
                self._listeners.clear()

    def set_enabled(self, enabled: bool):
        self._enabled = enabled

    @property
    def registered_events(self) -> list:
        """List all events with registered listeners."""
        with self._lock:
            return [name for name, cbs in self._listeners.items() if cbs]

    @property
    def listener_count(self) -> int:
        """Total number of registered listeners."""
        with self._lock:
            return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Get recent event history."""
        return self._event_history[-last_n:]


# =============================================================================
# Standard Event Names (constants to avoid typos)
# =============================================================================

class Events:
    """Standard event names used throughout the system."""

    # Gesture loop channels
    STATUS = "status"
    ERROR = "error"
    UPDATE = "update"

    # Consumer side
    SELECTION_CHANGED = "selection_changed"
