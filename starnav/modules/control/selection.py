"""
Pointer-driven object selection with debounced highlight clearing.

Every POINT frame casts a ray from the index fingertip into the scene and
highlights the nearest hit. The clear timer is re-armed on every evaluated
frame with one of three delays:

    valid selection      -> highlight_clear_delay_ms (long)
    no hit under pointer -> empty_clear_delay_ms     (short)
    no hand at all       -> no_hand_clear_delay_ms

so one-frame ray misses do not make the selection flicker, while the
highlight is still released soon after the hand or the intent goes away.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from starnav.core.events import EventBus, Events
from starnav.core.types import Gesture, GestureUpdate, Vec2
from starnav.modules.control.debouncer import ClearTimer

logger = logging.getLogger(__name__)


@dataclass
class SelectionConfig:
    """Highlight clear delays in milliseconds."""
    highlight_clear_delay_ms: float = 2200
    no_hand_clear_delay_ms: float = 800
    empty_clear_delay_ms: float = 600

    @classmethod
    def from_dict(cls, d: dict) -> "SelectionConfig":
        """Create config from dictionary."""
        return cls(
            highlight_clear_delay_ms=d.get("highlight_clear_delay_ms", 2200),
            no_hand_clear_delay_ms=d.get("no_hand_clear_delay_ms", 800),
            empty_clear_delay_ms=d.get("empty_clear_delay_ms", 600),
        )


class SelectionController:
    """Keeps at most one selected object, highlighted in the starfield."""

    def __init__(self, starfield, picker, config: Optional[SelectionConfig] = None,
                 timer: Optional[ClearTimer] = None, event_bus: Optional[EventBus] = None):
        self._starfield = starfield
        self._picker = picker
        self.config = config or SelectionConfig()
        self._timer = timer or ClearTimer()
        self._bus = event_bus
        self._active = None

    def handle_update(self, update: GestureUpdate, **kwargs):
        """Event bus handler for ``update`` events."""
        if not update.present:
            self.handle_absent()
            return
        if update.gesture is Gesture.POINT and update.pointer is not None:
            self.update_selection(update.pointer)

    def update_selection(self, pointer: Vec2):
        """Pick under ``pointer`` and (re)select; returns the hit or None."""
        obj = self._picker.pick(pointer)
        if obj is None:
            self._timer.schedule(self.config.empty_clear_delay_ms, self._clear)
            return None

        if obj is not self._active:
            self._active = obj
            self._starfield.highlight(obj)
            logger.info("Selected %s (%s)", obj.label, obj.kind_label)
            self._notify(obj)
        self._timer.schedule(self.config.highlight_clear_delay_ms, self._clear)
        return obj

    def handle_absent(self):
        self._timer.schedule(self.config.no_hand_clear_delay_ms, self._clear)

    def poll(self) -> bool:
        """Run a due clear; call once per render tick."""
        return self._timer.poll()

    def _clear(self):
        self._starfield.clear_highlight()
        if self._active is not None:
            logger.info("Selection cleared (%s)", self._active.label)
            self._active = None
            self._notify(None)

    def _notify(self, obj):
        if self._bus is not None:
            self._bus.emit(Events.SELECTION_CHANGED, selection=obj)

    @property
    def active_selection(self):
        return self._active

    @property
    def timer(self) -> ClearTimer:
        return self._timer
