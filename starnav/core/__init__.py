"""Core types, events and the gesture loop."""
from .events import EventBus, Events
from .types import Gesture, GestureUpdate, FingerStates, HandObservation, Vec2

__all__ = [
    "EventBus",
    "Events",
    "Gesture",
    "GestureUpdate",
    "FingerStates",
    "HandObservation",
    "Vec2",
]
