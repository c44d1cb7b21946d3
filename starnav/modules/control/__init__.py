"""Consumers of gesture updates: orbit camera and object selection."""
from .camera_controller import OrbitCameraController, OrbitCameraConfig
from .debouncer import ClearTimer
from .selection import SelectionController, SelectionConfig

__all__ = [
    "OrbitCameraController",
    "OrbitCameraConfig",
    "ClearTimer",
    "SelectionController",
    "SelectionConfig",
]
