"""Pickable starfield objects and ray picking."""
from .starfield import SceneObject, Starfield, StarfieldConfig
from .raycaster import PerspectiveCamera, Raycaster, ScenePicker

__all__ = [
    "SceneObject",
    "Starfield",
    "StarfieldConfig",
    "PerspectiveCamera",
    "Raycaster",
    "ScenePicker",
]
