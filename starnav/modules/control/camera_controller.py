"""
Orbit camera driven by gesture updates.

Two independent channels act on the spherical camera state:
    - Orbit: the smoothed hand movement rotates theta/phi; phi is kept
      away from the poles so the camera never flips.
    - Zoom: hand openness maps linearly onto a radius range. The mapped
      value moves ``target_radius`` (gesture rate) and every render tick
      moves ``radius`` towards ``target_radius`` (frame rate).
"""

import math
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from starnav.core.types import CameraState, GestureUpdate, Vec2
from starnav.modules.utils.geometry import clamp, lerp

logger = logging.getLogger(__name__)


@dataclass
class OrbitCameraConfig:
    """Orbit camera configuration."""
    initial_radius: float = 58.0
    initial_theta: float = math.pi * 0.45
    initial_phi: float = math.pi * 0.5
    min_radius: float = 28.0
    max_radius: float = 86.0
    min_openness: float = 0.055
    max_openness: float = 0.16
    rotate_sensitivity: float = 3.8
    polar_epsilon: float = 0.16
    zoom_lerp_factor: float = 0.08
    target_radius_lerp_factor: float = 0.25
    fov: float = 60.0
    near: float = 0.1
    far: float = 400.0

    def __post_init__(self):
        if not self.min_openness < self.max_openness:
            raise ValueError(
                f"min_openness must be below max_openness, "
                f"got {self.min_openness!r} >= {self.max_openness!r}"
            )

    @classmethod
    def from_dict(cls, d: dict) -> "OrbitCameraConfig":
        """Create config from dictionary."""
        defaults = cls()
        return cls(**{
            name: d.get(name, getattr(defaults, name))
            for name in cls.__dataclass_fields__
        })


def map_openness_to_radius(openness: float, config: OrbitCameraConfig) -> float:
    """Linear map from the (clamped) openness range onto the radius range."""
    clamped = clamp(openness, config.min_openness, config.max_openness)
    ratio = (clamped - config.min_openness) / (config.max_openness - config.min_openness)
    return config.min_radius + ratio * (config.max_radius - config.min_radius)


def spherical_to_cartesian(radius: float, theta: float, phi: float) -> np.ndarray:
    """Position on a sphere around the origin, y up, phi measured from +y."""
    return np.array([
        radius * math.sin(phi) * math.cos(theta),
        radius * math.cos(phi),
        radius * math.sin(phi) * math.sin(theta),
    ])


class OrbitCameraController:
    """Owns the CameraState and integrates gesture input into it."""

    def __init__(self, config: Optional[OrbitCameraConfig] = None):
        self.config = config or OrbitCameraConfig()
        self.state = CameraState(
            theta=self.config.initial_theta,
            phi=self.config.initial_phi,
            radius=self.config.initial_radius,
        )
        self._position = spherical_to_cartesian(
            self.state.radius, self.state.theta, self.state.phi
        )

    def handle_update(self, update: GestureUpdate, **kwargs):
        """Event bus handler for ``update`` events."""
        if not update.present:
            return
        self.set_zoom_target(update.openness)
        if update.movement is not None:
            self.orbit(update.movement)

    def orbit(self, movement: Vec2):
        cfg = self.config
        self.state.theta += movement.x * cfg.rotate_sensitivity
        self.state.phi += movement.y * cfg.rotate_sensitivity
        self.state.phi = clamp(self.state.phi, cfg.polar_epsilon, math.pi - cfg.polar_epsilon)

    def set_zoom_target(self, openness: float) -> float:
        """Ease ``target_radius`` towards the radius mapped from ``openness``."""
        mapped = map_openness_to_radius(openness, self.config)
        self.state.target_radius = lerp(
            self.state.target_radius, mapped, self.config.target_radius_lerp_factor
        )
        return self.state.target_radius

    def tick(self, dt: float = 0.0) -> np.ndarray:
        """Render-tick update: ease radius and recompute the camera position.

        Returns:
            Camera position (3,), always aimed at the origin
        """
        self.state.radius = lerp(
            self.state.radius, self.state.target_radius, self.config.zoom_lerp_factor
        )
        self._position = spherical_to_cartesian(
            self.state.radius, self.state.theta, self.state.phi
        )
        return self._position

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def look_at(self) -> np.ndarray:
        return np.zeros(3)

    def reset(self):
        self.state = CameraState(
            theta=self.config.initial_theta,
            phi=self.config.initial_phi,
            radius=self.config.initial_radius,
        )
        self._position = spherical_to_cartesian(
            self.state.radius, self.state.theta, self.state.phi
        )
