"""
Screen-space ray picking against the starfield's bounding spheres.
"""

import math
import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

import numpy as np

from starnav.core.types import Vec2

logger = logging.getLogger(__name__)

_WORLD_UP = np.array([0.0, 1.0, 0.0])


class PerspectiveCamera:
    """Pinhole camera looking at a target; fov is vertical, in degrees."""

    def __init__(self, fov: float = 60.0, aspect: float = 16 / 9,
                 near: float = 0.1, far: float = 400.0):
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.position = np.array([0.0, 0.0, 1.0])
        self._target = np.zeros(3)

    def look_at(self, target):
        self._target = np.asarray(target, dtype=np.float64)

    def basis(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(right, up, forward) unit vectors in world space."""
        forward = self._target - self.position
        forward = forward / np.linalg.norm(forward)
        right = np.cross(forward, _WORLD_UP)
        norm = np.linalg.norm(right)
        if norm < 1e-9:
            # Looking straight up or down
            right = np.array([1.0, 0.0, 0.0])
        else:
            right = right / norm
        up = np.cross(right, forward)
        return right, up, forward


class Intersection(NamedTuple):
    distance: float
    point: np.ndarray
    object: object


class Raycaster:
    """Casts a ray from normalized device coordinates through a camera."""

    def __init__(self):
        self.origin = np.zeros(3)
        self.direction = np.array([0.0, 0.0, -1.0])
        self.near = 0.0
        self.far = math.inf

    def set_from_camera(self, ndc: Vec2, camera: PerspectiveCamera):
        """Ray through ``ndc`` (x right, y up, both in [-1, 1])."""
        right, up, forward = camera.basis()
        half_height = math.tan(math.radians(camera.fov) / 2.0)
        half_width = half_height * camera.aspect
        direction = forward + right * (ndc.x * half_width) + up * (ndc.y * half_height)
        self.origin = np.array(camera.position, dtype=np.float64)
        self.direction = direction / np.linalg.norm(direction)
        self.near = camera.near
        self.far = camera.far

    def intersect_sphere(self, center, radius: float) -> Optional[float]:
        """Distance along the ray to the sphere surface, or None."""
        oc = self.origin - np.asarray(center, dtype=np.float64)
        b = float(np.dot(oc, self.direction))
        c = float(np.dot(oc, oc)) - radius * radius
        disc = b * b - c
        if disc < 0.0:
            return None
        root = math.sqrt(disc)
        t = -b - root
        if t < self.near:
            t = -b + root  # origin inside the sphere
        if t < self.near or t > self.far:
            return None
        return t

    def intersect(self, spheres: Iterable[Tuple[object, np.ndarray, float]]) -> List[Intersection]:
        """All hits, nearest first."""
        hits = []
        for obj, center, radius in spheres:
            t = self.intersect_sphere(center, radius)
            if t is not None:
                hits.append(Intersection(t, self.origin + self.direction * t, obj))
        hits.sort(key=lambda hit: hit.distance)
        return hits


class ScenePicker:
    """Resolves a pointer position to the nearest pickable object.

    The pointer comes from the unmirrored camera image, so x is mirrored
    to match what the user sees before converting to NDC.
    """

    def __init__(self, starfield, camera_controller,
                 camera: Optional[PerspectiveCamera] = None,
                 raycaster: Optional[Raycaster] = None, mirror_x: bool = True,
                 aspect: float = 16 / 9):
        self._starfield = starfield
        self._camera_controller = camera_controller
        cfg = camera_controller.config
        self.camera = camera or PerspectiveCamera(cfg.fov, aspect, cfg.near, cfg.far)
        self._raycaster = raycaster or Raycaster()
        self._mirror_x = mirror_x

    def set_aspect(self, width: int, height: int):
        if height > 0:
            self.camera.aspect = width / height

    def to_ndc(self, pointer: Vec2) -> Vec2:
        x = 1.0 - pointer.x if self._mirror_x else pointer.x
        return Vec2(x * 2.0 - 1.0, -(pointer.y * 2.0 - 1.0))

    def pick(self, pointer: Vec2):
        """Nearest object under ``pointer`` (normalized image coords), or None."""
        self.camera.position = self._camera_controller.position
        self.camera.look_at(self._camera_controller.look_at)
        self._raycaster.set_from_camera(self.to_ndc(pointer), self.camera)
        hits = self._raycaster.intersect(self._starfield.bounding_spheres())
        if not hits:
            return None
        return hits[0].object
