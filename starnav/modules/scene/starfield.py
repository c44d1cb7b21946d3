"""
Pickable starfield model: stars and planets spread through balls around the
origin, plus the highlight state used by object selection.

Only what picking and highlighting need is modelled here (positions,
bounding radii, emissive colour/intensity, uniform scale). Drawing the
scene is left to the renderer.
"""

import colorsys
import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class StarfieldConfig:
    """Starfield generation and highlight settings."""
    radius: float = 48.0
    star_count: int = 360
    planet_count: int = 5
    rotation_speed: float = 0.045          # rad/s about the y axis
    seed: Optional[int] = None
    highlight_emissive: int = 0xF0F6FF
    highlight_emissive_intensity: float = 1.6
    highlight_scale: float = 1.3

    @classmethod
    def from_dict(cls, d: dict) -> "StarfieldConfig":
        """Create config from dictionary."""
        defaults = cls()
        return cls(**{
            name: d.get(name, getattr(defaults, name))
            for name in cls.__dataclass_fields__
        })


class SceneObject:
    """A pickable star or planet.

    ``user_data`` keeps the base visual state restored on clear, and the
    ``is_highlighted`` marker while the object is highlighted.
    """

    __slots__ = (
        "object_id", "label", "kind", "kind_label", "local_position",
        "radius", "emissive", "emissive_intensity", "scale", "user_data",
    )

    def __init__(self, object_id: int, label: str, kind: str, kind_label: str,
                 local_position, radius: float, emissive: int,
                 emissive_intensity: float, scale: float = 1.0):
        self.object_id = object_id
        self.label = label
        self.kind = kind
        self.kind_label = kind_label
        self.local_position = np.asarray(local_position, dtype=np.float64)
        self.radius = radius
        self.emissive = emissive
        self.emissive_intensity = emissive_intensity
        self.scale = scale
        self.user_data = {
            "base_emissive": emissive,
            "base_emissive_intensity": emissive_intensity,
            "base_scale": scale,
        }

    @property
    def is_highlighted(self) -> bool:
        return bool(self.user_data.get("is_highlighted"))

    def __repr__(self):
        return f"SceneObject({self.label!r}, kind={self.kind})"


def _hsl_to_hex(h: float, s: float, l: float) -> int:
    r, g, b = colorsys.hls_to_rgb(h % 1.0, l, s)
    return (int(round(r * 255)) << 16) | (int(round(g * 255)) << 8) | int(round(b * 255))


def _scale_hex(color: int, factor: float) -> int:
    channels = [(color >> shift) & 0xFF for shift in (16, 8, 0)]
    r, g, b = (min(255, int(round(c * factor))) for c in channels)
    return (r << 16) | (g << 8) | b


def _rotation_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, 0.0, s],
        [0.0, 1.0, 0.0],
        [-s, 0.0, c],
    ])


class Starfield:
    """Collection of pickable objects with at most one highlighted."""

    def __init__(self, config: Optional[StarfieldConfig] = None,
                 objects: Optional[List[SceneObject]] = None):
        self.config = config or StarfieldConfig()
        self._rng = np.random.default_rng(self.config.seed)
        self._rotation = 0.0
        self._highlighted: Optional[SceneObject] = None

        if objects is not None:
            self._objects = list(objects)
        else:
            self._objects = []
            self._build_stars()
            self._build_planets()
            logger.info("Starfield built: %d stars, %d planets",
                        self.config.star_count, self.config.planet_count)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def _random_in_ball(self, radius: float) -> np.ndarray:
        v = self._rng.normal(size=3)
        norm = np.linalg.norm(v)
        while norm < 1e-9:
            v = self._rng.normal(size=3)
            norm = np.linalg.norm(v)
        # cbrt keeps the density uniform through the volume
        return v / norm * radius * float(np.cbrt(self._rng.random()))

    def _build_stars(self):
        for i in range(self.config.star_count):
            color = _hsl_to_hex(
                0.52 + self._rng.random() * 0.18, 0.75, 0.67 + self._rng.random() * 0.1
            )
            self._objects.append(SceneObject(
                object_id=len(self._objects),
                label=f"Star {i + 1}",
                kind="star",
                kind_label="star",
                local_position=self._random_in_ball(self.config.radius * 0.92),
                radius=float(self._rng.uniform(0.18, 0.45)),
                emissive=color,
                emissive_intensity=1.05,
            ))

    def _build_planets(self):
        for i in range(self.config.planet_count):
            color = _hsl_to_hex(self._rng.random(), 0.5, 0.55)
            self._objects.append(SceneObject(
                object_id=len(self._objects),
                label=f"Planet {i + 1}",
                kind="planet",
                kind_label="planet",
                local_position=self._random_in_ball(self.config.radius * 0.75),
                radius=float(self._rng.uniform(1.2, 2.4)),
                emissive=_scale_hex(color, 0.35),
                emissive_intensity=0.8,
            ))

    # -------------------------------------------------------------------------
    # Frame update / geometry
    # -------------------------------------------------------------------------

    def update(self, dt: float):
        """Advance the slow rotation of the pickable group."""
        self._rotation += dt * self.config.rotation_speed

    @property
    def rotation(self) -> float:
        return self._rotation

    def get_pickable_objects(self) -> List[SceneObject]:
        return self._objects

    def world_position(self, obj: SceneObject) -> np.ndarray:
        return _rotation_y(self._rotation) @ obj.local_position

    def bounding_spheres(self) -> Iterator[Tuple[SceneObject, np.ndarray, float]]:
        """(object, world centre, world radius) for every pickable object."""
        rotation = _rotation_y(self._rotation)
        for obj in self._objects:
            yield obj, rotation @ obj.local_position, obj.radius * obj.scale

    # -------------------------------------------------------------------------
    # Highlight
    # -------------------------------------------------------------------------

    @property
    def highlighted(self) -> Optional[SceneObject]:
        return self._highlighted

    def highlight(self, obj: Optional[SceneObject]):
        """Highlight ``obj``, clearing any other highlighted object first.

        Highlighting the already-highlighted object is a no-op.
        """
        if obj is None:
            self.clear_highlight()
            return
        if obj is self._highlighted:
            return
        if self._highlighted is not None:
            self.clear_highlight()

        cfg = self.config
        obj.emissive = cfg.highlight_emissive
        obj.emissive_intensity = cfg.highlight_emissive_intensity
        obj.scale = obj.user_data["base_scale"] * cfg.highlight_scale
        obj.user_data["is_highlighted"] = True
        self._highlighted = obj
        logger.debug("Highlighted %s", obj.label)

    def clear_highlight(self):
        """Restore the highlighted object's base visual state."""
        obj = self._highlighted
        if obj is None:
            return
        obj.emissive = obj.user_data["base_emissive"]
        obj.emissive_intensity = obj.user_data["base_emissive_intensity"]
        obj.scale = obj.user_data["base_scale"]
        obj.user_data.pop("is_highlighted", None)
        self._highlighted = None
        logger.debug("Cleared highlight on %s", obj.label)
