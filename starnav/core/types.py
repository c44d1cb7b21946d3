"""
Shared domain types for the starfield gesture navigation system.

Centralizes enums, data classes, and type definitions used across modules
to eliminate circular imports and ensure type consistency.
"""

import time
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np


# =============================================================================
# Gesture Types
# =============================================================================

class Gesture(Enum):
    """Discrete gesture categories derived from the finger states."""
    OPEN = "open"
    FIST = "fist"
    POINT = "point"
    NEUTRAL = "neutral"
    NONE = "none"


# =============================================================================
# Geometry Containers
# =============================================================================

class Landmark(NamedTuple):
    """A single landmark point."""
    x: float  # 0.0 to 1.0 in image space, metres in world space
    y: float
    z: float  # Depth relative to wrist


class Vec2(NamedTuple):
    """2D screen-space vector (positions, deltas, pointer coordinates)."""
    x: float
    y: float

    @classmethod
    def zero(cls) -> 'Vec2':
        return cls(0.0, 0.0)


class FingerStates(NamedTuple):
    """Extended (True) / curled (False) flag per finger, thumb first."""
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    @property
    def extended_count(self) -> int:
        return sum(1 for extended in self if extended)


# =============================================================================
# Data Containers
# =============================================================================

class HandObservation:
    """One detected hand as produced by the landmark detector.

    Uses __slots__ since one is created per processed video frame.
    """

    __slots__ = ("landmarks", "world_landmarks", "handedness", "score")

    def __init__(self, landmarks, world_landmarks,
                 handedness: str = "unknown", score: float = 0.0):
        self.landmarks = np.asarray(landmarks, dtype=np.float64)              # (21, 3) image space
        self.world_landmarks = np.asarray(world_landmarks, dtype=np.float64)  # (21, 3) metric
        self.handedness = handedness
        self.score = score

    def __repr__(self):
        return f"HandObservation({self.handedness}, score={self.score:.2f})"


class GestureUpdate:
    """Payload of a single ``update`` event.

    Two mutually exclusive shapes: an absent hand carries only
    ``gesture=NONE, present=False``; a present hand carries the smoothed
    openness/position signal, the frame-to-frame movement and the raw
    index-fingertip pointer.
    """

    __slots__ = (
        "gesture", "present", "openness", "finger_states",
        "position", "movement", "pointer", "timestamp",
    )

    def __init__(self, gesture: Gesture, present: bool,
                 openness: Optional[float] = None,
                 finger_states: Optional[FingerStates] = None,
                 position: Optional[Vec2] = None,
                 movement: Optional[Vec2] = None,
                 pointer: Optional[Vec2] = None):
        self.gesture = gesture
        self.present = present
        self.openness = openness
        self.finger_states = finger_states
        self.position = position
        self.movement = movement
        self.pointer = pointer
        self.timestamp = time.time()

    @classmethod
    def absent(cls) -> 'GestureUpdate':
        return cls(Gesture.NONE, present=False)

    def to_dict(self) -> dict:
        """Plain event shape, gesture given by its string value."""
        if not self.present:
            return {"gesture": self.gesture.value, "present": False}
        return {
            "gesture": self.gesture.value,
            "present": True,
            "openness": self.openness,
            "finger_states": list(self.finger_states),
            "position": self.position._asdict(),
            "movement": self.movement._asdict(),
            "pointer": self.pointer._asdict(),
        }

    def __repr__(self):
        if not self.present:
            return "GestureUpdate(none, present=False)"
        return f"GestureUpdate({self.gesture.value}, openness={self.openness:.3f})"


class CameraState:
    """Spherical orbit coordinates, owned by the orbit camera controller."""

    __slots__ = ("theta", "phi", "radius", "target_radius")

    def __init__(self, theta: float, phi: float, radius: float,
                 target_radius: Optional[float] = None):
        self.theta = theta
        self.phi = phi
        self.radius = radius
        self.target_radius = radius if target_radius is None else target_radius

    def __repr__(self):
        return (f"CameraState(theta={self.theta:.3f}, phi={self.phi:.3f}, "
                f"radius={self.radius:.2f}, target={self.target_radius:.2f})")
