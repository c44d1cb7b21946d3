"""Vector and scalar helpers used for landmark feature extraction."""

import numpy as np


def as_points(landmarks) -> np.ndarray:
    """Convert a landmark sequence (NamedTuples, lists or arrays) to an (N, 3) array."""
    return np.asarray(landmarks, dtype=np.float64).reshape(-1, 3)


def lerp(current: float, target: float, factor: float) -> float:
    """Move ``current`` towards ``target`` by ``factor`` of the gap."""
    return current + (target - current) * factor


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value to range [lo, hi]."""
    return max(lo, min(hi, value))
