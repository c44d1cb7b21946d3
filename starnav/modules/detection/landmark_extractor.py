"""
21-point hand landmark feature computation.

Provides the two per-frame features the gesture loop needs:
    - finger states: extended/curled flag per finger from joint geometry
    - openness: mean wrist-to-fingertip distance, the zoom signal

Both are computed from the world landmarks (hand-centred, metric), so they
do not depend on how far the hand is from the camera.
"""

import logging
import numpy as np

from starnav.core.types import FingerStates
from starnav.modules.utils.geometry import as_points

logger = logging.getLogger(__name__)

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC = 1
THUMB_MCP = 2
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_DIP = 7
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_DIP = 11
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_DIP = 15
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_DIP = 19
PINKY_TIP = 20

# Per finger, thumb first. The thumb's IP joint plays the role of the PIP.
FINGER_TIPS = [THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP]
FINGER_PIPS = [THUMB_IP, INDEX_PIP, MIDDLE_PIP, RING_PIP, PINKY_PIP]
FINGER_MCPS = [THUMB_MCP, INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP]

# Fingertips averaged for openness (thumb excluded)
OPENNESS_TIPS = [INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP]

HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),          # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),          # Index
    (5, 9), (9, 10), (10, 11), (11, 12),     # Middle
    (9, 13), (13, 14), (14, 15), (15, 16),   # Ring
    (13, 17), (17, 18), (18, 19), (19, 20),  # Pinky
    (0, 17),                                 # Palm base
]

DEFAULT_FINGER_BEND_THRESHOLD = -0.015


class LandmarkExtractor:
    """Extracts finger states and openness from world landmarks."""

    def __init__(self, finger_bend_threshold: float = DEFAULT_FINGER_BEND_THRESHOLD):
        self._threshold = finger_bend_threshold

    @property
    def finger_bend_threshold(self) -> float:
        return self._threshold

    def get_bend_scores(self, world_landmarks) -> np.ndarray:
        """Dot product of (tip - pip) and (mcp - pip) for each finger.

        A straight finger puts tip and mcp on opposite sides of the pip
        joint (strongly negative); a curled finger folds the tip back
        towards the mcp (near zero or positive).

        Returns:
            np.ndarray of shape (5,), thumb first
        """
        points = as_points(world_landmarks)
        pip = points[FINGER_PIPS]
        to_tip = points[FINGER_TIPS] - pip
        to_mcp = points[FINGER_MCPS] - pip
        return np.einsum("ij,ij->i", to_tip, to_mcp)

    def get_finger_states(self, world_landmarks) -> FingerStates:
        """Classify each finger as extended (True) or curled (False)."""
        scores = self.get_bend_scores(world_landmarks)
        return FingerStates(*(bool(score < self._threshold) for score in scores))

    def get_openness(self, world_landmarks) -> float:
        """Average wrist-to-fingertip distance over the four non-thumb fingers."""
        points = as_points(world_landmarks)
        distances = np.linalg.norm(points[OPENNESS_TIPS] - points[WRIST], axis=1)
        return float(distances.mean())

    @staticmethod
    def get_anchor(landmarks) -> np.ndarray:
        """Image-space point that drives the orbit signal (the wrist)."""
        return as_points(landmarks)[WRIST]

    @staticmethod
    def get_pointer(landmarks) -> np.ndarray:
        """Image-space index fingertip, used unsmoothed for ray picking."""
        return as_points(landmarks)[INDEX_TIP]
