"""
Static Gesture Classifier
==========================

Rule-based mapping from the five finger flags to a discrete gesture.
The result depends only on the current frame's flags.

Rules, checked in this order:
    - at least ``min_extended_for_open`` fingers extended -> OPEN
      (tolerates one ambiguous finger, usually the thumb)
    - at most ``max_extended_for_fist`` fingers extended  -> FIST
    - exactly the index finger extended                   -> POINT
    - anything else                                       -> NEUTRAL
"""

import logging
from dataclasses import dataclass
from typing import Optional

from starnav.core.types import FingerStates, Gesture

logger = logging.getLogger(__name__)


@dataclass
class GestureClassifierConfig:
    """Gesture classifier configuration."""
    min_extended_for_open: int = 4
    max_extended_for_fist: int = 0
    # Also accept index + thumb as POINT. Off by default: POINT is an
    # exact single-finger match.
    point_allows_thumb: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "GestureClassifierConfig":
        """Create config from dictionary."""
        return cls(
            min_extended_for_open=config.get("min_extended_for_open", 4),
            max_extended_for_fist=config.get("max_extended_for_fist", 0),
            point_allows_thumb=config.get("point_allows_thumb", False),
        )


class GestureClassifier:
    """Maps FingerStates to a Gesture.

    Example:
        >>> classifier = GestureClassifier()
        >>> classifier.classify(FingerStates(False, True, False, False, False))
        <Gesture.POINT: 'point'>
    """

    def __init__(self, config: Optional[GestureClassifierConfig] = None):
        self.config = config or GestureClassifierConfig()

    def classify(self, fingers: FingerStates) -> Gesture:
        extended = fingers.extended_count

        if extended >= self.config.min_extended_for_open:
            return Gesture.OPEN

        if extended <= self.config.max_extended_for_fist:
            return Gesture.FIST

        if self._is_point(fingers):
            return Gesture.POINT

        return Gesture.NEUTRAL

    def _is_point(self, fingers: FingerStates) -> bool:
        others_curled = not (fingers.middle or fingers.ring or fingers.pinky)
        if not (fingers.index and others_curled):
            return False
        return self.config.point_allows_thumb or not fingers.thumb
