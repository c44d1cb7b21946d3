"""
Exponential smoothing of the continuous hand signals.

The openness scalar and the 2D hand position are each passed through a
single-pole low-pass filter:

    smoothed = smoothed + (raw - smoothed) * factor

With a constant input the output converges to it without overshooting.

Hand loss does not reset the filters, so the signal does not jump when
the hand comes back. It only drops the previous-position baseline: the
first frame after (re)acquisition reports zero movement.
"""

import logging
from typing import Optional, Tuple

from starnav.core.types import Vec2
from starnav.modules.utils.geometry import lerp

logger = logging.getLogger(__name__)

DEFAULT_SMOOTHING_FACTOR = 0.28


class ExponentialSmoother:
    """Stateful first-order low-pass filter for one scalar."""

    def __init__(self, factor: float = DEFAULT_SMOOTHING_FACTOR, initial: float = 0.0):
        if not 0.0 < factor <= 1.0:
            raise ValueError(f"smoothing factor must be in (0, 1], got {factor!r}")
        self._factor = factor
        self._initial = initial
        self._value = initial

    def update(self, raw: float) -> float:
        self._value = lerp(self._value, raw, self._factor)
        return self._value

    def reset(self):
        self._value = self._initial

    @property
    def value(self) -> float:
        return self._value

    @property
    def factor(self) -> float:
        return self._factor


class HandSignalFilter:
    """Smooths openness and position, and derives the movement delta.

    Movement is measured between consecutive smoothed positions. A missing
    baseline (first frame, or after hand loss) yields a zero delta.
    """

    def __init__(self, smoothing_factor: float = DEFAULT_SMOOTHING_FACTOR):
        self._openness = ExponentialSmoother(smoothing_factor)
        self._x = ExponentialSmoother(smoothing_factor)
        self._y = ExponentialSmoother(smoothing_factor)
        self._previous: Optional[Vec2] = None

    def update(self, openness: float, position: Vec2) -> Tuple[float, Vec2, Vec2]:
        """Feed one frame of raw signals.

        Returns:
            (smoothed openness, smoothed position, movement since last frame)
        """
        smoothed_openness = self._openness.update(openness)
        smoothed = Vec2(self._x.update(position.x), self._y.update(position.y))

        if self._previous is None:
            movement = Vec2.zero()
        else:
            movement = Vec2(smoothed.x - self._previous.x, smoothed.y - self._previous.y)
        self._previous = smoothed

        return smoothed_openness, smoothed, movement

    def hand_lost(self):
        """Drop the movement baseline; the smoothed state is kept."""
        if self._previous is not None:
            logger.debug("Hand lost, movement baseline cleared")
        self._previous = None

    def reset(self):
        """Clear all smoothing state (controller restart)."""
        self._openness.reset()
        self._x.reset()
        self._y.reset()
        self._previous = None

    @property
    def openness(self) -> float:
        return self._openness.value

    @property
    def position(self) -> Vec2:
        return Vec2(self._x.value, self._y.value)

    @property
    def has_baseline(self) -> bool:
        return self._previous is not None
