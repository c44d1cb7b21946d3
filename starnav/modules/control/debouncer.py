"""
Single-slot delayed action used to debounce highlight clearing.

There are no background threads: a scheduled callback fires from poll(),
which the render loop calls every tick. Scheduling again replaces the
pending callback, so at most one clear is pending at any time.
"""

import time
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ClearTimer:
    """Re-armable one-shot timer with millisecond delays."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._deadline: Optional[float] = None  # seconds, clock() units
        self._callback: Optional[Callable[[], None]] = None
        self._delay_ms = 0

    def schedule(self, delay_ms: float, callback: Callable[[], None]):
        """Arm the timer, cancelling any pending callback."""
        self._deadline = self._clock() + delay_ms / 1000.0
        self._callback = callback
        self._delay_ms = delay_ms

    def cancel(self):
        self._deadline = None
        self._callback = None

    def poll(self) -> bool:
        """Fire the pending callback if its deadline has passed.

        Returns:
            True if a callback fired
        """
        if self._deadline is None or self._clock() < self._deadline:
            return False
        callback = self._callback
        self._deadline = None
        self._callback = None
        logger.debug("Clear timer fired after %dms", self._delay_ms)
        callback()
        return True

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    @property
    def remaining_ms(self) -> float:
        if self._deadline is None:
            return 0.0
        return max(0.0, (self._deadline - self._clock()) * 1000.0)

    @property
    def delay_ms(self) -> float:
        """Delay used by the most recent schedule() call."""
        return self._delay_ms
