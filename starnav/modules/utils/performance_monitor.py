"""
Rolling-window timing for the gesture loop and the render loop.
"""

import time
import logging
from collections import deque
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Tracks gesture-loop FPS and average per-stage latency."""

    def __init__(self, window_size: int = 60):
        self._window_size = window_size
        self._frame_times = deque(maxlen=window_size)
        self._last_frame_time = None
        self._stage_times = {}
        self._frame_count = 0
        self._start_time = time.time()

    @contextmanager
    def measure(self, stage_name: str):
        """Context manager to measure a stage's duration."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            times = self._stage_times.setdefault(stage_name, deque(maxlen=self._window_size))
            times.append(elapsed_ms)

    def tick(self):
        """Call once per processed frame to track FPS."""
        now = time.perf_counter()
        if self._last_frame_time is not None:
            self._frame_times.append(now - self._last_frame_time)
        self._last_frame_time = now
        self._frame_count += 1

    @property
    def fps(self) -> float:
        """Processed frames per second (rolling average)."""
        if len(self._frame_times) < 2:
            return 0.0
        avg_interval = sum(self._frame_times) / len(self._frame_times)
        return 1.0 / avg_interval if avg_interval > 0 else 0.0

    def get_stage_latency(self, stage_name: str) -> float:
        """Average latency for a stage in ms."""
        times = self._stage_times.get(stage_name)
        if not times:
            return 0.0
        return sum(times) / len(times)

    def print_report(self):
        uptime = time.time() - self._start_time
        logger.info("=" * 50)
        logger.info("PERFORMANCE REPORT")
        logger.info("Frames: %d in %.1fs (%.1f FPS)", self._frame_count, uptime, self.fps)
        for stage in sorted(self._stage_times):
            logger.info("  %-12s %7.2f ms", stage, self.get_stage_latency(stage))
        logger.info("=" * 50)

    @property
    def frame_count(self) -> int:
        return self._frame_count
