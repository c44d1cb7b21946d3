"""
Webcam capture with a background thread that always holds the latest frame.

Each captured frame is stamped with its capture time, which serves as the
presentation timestamp for the gesture loop: a reader that sees the same
timestamp twice knows no new frame has arrived.
"""

import time
import threading
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class CameraManagerConfig:
    """Camera capture configuration."""
    device_id: int = 0
    width: int = 960
    height: int = 720
    fps: int = 30
    backend: str = "auto"
    buffer_size: int = 1
    warmup_frames: int = 5

    @classmethod
    def from_dict(cls, d: dict) -> "CameraManagerConfig":
        """Create config from dictionary."""
        defaults = cls()
        return cls(**{
            name: d.get(name, getattr(defaults, name))
            for name in cls.__dataclass_fields__
        })


class CameraManager:
    """Threaded frame acquisition exposing (timestamp, frame) reads."""

    def __init__(self, config: Optional[CameraManagerConfig] = None):
        self.config = config or CameraManagerConfig()
        self._cap = None
        self._frame = None
        self._timestamp = None
        self._lock = threading.Lock()
        self._running = False
        self._thread = None

    def open(self) -> bool:
        """Open the camera device."""
        backend_map = {
            "v4l2": cv2.CAP_V4L2,
            "dshow": cv2.CAP_DSHOW,
            "avfoundation": cv2.CAP_AVFOUNDATION,
            "auto": cv2.CAP_ANY,
        }
        backend = backend_map.get(self.config.backend, cv2.CAP_ANY)

        self._cap = cv2.VideoCapture(self.config.device_id, backend)
        if not self._cap.isOpened():
            logger.error("Failed to open camera %d with backend %s",
                         self.config.device_id, self.config.backend)
            self._cap = None
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        self._cap.set(cv2.CAP_PROP_FPS, self.config.fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

        actual_w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info("Camera opened: %dx%d (requested %dx%d @ %d)",
                    actual_w, actual_h, self.config.width, self.config.height,
                    self.config.fps)

        for _ in range(self.config.warmup_frames):
            self._cap.read()
        return True

    def start_async(self):
        """Start threaded frame capture."""
        if self._running or self._cap is None:
            return
        self._running = True
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()
        logger.info("Async capture started")

    def _capture_loop(self):
        while self._running:
            ret, frame = self._cap.read()
            if ret and frame is not None:
                with self._lock:
                    self._frame = frame
                    self._timestamp = time.monotonic()
            else:
                time.sleep(0.001)

    def read(self) -> Tuple[Optional[float], Optional[np.ndarray]]:
        """Latest frame and its capture timestamp (seconds), or (None, None)."""
        with self._lock:
            if self._frame is None:
                return None, None
            return self._timestamp, self._frame.copy()

    @property
    def frame_size(self) -> Tuple[int, int]:
        with self._lock:
            if self._frame is None:
                return (self.config.width, self.config.height)
            h, w = self._frame.shape[:2]
            return (w, h)

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def stop(self):
        """Stop async capture and release camera."""
        self._running = False
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        if self._cap:
            self._cap.release()
            self._cap = None
        logger.info("Camera stopped")

    def __enter__(self):
        self.open()
        self.start_async()
        return self

    def __exit__(self, *args):
        self.stop()
