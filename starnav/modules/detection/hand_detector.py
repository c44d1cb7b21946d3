"""
Hand Detection Module - MediaPipe Tasks API
============================================

Wraps the MediaPipe HandLandmarker in VIDEO mode and converts its output
into HandObservation objects carrying both the image-space and the
world-space landmarks.
"""

import logging
import os
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from starnav.core.errors import DetectorError
from starnav.core.types import HandObservation, Landmark

logger = logging.getLogger(__name__)

# Model download URL
HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path(__file__).parent.parent.parent.parent / "models" / "hand_landmarker.task"


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    max_num_hands: int = 1
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    delegate: str = "CPU"  # CPU or GPU
    download: bool = True

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            max_num_hands=d.get("max_num_hands", 1),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            delegate=d.get("delegate", "CPU"),
            download=d.get("download", True),
        )


def download_model(url: str, save_path: Path):
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        logger.info("Model already exists at %s", save_path)
        return
    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading hand landmarker model to %s...", save_path)
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete")
    except OSError as e:
        raise DetectorError(f"could not download hand landmarker model: {e}") from e


class HandDetector:
    """
    Hand landmark detector using MediaPipe HandLandmarker.

    Example:
        >>> detector = HandDetector(HandDetectorConfig())
        >>> detector.start()
        >>> hands = detector.detect(bgr_frame, timestamp_ms)
        >>> detector.stop()
    """

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker = None
        self._last_timestamp_ms = -1

    def start(self):
        """Create the landmarker.

        Raises:
            DetectorError: the model could not be found, downloaded or loaded
        """
        model_path = Path(self.config.model_path or DEFAULT_MODEL_PATH)
        if not model_path.exists():
            if not self.config.download:
                raise DetectorError(f"model file not found: {model_path}")
            download_model(HAND_LANDMARKER_MODEL_URL, model_path)

        delegate = (python.BaseOptions.Delegate.GPU
                    if self.config.delegate.upper() == "GPU"
                    else python.BaseOptions.Delegate.CPU)

        options = vision.HandLandmarkerOptions(
            base_options=python.BaseOptions(
                model_asset_path=os.fspath(model_path), delegate=delegate,
            ),
            running_mode=vision.RunningMode.VIDEO,
            num_hands=self.config.max_num_hands,
            min_hand_detection_confidence=self.config.min_detection_confidence,
            min_hand_presence_confidence=self.config.min_presence_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )
        try:
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise DetectorError(f"failed to create HandLandmarker: {e}") from e

        self._last_timestamp_ms = -1
        logger.info("HandLandmarker initialized (model=%s, delegate=%s, max_hands=%d)",
                    model_path, self.config.delegate, self.config.max_num_hands)

    def stop(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker stopped")

    @property
    def is_ready(self) -> bool:
        return self._landmarker is not None

    def detect(self, frame: np.ndarray, timestamp_ms: int) -> List[HandObservation]:
        """
        Detect hands in a BGR frame.

        Args:
            frame: BGR image as numpy array (H, W, 3)
            timestamp_ms: Frame timestamp; VIDEO mode needs it strictly increasing

        Returns:
            List of HandObservation, empty if no hand was found
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return []

        timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self._landmarker.detect_for_video(mp_image, timestamp_ms)

        hands = []
        for i, hand_landmarks in enumerate(result.hand_landmarks):
            if i >= len(result.hand_world_landmarks):
                break
            handedness, score = "unknown", 0.0
            if result.handedness and len(result.handedness) > i:
                handedness = result.handedness[i][0].category_name
                score = result.handedness[i][0].score

            hands.append(HandObservation(
                landmarks=[Landmark(lm.x, lm.y, lm.z) for lm in hand_landmarks],
                world_landmarks=[Landmark(lm.x, lm.y, lm.z) for lm in result.hand_world_landmarks[i]],
                handedness=handedness,
                score=score,
            ))
        return hands

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
