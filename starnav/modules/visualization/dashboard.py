"""
OpenCV overlay for the webcam preview: hand skeleton, gesture and
selection status, orbit camera readout.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from starnav.core.types import Gesture
from starnav.modules.detection.landmark_extractor import FINGER_TIPS, HAND_CONNECTIONS

logger = logging.getLogger(__name__)

_GESTURE_LABELS = {
    Gesture.OPEN: "Gesture: open palm (zoom out)",
    Gesture.FIST: "Gesture: fist (zoom in)",
    Gesture.POINT: "Gesture: pointing (select)",
    Gesture.NEUTRAL: "Gesture: relaxed",
    Gesture.NONE: "Gesture: no hand detected",
}

NO_SELECTION_LABEL = "No object selected"


def describe_gesture(gesture: Gesture) -> str:
    """Human-readable status line for a gesture."""
    return _GESTURE_LABELS.get(gesture, _GESTURE_LABELS[Gesture.NONE])


def describe_selection(selection) -> str:
    """Human-readable status line for the current selection."""
    if selection is None:
        return NO_SELECTION_LABEL
    return f"{selection.label} ({selection.kind_label})"


@dataclass
class DashboardConfig:
    show_landmarks: bool = True
    show_camera_state: bool = True
    show_fps: bool = True
    opacity: float = 0.6
    bar_height: int = 90

    @classmethod
    def from_dict(cls, d: dict) -> "DashboardConfig":
        return cls(
            show_landmarks=d.get("show_landmarks", True),
            show_camera_state=d.get("show_camera_state", True),
            show_fps=d.get("show_fps", True),
            opacity=d.get("opacity", 0.6),
            bar_height=d.get("bar_height", 90),
        )


class Dashboard:
    """Renders the status overlay onto BGR frames."""

    _LINE_COLOR = (255, 173, 118)   # BGR of rgb(118, 173, 255)
    _POINT_COLOR = (255, 173, 118)
    _TEXT_COLOR = (255, 255, 255)
    _SELECT_COLOR = (0, 220, 255)

    def __init__(self, config: Optional[DashboardConfig] = None):
        self.config = config or DashboardConfig()

    def draw_hand(self, frame: np.ndarray, observation) -> np.ndarray:
        """Draw the 21-landmark skeleton; fingertips get larger dots."""
        if observation is None or not self.config.show_landmarks:
            return frame
        h, w = frame.shape[:2]
        points = [(int(x * w), int(y * h)) for x, y, _ in observation.landmarks]

        for start, end in HAND_CONNECTIONS:
            cv2.line(frame, points[start], points[end], self._LINE_COLOR, 4, cv2.LINE_AA)
        for i, point in enumerate(points):
            radius = 6 if i in FINGER_TIPS else 4
            cv2.circle(frame, point, radius, self._POINT_COLOR, -1, cv2.LINE_AA)
        return frame

    def render(self, frame: np.ndarray, state: dict) -> np.ndarray:
        """Draw the status bar.

        Args:
            frame: BGR frame to draw on
            state: dict with:
                - gesture: Gesture
                - selection: selected scene object or None
                - camera: CameraState
                - fps: float
        """
        w = frame.shape[1]
        bar_h = self.config.bar_height

        overlay = frame.copy()
        cv2.rectangle(overlay, (0, 0), (w, bar_h), (20, 20, 20), -1)
        cv2.addWeighted(overlay, self.config.opacity, frame, 1 - self.config.opacity, 0, frame)

        gesture = state.get("gesture", Gesture.NONE)
        cv2.putText(frame, describe_gesture(gesture), (15, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, self._TEXT_COLOR, 2)

        selection = state.get("selection")
        color = self._SELECT_COLOR if selection is not None else self._TEXT_COLOR
        cv2.putText(frame, describe_selection(selection), (15, 62),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 1)

        camera = state.get("camera")
        if self.config.show_camera_state and camera is not None:
            text = (f"theta {camera.theta:+.2f}  phi {camera.phi:.2f}  "
                    f"r {camera.radius:.1f}/{camera.target_radius:.1f}")
            cv2.putText(frame, text, (w - 360, 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, self._TEXT_COLOR, 1)

        if self.config.show_fps:
            cv2.putText(frame, f"FPS: {state.get('fps', 0.0):.1f}", (w - 360, 62),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, self._TEXT_COLOR, 1)
        return frame
