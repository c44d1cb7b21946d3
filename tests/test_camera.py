"""
Tests for Capture and Detection Wrappers
=========================================
"""

import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from starnav.core.errors import DetectorError
from starnav.modules.capture.camera_manager import CameraManager, CameraManagerConfig
from starnav.modules.detection.hand_detector import (
    HandDetector, HandDetectorConfig, download_model,
)


class TestCameraManagerConfig:
    """Test suite for CameraManagerConfig."""

    def test_default_values(self):
        config = CameraManagerConfig()
        assert config.device_id == 0
        assert config.width == 960
        assert config.height == 720
        assert config.fps == 30
        assert config.buffer_size == 1

    def test_from_dict_partial(self):
        config = CameraManagerConfig.from_dict({"device_id": 2, "width": 640})
        assert config.device_id == 2
        assert config.width == 640
        assert config.height == 720  # Default


class TestCameraManager:
    """Test suite for threaded capture with a mocked VideoCapture."""

    @pytest.fixture
    def mock_cv2(self):
        """Mock OpenCV VideoCapture."""
        with patch("starnav.modules.capture.camera_manager.cv2") as mock:
            mock_cap = MagicMock()
            mock_cap.isOpened.return_value = True
            mock_cap.read.return_value = (True, np.zeros((72, 96, 3), dtype=np.uint8))
            mock_cap.get.return_value = 30.0
            mock.VideoCapture.return_value = mock_cap
            yield mock

    def test_read_before_capture(self):
        camera = CameraManager()
        assert camera.read() == (None, None)
        assert camera.frame_size == (960, 720)
        assert not camera.is_open

    def test_open_failure(self, mock_cv2):
        mock_cv2.VideoCapture.return_value.isOpened.return_value = False
        camera = CameraManager()
        assert camera.open() is False
        assert not camera.is_open

    def test_async_capture_stamps_frames(self, mock_cv2):
        camera = CameraManager(CameraManagerConfig(warmup_frames=0))
        assert camera.open()
        camera.start_async()
        try:
            deadline = time.monotonic() + 2.0
            timestamp, frame = camera.read()
            while frame is None and time.monotonic() < deadline:
                time.sleep(0.01)
                timestamp, frame = camera.read()

            assert frame is not None
            assert frame.shape == (72, 96, 3)
            assert isinstance(timestamp, float)
            assert camera.frame_size == (96, 72)
        finally:
            camera.stop()
        assert not camera.is_open

    def test_read_returns_copy(self, mock_cv2):
        camera = CameraManager(CameraManagerConfig(warmup_frames=0))
        camera._frame = np.zeros((2, 2, 3), dtype=np.uint8)
        camera._timestamp = 1.0
        _, frame = camera.read()
        frame[:] = 255
        assert camera.read()[1].max() == 0


def fake_result(num_hands: int = 1):
    landmark = SimpleNamespace(x=0.5, y=0.4, z=0.0)
    world = SimpleNamespace(x=0.01, y=0.02, z=0.03)
    return SimpleNamespace(
        hand_landmarks=[[landmark] * 21 for _ in range(num_hands)],
        hand_world_landmarks=[[world] * 21 for _ in range(num_hands)],
        handedness=[[SimpleNamespace(category_name="Left", score=0.9)] for _ in range(num_hands)],
    )


class TestHandDetector:
    """Test suite for the MediaPipe wrapper (no model required)."""

    def test_config_from_dict(self):
        config = HandDetectorConfig.from_dict({"max_num_hands": 2, "delegate": "GPU"})
        assert config.max_num_hands == 2
        assert config.delegate == "GPU"
        assert config.min_detection_confidence == 0.5
        assert config.download is True

    def test_missing_model_without_download(self, tmp_path):
        detector = HandDetector(HandDetectorConfig(
            model_path=str(tmp_path / "missing.task"), download=False,
        ))
        with pytest.raises(DetectorError):
            detector.start()
        assert not detector.is_ready

    def test_download_failure(self, tmp_path):
        with patch("starnav.modules.detection.hand_detector.urllib.request.urlretrieve",
                   side_effect=OSError("offline")):
            with pytest.raises(DetectorError):
                download_model("https://example.invalid/model.task", tmp_path / "model.task")

    def test_detect_before_start(self):
        detector = HandDetector()
        assert detector.detect(np.zeros((4, 4, 3), dtype=np.uint8), 0) == []

    def test_detect_converts_result(self):
        detector = HandDetector()
        detector._landmarker = MagicMock()
        detector._landmarker.detect_for_video.return_value = fake_result()

        hands = detector.detect(np.zeros((8, 8, 3), dtype=np.uint8), 1000)
        assert len(hands) == 1
        assert hands[0].handedness == "Left"
        assert hands[0].landmarks.shape == (21, 3)
        np.testing.assert_allclose(hands[0].world_landmarks[0], (0.01, 0.02, 0.03))

    def test_timestamps_forced_increasing(self):
        detector = HandDetector()
        detector._landmarker = MagicMock()
        detector._landmarker.detect_for_video.return_value = fake_result(0)
        frame = np.zeros((8, 8, 3), dtype=np.uint8)

        detector.detect(frame, 500)
        detector.detect(frame, 500)
        detector.detect(frame, 400)
        sent = [call.args[1] for call in detector._landmarker.detect_for_video.call_args_list]
        assert sent == [500, 501, 502]

    def test_stop_releases_landmarker(self):
        detector = HandDetector()
        landmarker = MagicMock()
        detector._landmarker = landmarker
        detector.stop()
        landmarker.close.assert_called_once()
        assert not detector.is_ready
