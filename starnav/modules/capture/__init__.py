"""Webcam frame acquisition."""
from .camera_manager import CameraManager, CameraManagerConfig

__all__ = ["CameraManager", "CameraManagerConfig"]
