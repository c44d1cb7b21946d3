"""Gesture recognition and signal smoothing."""
from .gesture_classifier import GestureClassifier, GestureClassifierConfig
from .temporal_filter import ExponentialSmoother, HandSignalFilter

__all__ = [
    "GestureClassifier",
    "GestureClassifierConfig",
    "ExponentialSmoother",
    "HandSignalFilter",
]
