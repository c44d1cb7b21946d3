"""
StarNav - Gesture Navigation for a 3D Starfield
================================================

Turns per-frame hand landmarks from a webcam into a stable control
signal for an orbit camera and object selection.

Modules:
    - core: shared types, event bus, gesture loop controller
    - capture: webcam frame acquisition
    - detection: MediaPipe hand landmarks and geometric features
    - recognition: gesture classification and temporal smoothing
    - control: orbit camera, selection debouncing
    - scene: pickable starfield objects and ray picking
    - visualization: OpenCV overlay
    - utils: configuration, logging, geometry, performance
"""

__version__ = "1.0.0"
