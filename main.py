#!/usr/bin/env python3
"""
StarNav - gesture navigation for a 3D starfield
Application entry point.

Wires the gesture loop to its consumers over the event bus and drives
the two per-frame callbacks on one thread:
    - gesture step: runs the detector when the webcam has a new frame
    - render tick:  eases the orbit camera, rotates the starfield and
                    runs due highlight clears

Usage:
    python main.py                     # Webcam preview with overlay
    python main.py --no-window         # Headless, logs only
    python main.py --config my.yaml    # Custom configuration
"""

import argparse
import logging
import signal
import time

import cv2

from starnav.core.controller import GestureConfig, GestureController
from starnav.core.events import EventBus, Events
from starnav.core.types import Gesture
from starnav.modules.capture.camera_manager import CameraManager, CameraManagerConfig
from starnav.modules.control.camera_controller import OrbitCameraConfig, OrbitCameraController
from starnav.modules.control.selection import SelectionConfig, SelectionController
from starnav.modules.detection.hand_detector import HandDetector, HandDetectorConfig
from starnav.modules.scene.raycaster import ScenePicker
from starnav.modules.scene.starfield import Starfield, StarfieldConfig
from starnav.modules.utils.config import AppConfig
from starnav.modules.utils.logger import InteractionLogger, setup_logging
from starnav.modules.utils.performance_monitor import PerformanceMonitor
from starnav.modules.visualization.dashboard import Dashboard, DashboardConfig

logger = logging.getLogger(__name__)


class StarfieldNavigator:
    """Main application: gesture loop + orbit camera + selection."""

    def __init__(self, config: AppConfig, show_window: bool = True):
        self._config = config
        self._show_window = show_window and config.get("visualization.enabled", True)
        self._window_name = config.get("visualization.window_name", "StarNav")
        self._running = False

        self._bus = EventBus()
        self._perf = PerformanceMonitor()

        # Gesture side
        video_config = CameraManagerConfig.from_dict(config.video)
        self._camera = CameraManager(video_config)
        self._detector = HandDetector(HandDetectorConfig.from_dict(config.detector))
        self._gestures = GestureController(
            video=self._camera,
            detector=self._detector,
            config=GestureConfig.from_dict(config.gesture),
            event_bus=self._bus,
            performance_monitor=self._perf,
        )

        # Consumer side
        self._orbit = OrbitCameraController(OrbitCameraConfig.from_dict(config.camera))
        self._starfield = Starfield(StarfieldConfig.from_dict(config.starfield))
        self._picker = ScenePicker(self._starfield, self._orbit,
                                   aspect=video_config.width / video_config.height)
        self._selection = SelectionController(
            self._starfield, self._picker,
            SelectionConfig.from_dict(config.selection),
            event_bus=self._bus,
        )

        self._dashboard = Dashboard(DashboardConfig.from_dict(config.visualization))
        self._interaction_log = InteractionLogger()
        self._status_message = "Starting gesture recognition..."

        # --- Wire Event Callbacks ---
        self._bus.subscribe(Events.UPDATE, self._orbit.handle_update)
        self._bus.subscribe(Events.UPDATE, self._selection.handle_update)
        self._bus.subscribe(Events.UPDATE, self._interaction_log.on_update)
        self._bus.subscribe(Events.SELECTION_CHANGED, self._interaction_log.on_selection)
        self._bus.subscribe(Events.STATUS, self._on_status)
        self._bus.subscribe(Events.ERROR, self._on_error)

        logger.info("StarfieldNavigator initialized (%d pickable objects)",
                    len(self._starfield.get_pickable_objects()))

    def _on_status(self, message, **kwargs):
        self._status_message = message

    def _on_error(self, error, **kwargs):
        self._status_message = f"Gesture recognition error: {error}"
        self._interaction_log.on_error(error)

    def start(self) -> bool:
        """Open the webcam, load the model and run until quit."""
        if not self._camera.open():
            logger.error("Failed to open camera. Check connection and permissions.")
            return False
        self._camera.start_async()

        if not self._gestures.initialize():
            logger.error("Gesture recognition unavailable, shutting down")
            self._camera.stop()
            return False

        self._gestures.start()
        self._running = True
        self._run_main_loop()
        return True

    def _render_tick(self, dt: float):
        with self._perf.measure("render"):
            self._starfield.update(dt)
            self._orbit.tick(dt)
            self._selection.poll()

    def _run_main_loop(self):
        last = time.perf_counter()
        while self._running:
            self._gestures.step()

            now = time.perf_counter()
            self._render_tick(now - last)
            last = now

            if self._show_window:
                self._show_preview()
                key = cv2.waitKey(1) & 0xFF
                if key == ord("q"):
                    self._running = False
                elif key == ord("p"):
                    self._perf.print_report()
            else:
                time.sleep(0.001)

        self._shutdown()

    def _show_preview(self):
        _, frame = self._camera.read()
        if frame is None:
            return
        self._picker.set_aspect(*self._camera.frame_size)
        self._dashboard.draw_hand(frame, self._gestures.last_observation)
        frame = cv2.flip(frame, 1)

        update = self._gestures.last_update
        state = {
            "gesture": update.gesture if update is not None else Gesture.NONE,
            "selection": self._selection.active_selection,
            "camera": self._orbit.state,
            "fps": self._perf.fps,
        }
        self._dashboard.render(frame, state)
        cv2.putText(frame, self._status_message, (15, frame.shape[0] - 20),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (200, 200, 200), 1)
        cv2.imshow(self._window_name, frame)

    def _shutdown(self):
        """Clean shutdown of all modules."""
        logger.info("Shutting down...")
        self._running = False
        self._gestures.close()
        self._camera.stop()
        if self._show_window:
            cv2.destroyAllWindows()
        self._perf.print_report()
        logger.info("Shutdown complete.")

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._running = False


def parse_args():
    parser = argparse.ArgumentParser(
        description="StarNav - hand-gesture navigation for a 3D starfield"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config.yaml"
    )
    parser.add_argument(
        "--camera", type=int, default=None,
        help="Camera device ID"
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        help="Logging level (DEBUG, INFO, WARNING, ...)"
    )
    parser.add_argument(
        "--no-window", action="store_true",
        help="Run without the preview window"
    )
    return parser.parse_args()


def main():
    args = parse_args()

    config = AppConfig.load(args.config)
    if args.camera is not None:
        config.set("video.device_id", args.camera)
    if args.log_level:
        config.set("logging.level", args.log_level)

    log_cfg = config.log_settings
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  STARNAV - gesture starfield navigation")
    logger.info("=" * 60)

    app = StarfieldNavigator(config, show_window=not args.no_window)

    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    if not app.start():
        raise SystemExit(1)


if __name__ == "__main__":
    main()
