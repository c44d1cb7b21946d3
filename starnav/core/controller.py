"""
Gesture loop: landmarks -> gesture, smoothed signal -> ``update`` events.

Architecture:
    VideoSource -> HandDetector -> LandmarkExtractor -> GestureClassifier
    -> HandSignalFilter -> EventBus ("update")

One call to step() is one cooperative iteration. A frame whose
presentation timestamp has not advanced since the last processed frame is
skipped, never queued. stop() clears the running flag, which is checked at
the top of the next iteration.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from starnav.core.errors import DetectorError, GestureModelError
from starnav.core.events import EventBus, Events
from starnav.core.types import GestureUpdate, HandObservation, Vec2
from starnav.modules.detection.landmark_extractor import LandmarkExtractor
from starnav.modules.recognition.gesture_classifier import (
    GestureClassifier, GestureClassifierConfig,
)
from starnav.modules.recognition.temporal_filter import HandSignalFilter

logger = logging.getLogger(__name__)


@dataclass
class GestureConfig:
    """Settings for the gesture recognition stages."""
    smoothing_factor: float = 0.28
    finger_bend_threshold: float = -0.015
    min_extended_for_open: int = 4
    max_extended_for_fist: int = 0
    point_allows_thumb: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> "GestureConfig":
        """Create config from dictionary."""
        return cls(
            smoothing_factor=d.get("smoothing_factor", 0.28),
            finger_bend_threshold=d.get("finger_bend_threshold", -0.015),
            min_extended_for_open=d.get("min_extended_for_open", 4),
            max_extended_for_fist=d.get("max_extended_for_fist", 0),
            point_allows_thumb=d.get("point_allows_thumb", False),
        )

    def classifier_config(self) -> GestureClassifierConfig:
        return GestureClassifierConfig.from_dict(asdict(self))


class GestureController:
    """Runs the detector on new video frames and publishes gesture updates.

    Channels: ``status`` (message=str), ``error`` (error=Exception) and
    ``update`` (update=GestureUpdate).

    Example:
        >>> controller = GestureController(camera, HandDetector())
        >>> controller.on(Events.UPDATE, on_update)
        >>> if controller.initialize():
        ...     controller.start()
        ...     controller.run()
    """

    def __init__(self, video, detector, config: Optional[GestureConfig] = None,
                 event_bus: Optional[EventBus] = None, performance_monitor=None):
        self._video = video
        self._detector = detector
        self.config = config or GestureConfig()
        self._bus = event_bus or EventBus()
        self._perf = performance_monitor

        self._extractor = LandmarkExtractor(self.config.finger_bend_threshold)
        self._classifier = GestureClassifier(self.config.classifier_config())
        self._filter = HandSignalFilter(self.config.smoothing_factor)

        self._ready = False
        self._running = False
        self._last_timestamp = None
        self._last_observation: Optional[HandObservation] = None
        self._last_update: Optional[GestureUpdate] = None
        self._frames_processed = 0
        self._frames_skipped = 0

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def on(self, event_name: str, handler: Callable, priority: int = 0):
        self._bus.subscribe(event_name, handler, priority)

    def off(self, event_name: str, handler: Callable):
        self._bus.unsubscribe(event_name, handler)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self) -> bool:
        """Load the landmark model.

        On failure the reason is published on the ``error`` channel and the
        loop stays unstartable until initialize() succeeds.
        """
        if self._ready and self._detector.is_ready:
            return True
        try:
            self._detector.start()
        except DetectorError as e:
            self._ready = False
            logger.error("Gesture detector initialization failed: %s", e)
            self._bus.emit(Events.ERROR, error=e)
            return False

        self._ready = True
        logger.info("Gesture recognition ready")
        self._bus.emit(Events.STATUS, message="Gesture recognition ready")
        return True

    def start(self) -> bool:
        """Start (or restart) the loop. Requires a successful initialize()."""
        if not self._ready:
            logger.warning("start() called before the detector was initialized")
            return False
        if self._running:
            return True
        self._running = True
        self._last_timestamp = None
        self._filter.reset()
        logger.info("Gesture loop started")
        return True

    def stop(self):
        if self._running:
            logger.info("Gesture loop stopped after %d frames (%d skipped)",
                        self._frames_processed, self._frames_skipped)
        self._running = False

    def close(self):
        """Stop the loop and release the detector."""
        self.stop()
        self._detector.stop()
        self._ready = False

    # -------------------------------------------------------------------------
    # Loop
    # -------------------------------------------------------------------------

    def run(self, should_continue: Optional[Callable[[], bool]] = None):
        """Call step() until stop() is called or ``should_continue`` returns False."""
        while self._running:
            if should_continue is not None and not should_continue():
                break
            self.step()

    def step(self) -> Optional[GestureUpdate]:
        """Process the current video frame if it is new.

        Returns:
            The emitted GestureUpdate, or None when nothing was processed
        """
        if not self._running:
            return None

        if not self._detector.is_ready:
            error = GestureModelError("hand landmark model is not loaded")
            logger.error("Gesture loop halted: %s", error)
            self._running = False
            self._bus.emit(Events.ERROR, error=error)
            return None

        timestamp, frame = self._video.read()
        if frame is None or timestamp is None:
            self._frames_skipped += 1
            return None
        if self._last_timestamp is not None and timestamp <= self._last_timestamp:
            self._frames_skipped += 1
            return None
        self._last_timestamp = timestamp

        if self._perf is not None:
            with self._perf.measure("detection"):
                hands = self._detector.detect(frame, int(timestamp * 1000))
        else:
            hands = self._detector.detect(frame, int(timestamp * 1000))

        if hands:
            observation = hands[0]
            update = self.analyze(observation)
        else:
            observation = None
            self._filter.hand_lost()
            update = GestureUpdate.absent()

        self._last_observation = observation
        self._last_update = update
        self._frames_processed += 1
        if self._perf is not None:
            self._perf.tick()

        self._bus.emit(Events.UPDATE, update=update)
        return update

    def analyze(self, observation: HandObservation) -> GestureUpdate:
        """Turn one hand observation into a present-hand update."""
        world = observation.world_landmarks
        finger_states = self._extractor.get_finger_states(world)
        gesture = self._classifier.classify(finger_states)
        openness = self._extractor.get_openness(world)

        # Mirror x so moving the hand right orbits right on a selfie view
        anchor = self._extractor.get_anchor(observation.landmarks)
        raw_position = Vec2(1.0 - float(anchor[0]), float(anchor[1]))
        smoothed_openness, position, movement = self._filter.update(openness, raw_position)

        tip = self._extractor.get_pointer(observation.landmarks)
        pointer = Vec2(float(tip[0]), float(tip[1]))

        logger.debug("Frame: gesture=%s fingers=%s openness=%.3f",
                     gesture.value, finger_states, openness)

        return GestureUpdate(
            gesture=gesture,
            present=True,
            openness=smoothed_openness,
            finger_states=finger_states,
            position=position,
            movement=movement,
            pointer=pointer,
        )

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def last_observation(self) -> Optional[HandObservation]:
        return self._last_observation

    @property
    def last_update(self) -> Optional[GestureUpdate]:
        return self._last_update

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    @property
    def frames_skipped(self) -> int:
        return self._frames_skipped

    @property
    def signal_filter(self) -> HandSignalFilter:
        return self._filter
