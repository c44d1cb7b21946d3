"""
Logging setup and interaction event logging.
"""

import os
import logging
import logging.handlers
import time


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console (and optional rotating file) logging for the application."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-40s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class InteractionLogger:
    """Logs gesture transitions and selection changes.

    Subscribed to the event bus by the application; per-frame updates that
    do not change the gesture are not recorded.
    """

    def __init__(self, max_history: int = 500):
        self.logger = logging.getLogger("interaction_events")
        self._history = []
        self._max_history = max_history
        self._current_gesture = None

    def on_update(self, update, **kwargs):
        gesture = update.gesture.value
        if gesture == self._current_gesture:
            return
        previous = self._current_gesture
        self._current_gesture = gesture
        self._record({"type": "gesture", "gesture": gesture, "previous": previous})
        self.logger.info("Gesture: %-8s (was %s)", gesture, previous or "n/a")

    def on_selection(self, selection, **kwargs):
        label = selection.label if selection is not None else None
        self._record({"type": "selection", "label": label})
        self.logger.info("Selection: %s", label or "cleared")

    def on_error(self, error, **kwargs):
        self._record({"type": "error", "error": str(error)})
        self.logger.error("Gesture error: %s", error)

    def _record(self, entry: dict):
        entry["timestamp"] = time.time()
        self._history.append(entry)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

    def get_history(self, last_n=None):
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def current_gesture(self):
        return self._current_gesture
