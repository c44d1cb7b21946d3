"""
Configuration loading.
Reads a YAML file, merges it over the built-in defaults and provides
typed access.

An AppConfig is an ordinary value: the application loads one and hands
the relevant section to each component at construction.
"""

import copy
import math
import os
import logging

import yaml

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
DEFAULT_CONFIG_PATH = os.path.join(_BASE_DIR, "config", "config.yaml")

DEFAULTS = {
    "gesture": {
        "smoothing_factor": 0.28,
        "finger_bend_threshold": -0.015,
        "min_extended_for_open": 4,
        "max_extended_for_fist": 0,
        "point_allows_thumb": False,
    },
    "camera": {
        "initial_radius": 58.0,
        "initial_theta": math.pi * 0.45,
        "initial_phi": math.pi * 0.5,
        "min_radius": 28.0,
        "max_radius": 86.0,
        "min_openness": 0.055,
        "max_openness": 0.16,
        "rotate_sensitivity": 3.8,
        "polar_epsilon": 0.16,
        "zoom_lerp_factor": 0.08,
        "target_radius_lerp_factor": 0.25,
        "fov": 60.0,
        "near": 0.1,
        "far": 400.0,
    },
    "selection": {
        "highlight_clear_delay_ms": 2200,
        "no_hand_clear_delay_ms": 800,
        "empty_clear_delay_ms": 600,
    },
    "starfield": {
        "radius": 48.0,
        "star_count": 360,
        "planet_count": 5,
        "rotation_speed": 0.045,
        "seed": None,
        "highlight_emissive": 0xF0F6FF,
        "highlight_emissive_intensity": 1.6,
        "highlight_scale": 1.3,
    },
    "detector": {
        "model_path": "",
        "max_num_hands": 1,
        "min_detection_confidence": 0.5,
        "min_presence_confidence": 0.5,
        "min_tracking_confidence": 0.5,
        "delegate": "CPU",
        "download": True,
    },
    "video": {
        "device_id": 0,
        "width": 960,
        "height": 720,
        "fps": 30,
        "backend": "auto",
    },
    "visualization": {
        "enabled": True,
        "window_name": "StarNav",
        "show_landmarks": True,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_size_mb": 10,
        "backup_count": 3,
    },
}

# Schema: sections and expected types of their critical fields
_CONFIG_SCHEMA = {
    "gesture": {
        "smoothing_factor": float,
        "finger_bend_threshold": float,
        "min_extended_for_open": int,
        "max_extended_for_fist": int,
        "point_allows_thumb": bool,
    },
    "camera": {
        "min_radius": float,
        "max_radius": float,
        "min_openness": float,
        "max_openness": float,
        "rotate_sensitivity": float,
        "zoom_lerp_factor": float,
        "target_radius_lerp_factor": float,
    },
    "selection": {
        "highlight_clear_delay_ms": float,
        "no_hand_clear_delay_ms": float,
        "empty_clear_delay_ms": float,
    },
    "video": {
        "device_id": int,
        "width": int,
        "height": int,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class AppConfig:
    """Application configuration (defaults + optional YAML overrides)."""

    def __init__(self, data: dict = None):
        self._data = _deep_merge(copy.deepcopy(DEFAULTS), data or {})

    @classmethod
    def load(cls, config_path: str = None) -> "AppConfig":
        """Load configuration from a YAML file.

        A missing file is not an error: the defaults are used.
        """
        config_path = config_path or DEFAULT_CONFIG_PATH
        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            data = {}

        if not isinstance(data, dict):
            logger.warning("Config root should be a mapping, got %s; using defaults",
                           type(data).__name__)
            data = {}

        config = cls(data)
        config.validate()
        return config

    def validate(self) -> list:
        """Check critical fields against the schema; problems are logged."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in fields.items():
                if field_name not in section:
                    continue
                value = section[field_name]
                # bool is an int subclass; never accept it for numbers
                if isinstance(value, bool) and expected_type is not bool:
                    ok = False
                elif expected_type is float:
                    ok = isinstance(value, (int, float))
                else:
                    ok = isinstance(value, expected_type)
                if not ok:
                    warnings.append(
                        f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                        f"got {type(value).__name__} ({value!r})"
                    )

        camera = self.camera
        if isinstance(camera, dict) and camera.get("min_openness", 0) >= camera.get("max_openness", 1):
            warnings.append("camera.min_openness must be below camera.max_openness")

        for w in warnings:
            logger.warning("Config validation: %s", w)
        if not warnings:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'camera.min_radius'."""
        value = self._data
        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value):
        """Override a nested value (command-line overrides)."""
        keys = key_path.split(".")
        target = self._data
        for key in keys[:-1]:
            target = target.setdefault(key, {})
        target[keys[-1]] = value

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        return self._data.get(section, {})

    @property
    def gesture(self) -> dict:
        return self.get_section("gesture")

    @property
    def camera(self) -> dict:
        return self.get_section("camera")

    @property
    def selection(self) -> dict:
        return self.get_section("selection")

    @property
    def starfield(self) -> dict:
        return self.get_section("starfield")

    @property
    def detector(self) -> dict:
        return self.get_section("detector")

    @property
    def video(self) -> dict:
        return self.get_section("video")

    @property
    def visualization(self) -> dict:
        return self.get_section("visualization")

    @property
    def log_settings(self) -> dict:
        return self.get_section("logging")
