"""In-memory cache for app settings."""

from __future__ import annotations

import copy
import os
import threading
from typing import Any

from utils.file_utils import load_json
from utils.log_utils import set_log_level, tprint

DEFAULT_SETTINGS_PATH = "config/app_settings.json"

_DEFAULTS: dict[str, Any] = {
    "log_level": "INFO",
    "camera": {
        "device_index": 0,
        "mirror": True,
    },
    "hand_landmarker": {
        "model_path": "models/hand_landmarker.task",
        "num_hands": 1,
        "min_hand_detection_confidence": 0.5,
        "min_hand_presence_confidence": 0.5,
        "min_tracking_confidence": 0.5,
        "landmark_index": 8,
    },
    "canvas": {
        "width": 0,
        "height": 0,
        "background": [255, 255, 255],
        "stroke_color": [0, 0, 255],
        "stroke_width": 10,
        "window_name": "Air Canvas",
        "snapshot_dir": "snapshots",
    },
    "voice": {
        "model_path": "small",
        "device": "cpu",
        "compute_type": "int8",
        "language": "en",
        "sample_rate": 16000,
        "block_ms": 30,
        "energy_threshold": 500.0,
        "silence_secs": 1.0,
        "max_utterance_secs": 15.0,
        "error_backoff_secs": 0.5,
    },
}

# Env var -> (section, key, type)
_ENV_OVERRIDES: dict[str, tuple[str, str, type]] = {
    "CAMERA_INDEX": ("camera", "device_index", int),
    "HAND_LANDMARKER_MODEL": ("hand_landmarker", "model_path", str),
    "LOCAL_WHISPER_MODEL_PATH": ("voice", "model_path", str),
    "LOCAL_WHISPER_DEVICE": ("voice", "device", str),
    "LOCAL_WHISPER_COMPUTE_TYPE": ("voice", "compute_type", str),
    "LOCAL_WHISPER_LANGUAGE": ("voice", "language", str),
}

_lock = threading.Lock()
_settings_cache: dict[str, Any] = {}


def settings_path() -> str:
    return os.getenv("APP_SETTINGS_PATH", DEFAULT_SETTINGS_PATH)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env(data: dict[str, Any]) -> None:
    for env_name, (section, key, cast) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == "":
            continue
        try:
            data.setdefault(section, {})[key] = cast(raw.strip())
        except ValueError:
            tprint(f"[SETTINGS][WARN] Ignoring {env_name}={raw!r} (expected {cast.__name__})")
    if level := os.getenv("LOG_LEVEL"):
        data["log_level"] = level


def refresh_settings() -> dict[str, Any]:
    """Reload settings from disk and replace the cache."""
    data = load_json(settings_path())
    if not isinstance(data, dict):
        data = {}
    merged = _merge(_DEFAULTS, data)
    _apply_env(merged)
    with _lock:
        _settings_cache.clear()
        _settings_cache.update(merged)
        snapshot = copy.deepcopy(_settings_cache)
    set_log_level(snapshot.get("log_level"))
    return snapshot


def get_settings() -> dict[str, Any]:
    """Return a copy of the cached settings."""
    with _lock:
        cached = copy.deepcopy(_settings_cache) if _settings_cache else None
    if cached is None:
        return refresh_settings()
    return cached


def get_section(name: str) -> dict[str, Any]:
    section = get_settings().get(name)
    return section if isinstance(section, dict) else {}


def is_deep_logging() -> bool:
    """Return True when log_level requests deep tracing."""
    level = str(get_settings().get("log_level", "")).upper()
    return level in {"DEEP"}


def deep_log(message: str) -> None:
    """Per-frame tracing, printed only with log_level=DEEP."""
    if is_deep_logging():
        tprint(f"[DEEP]{message}")
