"""Index-fingertip detection on top of MediaPipe's Hand Landmarker task.

Frames are submitted asynchronously (LIVE_STREAM mode); the landmarker calls
back on its own thread with the result, which is reduced to a single
normalized point (or None when no hand is visible) and forwarded to the
registered listener.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

import cv2
import numpy as np

from drawing_module.stroke_tracker import Point
from utils.log_utils import tprint
from utils.settings_store import deep_log

INDEX_FINGER_TIP = 8
_HAND_LANDMARKS = 21

DetectionListener = Callable[[Optional[Point], int], None]
LandmarkerFactory = Callable[[Callable[..., None]], Any]


def fingertip_from_result(result: Any, landmark_index: int = INDEX_FINGER_TIP) -> Point | None:
    """Pick `landmark_index` of the first detected hand, or None if no hand."""
    hands = getattr(result, "hand_landmarks", None) if result is not None else None
    if not hands:
        return None
    landmarks = hands[0]
    if landmark_index >= len(landmarks):
        return None
    lm = landmarks[landmark_index]
    return Point(float(lm.x), float(lm.y))


class FingertipDetector:
    def __init__(
        self,
        model_path: str | Path,
        *,
        num_hands: int = 1,
        min_hand_detection_confidence: float = 0.5,
        min_hand_presence_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        landmark_index: int = INDEX_FINGER_TIP,
        max_inflight_secs: float = 0.5,
        landmarker_factory: LandmarkerFactory | None = None,
    ) -> None:
        if not 0 <= landmark_index < _HAND_LANDMARKS:
            raise ValueError(f"landmark_index must be in [0, {_HAND_LANDMARKS - 1}]")
        self.model_path = Path(model_path)
        self.num_hands = num_hands
        self.min_hand_detection_confidence = min_hand_detection_confidence
        self.min_hand_presence_confidence = min_hand_presence_confidence
        self.min_tracking_confidence = min_tracking_confidence
        self.landmark_index = landmark_index
        self.max_inflight_secs = max_inflight_secs
        self._factory = landmarker_factory or self._create_landmarker
        self._landmarker: Any = None
        self._listener: DetectionListener | None = None
        self._lock = threading.Lock()
        self._last_timestamp_ms = -1
        self._submitted_at: float | None = None

    @classmethod
    def from_settings(cls, cfg: dict, **kwargs: Any) -> "FingertipDetector":
        return cls(
            cfg.get("model_path", "models/hand_landmarker.task"),
            num_hands=int(cfg.get("num_hands", 1)),
            min_hand_detection_confidence=float(cfg.get("min_hand_detection_confidence", 0.5)),
            min_hand_presence_confidence=float(cfg.get("min_hand_presence_confidence", 0.5)),
            min_tracking_confidence=float(cfg.get("min_tracking_confidence", 0.5)),
            landmark_index=int(cfg.get("landmark_index", INDEX_FINGER_TIP)),
            **kwargs,
        )

    def set_listener(self, listener: DetectionListener | None) -> None:
        self._listener = listener

    def open(self) -> None:
        if self._landmarker is not None:
            return
        self._landmarker = self._factory(self._on_result)
        tprint(
            f"[HAND] Landmarker ready (hands={self.num_hands}, landmark={self.landmark_index})"
        )

    def _create_landmarker(self, callback: Callable[..., None]) -> Any:
        if not self.model_path.exists():
            raise FileNotFoundError(
                f"Hand landmarker model not found at {self.model_path}. "
                "Download hand_landmarker.task from the MediaPipe model zoo."
            )
        from mediapipe.tasks import python as mp_tasks
        from mediapipe.tasks.python import vision

        options = vision.HandLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=str(self.model_path)),
            running_mode=vision.RunningMode.LIVE_STREAM,
            num_hands=self.num_hands,
            min_hand_detection_confidence=self.min_hand_detection_confidence,
            min_hand_presence_confidence=self.min_hand_presence_confidence,
            min_tracking_confidence=self.min_tracking_confidence,
            result_callback=callback,
        )
        return vision.HandLandmarker.create_from_options(options)

    def busy(self) -> bool:
        """True while a submitted frame has not produced a result yet.

        LIVE_STREAM may drop frames without calling back, so a submission
        older than `max_inflight_secs` no longer counts.
        """
        with self._lock:
            if self._submitted_at is None:
                return False
            return (time.monotonic() - self._submitted_at) < self.max_inflight_secs

    def detect_async(self, frame_bgr: np.ndarray, timestamp_ms: int | None = None) -> int:
        """Submit one BGR frame. Returns the timestamp actually used."""
        if self._landmarker is None:
            raise RuntimeError("FingertipDetector not opened.")
        if timestamp_ms is None:
            timestamp_ms = int(time.monotonic() * 1000)
        with self._lock:
            # The landmarker rejects non-increasing timestamps.
            if timestamp_ms <= self._last_timestamp_ms:
                timestamp_ms = self._last_timestamp_ms + 1
            self._last_timestamp_ms = timestamp_ms
            self._submitted_at = time.monotonic()
        image = self._to_mp_image(frame_bgr)
        self._landmarker.detect_async(image, timestamp_ms)
        return timestamp_ms

    @staticmethod
    def _to_mp_image(frame_bgr: np.ndarray) -> Any:
        import mediapipe as mp

        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        return mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)

    def _on_result(self, result: Any, _image: Any, timestamp_ms: int) -> None:
        with self._lock:
            # Only the newest submission clears the in-flight mark.
            if timestamp_ms >= self._last_timestamp_ms:
                self._submitted_at = None
        point = fingertip_from_result(result, self.landmark_index)
        deep_log(f"[HAND] ts={timestamp_ms} point={point}")
        listener = self._listener
        if listener is not None:
            listener(point, int(timestamp_ms))

    def close(self) -> None:
        if self._landmarker is not None:
            try:
                self._landmarker.close()
            finally:
                self._landmarker = None
                tprint("[HAND] Landmarker closed")

    def __enter__(self) -> "FingertipDetector":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
