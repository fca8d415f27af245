"""Thin wrapper around OpenCV VideoCapture."""

from __future__ import annotations

import cv2
import numpy as np


class VideoStream:
    def __init__(self, device_index: int = 0, *, mirror: bool = False) -> None:
        self.device_index = device_index
        self.mirror = mirror
        self._cap = None

    def open(self) -> None:
        if self._cap is not None:
            return

        self._cap = cv2.VideoCapture(self.device_index)
        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            raise RuntimeError(f"Unable to open camera at index {self.device_index}.")

    def is_open(self) -> bool:
        return self._cap is not None

    def read(self) -> tuple[bool, np.ndarray | None]:
        """Grab one BGR frame; mirrored when configured (front-camera view)."""
        if self._cap is None:
            raise RuntimeError("VideoStream not opened.")
        ok, frame = self._cap.read()
        if ok and frame is not None and self.mirror:
            frame = cv2.flip(frame, 1)
        return ok, frame

    def frame_size(self) -> tuple[int, int]:
        """(width, height) reported by the driver; (0, 0) if unknown."""
        if self._cap is None:
            raise RuntimeError("VideoStream not opened.")
        width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        return width, height

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def __enter__(self) -> "VideoStream":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
