"""Paint strokes onto an OpenCV raster."""

from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

from drawing_module.stroke_tracker import LineTo, Stroke, StrokeDelta

Color = tuple[int, int, int]

WHITE: Color = (255, 255, 255)
RED: Color = (0, 0, 255)  # BGR


def _as_color(value: Sequence[int] | None, default: Color) -> Color:
    if value is None:
        return default
    if len(value) != 3:
        raise ValueError(f"Expected a 3-channel BGR colour, got {value!r}")
    return tuple(int(c) for c in value)  # type: ignore[return-value]


class CanvasRenderer:
    """Clears to a background colour and replays strokes as polylines."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: Sequence[int] | None = None,
        color: Sequence[int] | None = None,
        thickness: int = 10,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive (got {width}x{height})")
        if thickness <= 0:
            raise ValueError("thickness must be positive")
        self.width = int(width)
        self.height = int(height)
        self.background = _as_color(background, WHITE)
        self.color = _as_color(color, RED)
        self.thickness = int(thickness)
        self._pen: tuple[int, int] | None = None

    def blank(self) -> np.ndarray:
        return np.full((self.height, self.width, 3), self.background, dtype=np.uint8)

    def render(self, stroke: Stroke) -> np.ndarray:
        """Full repaint: clear, then draw every subpath."""
        canvas = self.blank()
        for path in stroke.subpaths():
            pts = [self._to_pixel(x, y) for x, y in path]
            if len(pts) == 1:
                self._dot(canvas, pts[0])
                continue
            cv2.polylines(
                canvas,
                [np.array(pts, dtype=np.int32).reshape(-1, 1, 2)],
                isClosed=False,
                color=self.color,
                thickness=self.thickness,
                lineType=cv2.LINE_AA,
            )
        self._pen = None
        if not stroke.is_empty():
            last = stroke.segments[-1]
            self._pen = self._to_pixel(last.x, last.y)
        return canvas

    def draw_delta(self, canvas: np.ndarray, delta: StrokeDelta) -> np.ndarray:
        """Incrementally paint one delta onto an existing canvas."""
        if delta is None:
            return canvas
        point = self._to_pixel(delta.x, delta.y)
        if isinstance(delta, LineTo) and self._pen is not None:
            cv2.line(canvas, self._pen, point, self.color, self.thickness, cv2.LINE_AA)
        else:
            self._dot(canvas, point)
        self._pen = point
        return canvas

    def _dot(self, canvas: np.ndarray, point: tuple[int, int]) -> None:
        radius = max(1, self.thickness // 2)
        cv2.circle(canvas, point, radius, self.color, -1, cv2.LINE_AA)

    @staticmethod
    def _to_pixel(x: float, y: float) -> tuple[int, int]:
        return int(round(x)), int(round(y))
