"""Draw screen: paints the index fingertip's path onto a canvas window.

A background capture thread reads camera frames and submits them to the
fingertip detector. Detections arrive on the detector's callback thread and
are handed to the render thread through a queue; only the render thread
touches the StrokeTracker and the canvas.
"""

from __future__ import annotations

import queue
import threading
from pathlib import Path
from typing import Any, Optional, Sequence

import cv2
import numpy as np

from drawing_module.canvas_renderer import CanvasRenderer
from drawing_module.stroke_tracker import Point, StrokeDelta, StrokeTracker
from gesture_module.fingertip_detector import FingertipDetector
from utils.file_utils import next_available
from utils.log_utils import tprint
from utils.settings_store import get_settings
from utils.threading_utils import join_quietly, run_async
from video_module.video_stream import VideoStream

_DEFAULT_SIZE = (640, 480)
_KEY_ESC = 27


class FingerPainter:
    def __init__(
        self,
        stream: VideoStream,
        detector: FingertipDetector,
        *,
        canvas_size: tuple[int, int] | None = None,
        background: Sequence[int] | None = None,
        stroke_color: Sequence[int] | None = None,
        stroke_width: int = 10,
        window_name: str = "Air Canvas",
        snapshot_dir: str | Path = "snapshots",
        show_window: bool = True,
    ) -> None:
        self.stream = stream
        self.detector = detector
        self.tracker = StrokeTracker()
        self.renderer: CanvasRenderer | None = None
        self.window_name = window_name
        self.snapshot_dir = Path(snapshot_dir)
        self.show_window = show_window
        self._style: dict[str, Any] = {
            "background": background,
            "color": stroke_color,
            "thickness": stroke_width,
        }
        self._detections: "queue.Queue[Optional[Point]]" = queue.Queue()
        self._canvas: np.ndarray | None = None
        self._stop_event = threading.Event()
        self._capture_thread: threading.Thread | None = None
        self.active = False
        self.detector.set_listener(self._enqueue_detection)
        if canvas_size is not None:
            self.set_surface_size(*canvas_size)

    @classmethod
    def from_settings(cls, settings: dict | None = None, **kwargs: Any) -> "FingerPainter":
        settings = settings or get_settings()
        camera = settings.get("camera", {})
        canvas = settings.get("canvas", {})
        width = int(canvas.get("width", 0) or 0)
        height = int(canvas.get("height", 0) or 0)
        stream = VideoStream(
            device_index=int(camera.get("device_index", 0)),
            mirror=bool(camera.get("mirror", True)),
        )
        detector = FingertipDetector.from_settings(settings.get("hand_landmarker", {}))
        return cls(
            stream,
            detector,
            # 0 means "use the camera's frame size".
            canvas_size=(width, height) if width > 0 and height > 0 else None,
            background=canvas.get("background"),
            stroke_color=canvas.get("stroke_color"),
            stroke_width=int(canvas.get("stroke_width", 10)),
            window_name=str(canvas.get("window_name", "Air Canvas")),
            snapshot_dir=canvas.get("snapshot_dir", "snapshots"),
            **kwargs,
        )

    # Surface lifecycle

    def set_surface_size(self, width: int, height: int) -> bool:
        """(Re)create the drawing surface. Returns True if the session was reset."""
        if self.renderer is not None and (self.renderer.width, self.renderer.height) == (width, height):
            return False
        self.renderer = CanvasRenderer(width, height, **self._style)
        self.tracker.reset()
        self._canvas = self.renderer.blank()
        tprint(f"[CANVAS] Surface created {width}x{height}")
        return True

    def clear(self) -> None:
        """Restart the drawing session on the current surface."""
        self.tracker.reset()
        if self.renderer is not None:
            self._canvas = self.renderer.blank()
        tprint("[CANVAS] Cleared")

    @property
    def canvas(self) -> np.ndarray | None:
        return self._canvas

    # Detection hand-off

    def _enqueue_detection(self, point: Point | None, timestamp_ms: int) -> None:
        self._detections.put(point)

    def submit_detection(self, point: Point | None) -> None:
        """Queue a detection as if it came from the detector callback."""
        self._enqueue_detection(point, 0)

    def process_pending(self) -> list[StrokeDelta]:
        """Apply queued detections in arrival order and repaint if any arrived."""
        if self.renderer is None:
            raise RuntimeError("Drawing surface not created; call set_surface_size first.")
        deltas: list[StrokeDelta] = []
        while True:
            try:
                point = self._detections.get_nowait()
            except queue.Empty:
                break
            deltas.append(self.tracker.update(point, self.renderer.width, self.renderer.height))
        if deltas:
            self._canvas = self.renderer.render(self.tracker.current_stroke())
        return deltas

    # Capture worker

    def _capture_loop(self) -> None:
        while not self._stop_event.is_set():
            ok, frame = self.stream.read()
            if not ok or frame is None:
                tprint("[CAMERA][ERROR] Failed to read from camera.")
                break
            if self.detector.busy():
                # Keep only the latest frame while the landmarker is working.
                continue
            self.detector.detect_async(frame)

    def _capture_runner(self) -> None:
        try:
            self._capture_loop()
        except Exception as exc:  # pragma: no cover
            tprint(f"[CAMERA][ERROR] Capture error: {exc}")
        finally:
            self._stop_event.set()

    def start(self) -> None:
        if self._capture_thread and self._capture_thread.is_alive():
            tprint("[CANVAS] Painter already running")
            return
        self.detector.open()
        try:
            self.stream.open()
        except RuntimeError as exc:
            tprint(f"[CAMERA][ERROR] {exc}")
            self.detector.close()
            raise
        if self.renderer is None:
            width, height = self.stream.frame_size()
            if width <= 0 or height <= 0:
                width, height = _DEFAULT_SIZE
            self.set_surface_size(width, height)
        self._stop_event.clear()
        self.active = True
        self._capture_thread = run_async(self._capture_runner, name="CameraCapture")
        tprint("[CANVAS] Painting started. Keys: q quit, c clear, s save.")

    def run(self) -> None:
        """Start capture and run the render loop on the calling thread."""
        self.start()
        try:
            while self.active:
                stopping = self._stop_event.is_set()
                self.process_pending()
                if stopping:
                    break
                if not self.show_window:
                    self._stop_event.wait(0.01)
                    continue
                cv2.imshow(self.window_name, self._canvas)
                if not self.handle_key(cv2.waitKey(15) & 0xFF):
                    break
        except cv2.error as exc:
            tprint(f"[CANVAS][ERROR] OpenCV error: {exc}")
        finally:
            self.stop()

    def handle_key(self, key: int) -> bool:
        """React to a key press. Returns False when the screen should close."""
        if key in (ord("q"), _KEY_ESC):
            return False
        if key == ord("c"):
            self.clear()
        elif key == ord("s"):
            self.save_snapshot()
        return True

    def save_snapshot(self) -> Path | None:
        if self._canvas is None:
            return None
        path = next_available(self.snapshot_dir, "canvas", ".png")
        if not cv2.imwrite(str(path), self._canvas):
            tprint(f"[CANVAS][ERROR] Could not write {path}")
            return None
        tprint(f"[CANVAS] Saved {path}")
        return path

    def stop(self) -> None:
        self.active = False
        self._stop_event.set()
        join_quietly(self._capture_thread)
        self._capture_thread = None
        self.stream.close()
        self.detector.close()
        if self.show_window:
            cv2.destroyAllWindows()
        tprint("[CANVAS] Painting stopped")

    def is_running(self) -> bool:
        return bool((self._capture_thread and self._capture_thread.is_alive()) or self.active)
