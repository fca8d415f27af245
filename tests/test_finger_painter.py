"""Tests for FingerPainter (detection hand-off, surface lifecycle, capture loop)."""

import numpy as np
import pytest

from drawing_module.stroke_tracker import LineTo, MoveTo, Point
from gesture_module.finger_painter import FingerPainter


class FakeDetector:
    """Answers every frame synchronously with the next scripted detection."""

    def __init__(self, detections=()):
        self.detections = list(detections)
        self.listener = None
        self.opened = False
        self.closed = False
        self.frames = 0

    def set_listener(self, listener):
        self.listener = listener

    def open(self):
        self.opened = True

    def busy(self):
        return False

    def detect_async(self, frame, timestamp_ms=None):
        self.frames += 1
        point = self.detections.pop(0) if self.detections else None
        self.listener(point, self.frames)
        return self.frames

    def close(self):
        self.closed = True


class FakeStream:
    """Yields `count` blank frames, then reports a read failure."""

    def __init__(self, count=0, size=(200, 100)):
        self.remaining = count
        self.size = size
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True

    def read(self):
        if self.remaining <= 0:
            return False, None
        self.remaining -= 1
        return True, np.zeros((self.size[1], self.size[0], 3), dtype=np.uint8)

    def frame_size(self):
        return self.size

    def close(self):
        self.closed = True


def _painter(tmp_path=None, **kwargs):
    kwargs.setdefault("canvas_size", (100, 100))
    kwargs.setdefault("show_window", False)
    if tmp_path is not None:
        kwargs.setdefault("snapshot_dir", tmp_path / "shots")
    stream = kwargs.pop("stream", FakeStream())
    detector = kwargs.pop("detector", FakeDetector())
    return FingerPainter(stream, detector, **kwargs)


class TestFingerPainter:
    """Test suite for FingerPainter."""

    def test_registers_listener(self):
        detector = FakeDetector()
        painter = _painter(detector=detector)
        assert detector.listener is not None
        assert painter.tracker.current_stroke().is_empty()

    def test_process_pending_applies_in_order(self):
        """Test the move, line, gap, move scenario through the queue."""
        painter = _painter()
        for point in [Point(0.5, 0.5), Point(0.6, 0.5), None, Point(0.1, 0.1)]:
            painter.submit_detection(point)

        deltas = painter.process_pending()

        assert [type(d) for d in deltas] == [MoveTo, LineTo, type(None), MoveTo]
        assert len(painter.tracker.current_stroke().subpaths()) == 2
        assert painter.process_pending() == []

    def test_repaint_after_detections(self):
        """Test that the canvas shows the stroke after processing."""
        painter = _painter()
        blank = painter.canvas.copy()
        painter.submit_detection(Point(0.1, 0.5))
        painter.submit_detection(Point(0.9, 0.5))
        painter.process_pending()

        assert not np.array_equal(painter.canvas, blank)

    def test_process_pending_requires_surface(self):
        painter = _painter(canvas_size=None)
        with pytest.raises(RuntimeError):
            painter.process_pending()

    def test_surface_resize_resets_session(self):
        """Test that recreating the surface with a new size restarts the stroke."""
        painter = _painter()
        painter.submit_detection(Point(0.5, 0.5))
        painter.process_pending()

        assert painter.set_surface_size(100, 100) is False
        assert not painter.tracker.current_stroke().is_empty()

        assert painter.set_surface_size(320, 240) is True
        assert painter.tracker.current_stroke().is_empty()
        assert painter.canvas.shape == (240, 320, 3)

    def test_clear_key_resets(self):
        painter = _painter()
        painter.submit_detection(Point(0.5, 0.5))
        painter.process_pending()

        assert painter.handle_key(ord("c")) is True
        assert painter.tracker.current_stroke().is_empty()
        assert painter.tracker.last_point is None

    @pytest.mark.parametrize("key", [ord("q"), 27])
    def test_quit_keys(self, key):
        assert _painter().handle_key(key) is False

    def test_save_snapshot(self, tmp_path):
        painter = _painter(tmp_path)
        first = painter.save_snapshot()
        second = painter.save_snapshot()

        assert first.exists() and second.exists()
        assert first != second
        assert first.suffix == ".png"

    def test_run_headless_draws_detections(self):
        """Test the capture thread feeding the render loop until the camera ends."""
        detections = [Point(0.2, 0.2), Point(0.3, 0.3), None, Point(0.8, 0.8)]
        stream = FakeStream(count=len(detections))
        detector = FakeDetector(detections)
        painter = _painter(stream=stream, detector=detector)

        painter.run()

        stroke = painter.tracker.current_stroke()
        assert stroke.move_count() == 2
        assert len(stroke) == 3
        assert detector.opened and detector.closed
        assert stream.opened and stream.closed
        assert not painter.is_running()

    def test_start_uses_frame_size_without_canvas_size(self):
        """Test that the camera frame size becomes the surface when none is configured."""
        stream = FakeStream(count=0, size=(160, 120))
        painter = _painter(canvas_size=None, stream=stream)

        painter.start()
        painter.stop()

        assert (painter.renderer.width, painter.renderer.height) == (160, 120)

    def test_from_settings(self):
        settings = {
            "camera": {"device_index": 2, "mirror": False},
            "hand_landmarker": {"model_path": "m.task"},
            "canvas": {"width": 300, "height": 200, "stroke_width": 3},
        }
        painter = FingerPainter.from_settings(settings, show_window=False)

        assert painter.stream.device_index == 2
        assert painter.stream.mirror is False
        assert (painter.renderer.width, painter.renderer.height) == (300, 200)
        assert painter.renderer.thickness == 3

    def test_camera_open_failure_closes_detector(self, capsys):
        """Test that a camera that cannot open is logged and releases the landmarker."""

        class BrokenStream(FakeStream):
            def open(self):
                raise RuntimeError("Could not open camera 0")

        detector = FakeDetector()
        painter = _painter(stream=BrokenStream(), detector=detector)

        with pytest.raises(RuntimeError):
            painter.run()

        assert detector.opened and detector.closed
        assert not painter.is_running()
        assert "[CAMERA][ERROR] Could not open camera 0" in capsys.readouterr().out
