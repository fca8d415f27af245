from drawing_module.stroke_tracker import (
    LineTo,
    MoveTo,
    Point,
    Stroke,
    StrokeDelta,
    StrokeTracker,
)


def __getattr__(name):
    if name == "CanvasRenderer":
        from drawing_module.canvas_renderer import CanvasRenderer

        return CanvasRenderer
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "CanvasRenderer",
    "LineTo",
    "MoveTo",
    "Point",
    "Stroke",
    "StrokeDelta",
    "StrokeTracker",
]
