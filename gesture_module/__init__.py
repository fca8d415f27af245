from gesture_module.fingertip_detector import FingertipDetector, fingertip_from_result


def __getattr__(name):
    if name == "FingerPainter":
        from gesture_module.finger_painter import FingerPainter

        return FingerPainter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "FingerPainter",
    "FingertipDetector",
    "fingertip_from_result",
]
