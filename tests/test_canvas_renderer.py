"""Tests for CanvasRenderer (full repaint and incremental deltas)."""

import numpy as np
import pytest

from drawing_module.canvas_renderer import WHITE, CanvasRenderer
from drawing_module.stroke_tracker import LineTo, MoveTo, Stroke


def _is_color(canvas, x, y, color):
    return tuple(int(c) for c in canvas[y, x]) == tuple(color)


def _is_red(canvas, x, y):
    # Anti-aliasing may soften the exact value.
    b, g, r = (int(c) for c in canvas[y, x])
    return r > 200 and g < 80 and b < 80


class TestCanvasRenderer:
    """Test suite for CanvasRenderer."""

    def test_blank_is_background(self):
        """Test that a blank canvas is filled with the background colour."""
        renderer = CanvasRenderer(40, 30)
        canvas = renderer.blank()

        assert canvas.shape == (30, 40, 3)
        assert canvas.dtype == np.uint8
        assert (canvas == np.array(WHITE, dtype=np.uint8)).all()

    def test_render_empty_stroke(self):
        """Test that an empty stroke renders only background."""
        renderer = CanvasRenderer(20, 20, background=(10, 20, 30))
        canvas = renderer.render(Stroke())
        assert (canvas == np.array((10, 20, 30), dtype=np.uint8)).all()

    def test_render_line_paints_stroke_colour(self):
        """Test that a horizontal line is painted along its path."""
        renderer = CanvasRenderer(100, 100, thickness=4)
        canvas = renderer.render(Stroke([MoveTo(10, 50), LineTo(90, 50)]))

        assert _is_red(canvas, 50, 50)
        assert _is_color(canvas, 50, 10, WHITE)

    def test_render_single_point_draws_dot(self):
        """Test that a lone MoveTo still leaves a visible mark."""
        renderer = CanvasRenderer(50, 50, thickness=6)
        canvas = renderer.render(Stroke([MoveTo(25, 25)]))

        assert _is_red(canvas, 25, 25)

    def test_render_keeps_subpaths_disjoint(self):
        """Test that a pen lift does not connect two subpaths."""
        renderer = CanvasRenderer(100, 100, thickness=4)
        stroke = Stroke([MoveTo(10, 10), LineTo(20, 10), MoveTo(80, 10), LineTo(90, 10)])
        canvas = renderer.render(stroke)

        assert _is_red(canvas, 15, 10)
        assert _is_red(canvas, 85, 10)
        assert _is_color(canvas, 50, 10, WHITE)

    def test_render_clears_previous_content(self):
        """Test that each full repaint starts from background."""
        renderer = CanvasRenderer(60, 60, thickness=4)
        renderer.render(Stroke([MoveTo(5, 5), LineTo(55, 5)]))
        canvas = renderer.render(Stroke([MoveTo(5, 50), LineTo(55, 50)]))

        assert _is_color(canvas, 30, 5, WHITE)
        assert _is_red(canvas, 30, 50)

    def test_draw_delta_line_connects_to_pen(self):
        """Test that incremental LineTo draws from the previous point."""
        renderer = CanvasRenderer(100, 100, thickness=4)
        canvas = renderer.blank()
        renderer.draw_delta(canvas, MoveTo(10, 40))
        renderer.draw_delta(canvas, LineTo(90, 40))

        assert _is_red(canvas, 50, 40)

    def test_draw_delta_none_is_noop(self):
        renderer = CanvasRenderer(10, 10)
        canvas = renderer.blank()
        result = renderer.draw_delta(canvas, None)

        assert result is canvas
        assert (canvas == np.array(WHITE, dtype=np.uint8)).all()

    def test_draw_delta_move_does_not_connect(self):
        """Test that MoveTo after a line only places the pen."""
        renderer = CanvasRenderer(100, 100, thickness=4)
        canvas = renderer.blank()
        renderer.draw_delta(canvas, MoveTo(10, 10))
        renderer.draw_delta(canvas, MoveTo(90, 10))

        assert _is_color(canvas, 50, 10, WHITE)

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-5, 5)])
    def test_invalid_size_rejected(self, width, height):
        with pytest.raises(ValueError):
            CanvasRenderer(width, height)

    def test_invalid_colour_rejected(self):
        with pytest.raises(ValueError):
            CanvasRenderer(10, 10, color=(1, 2))
