"""
Tests for the interactive-view drawing helpers.
"""

import numpy as np
import pytest

from annotate_edit.core.annotation.state import Arrow, Color, Rectangle, Text
from annotate_edit.core.annotation.utils import (
    annotation_bounds_image,
    blank_canvas,
    color_from_hex,
    draw_annotations_on_image,
    font_scale_for_size,
    text_bounds_image,
)


def changed(before, after):
    return np.any(before != after, axis=2)


class TestDrawAnnotationsOnImage:
    """Tests for overlay rendering."""

    def test_returns_copy(self, test_image, sample_annotations):
        original = test_image.copy()
        result = draw_annotations_on_image(test_image, sample_annotations)
        assert np.array_equal(test_image, original)
        assert result.shape == test_image.shape
        assert result.dtype == np.uint8

    def test_empty_list_is_identity(self, test_image):
        result = draw_annotations_on_image(test_image, [])
        assert np.array_equal(result, test_image)

    def test_text_is_drawn(self, test_image):
        text = Text((10, 10), "Hi", 20, Color(0, 0, 0, 1))
        result = draw_annotations_on_image(test_image, [text])
        x0, y0, x1, y1 = (int(v) for v in text_bounds_image(text))
        assert changed(test_image, result)[y0:y1 + 1, x0:x1 + 1].any()
        assert not changed(test_image, result)[60:].any()

    def test_selection_adds_indicator(self, test_image, red):
        rect = Rectangle((30, 30), (60, 60), red, 1)
        plain = draw_annotations_on_image(test_image, [rect])
        selected = draw_annotations_on_image(test_image, [rect], selected=0)
        diff = changed(plain, selected)
        # Indicator sits just outside the stroke
        assert diff[26, 26:65].any()
        assert not diff[45, 45]

    def test_preview_drawn_on_top(self, test_image, red):
        blue = Color(0, 0, 1, 1)
        preview = Arrow((0, 80), (99, 80), blue, 3)
        result = draw_annotations_on_image(
            test_image, [Arrow((0, 80), (99, 80), red, 3)], preview=preview
        )
        r, _, b, _ = result[80, 20]
        assert b > r

    def test_arrow_has_filled_head(self, test_image, red):
        result = draw_annotations_on_image(test_image, [Arrow((10, 50), (90, 50), red, 2)])
        diff = changed(test_image, result)
        # Head base is 10 px back from the tip, 4 px either side of the shaft
        assert diff[47, 81]
        assert diff[53, 81]
        assert not diff[47, 40]


class TestBoundsAndHelpers:
    """Tests for bounds, colors and canvases."""

    def test_bounds_are_normalized(self, red):
        assert annotation_bounds_image(Arrow((50, 5), (10, 40), red)) == (10, 5, 50, 40)
        assert annotation_bounds_image(Rectangle((50, 40), (10, 10), red)) == (10, 10, 50, 40)

    def test_text_bounds_grow_with_content(self, red):
        short = text_bounds_image(Text((0, 0), "a", 20, red))
        long = text_bounds_image(Text((0, 0), "aaaa", 20, red))
        assert long[2] > short[2]
        assert long[1] == 0

    def test_font_scale(self):
        assert font_scale_for_size(44) == pytest.approx(2.0)
        assert font_scale_for_size(0) > 0

    def test_color_from_hex(self):
        assert color_from_hex("#ff0000") == Color(1, 0, 0, 1)
        assert color_from_hex("00ff0080").a == pytest.approx(128 / 255)
        with pytest.raises(ValueError):
            color_from_hex("#fff")

    def test_blank_canvas(self):
        canvas = blank_canvas(8, 6)
        assert canvas.shape == (6, 8, 4)
        assert tuple(canvas[0, 0]) == (40, 40, 40, 255)
