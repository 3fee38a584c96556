"""
Pure drawing helpers for the interactive view.

Unlike the export rasterizer these render antialiased strokes and do draw
text, using OpenCV's Hershey fonts. Images are RGBA uint8 arrays and
coordinates are image space; scaling to the screen is left to the UI.
"""

from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..export.rasterizer import arrowhead_points
from .geometry import Rect
from .state import Annotation, Arrow, Color, Rectangle, Text

SELECTION_COLOR = (0, 120, 255, 255)
SELECTION_PADDING = 4
# FONT_HERSHEY_SIMPLEX cap height is about 22 px at font_scale=1.0
HERSHEY_PIXELS_PER_SCALE = 22.0


def _pt(point: Tuple[float, float]) -> Tuple[int, int]:
    return (int(round(point[0])), int(round(point[1])))


def _stroke_width(thickness: float) -> int:
    return max(1, int(round(thickness)))


def font_scale_for_size(font_size: float) -> float:
    """cv2.putText font scale giving roughly ``font_size`` pixel tall glyphs."""
    return max(font_size, 1.0) / HERSHEY_PIXELS_PER_SCALE


def text_bounds_image(text: Text) -> Rect:
    """Image-space bounds of a text label as rendered by :func:`draw_text`."""
    scale = font_scale_for_size(text.font_size)
    width_height, baseline = cv2.getTextSize(
        text.content, cv2.FONT_HERSHEY_SIMPLEX, scale, _stroke_width(scale * 2)
    )
    width, height = width_height
    x, y = text.pos
    return (x, y, x + width, y + height + baseline)


def draw_arrow(image: np.ndarray, arrow: Arrow) -> np.ndarray:
    """Draw an arrow with a filled head."""
    color = arrow.color.to_rgba8()
    width = _stroke_width(arrow.thickness)
    cv2.line(image, _pt(arrow.start), _pt(arrow.end), color, width, cv2.LINE_AA)
    head = arrowhead_points(arrow.start, arrow.end, arrow.thickness)
    if head is not None:
        polygon = np.array([_pt(arrow.end), _pt(head[0]), _pt(head[1])], dtype=np.int32)
        cv2.fillConvexPoly(image, polygon, color, cv2.LINE_AA)
    return image


def draw_rectangle(image: np.ndarray, rect: Rectangle) -> np.ndarray:
    color = rect.color.to_rgba8()
    cv2.rectangle(
        image, _pt(rect.min), _pt(rect.max), color, _stroke_width(rect.thickness), cv2.LINE_AA
    )
    return image


def draw_text(image: np.ndarray, text: Text) -> np.ndarray:
    """Draw a text label with its anchor at the top-left of the glyphs."""
    scale = font_scale_for_size(text.font_size)
    thickness = _stroke_width(scale * 2)
    (_, height), _ = cv2.getTextSize(
        text.content, cv2.FONT_HERSHEY_SIMPLEX, scale, thickness
    )
    # putText anchors at the baseline
    origin = _pt((text.pos[0], text.pos[1] + height))
    cv2.putText(
        image,
        text.content,
        origin,
        cv2.FONT_HERSHEY_SIMPLEX,
        scale,
        text.color.to_rgba8(),
        thickness,
        cv2.LINE_AA,
    )
    return image


def annotation_bounds_image(annotation: Annotation) -> Rect:
    """Axis-aligned image-space bounds of an annotation."""
    if isinstance(annotation, Arrow):
        (x0, y0), (x1, y1) = annotation.start, annotation.end
    elif isinstance(annotation, Rectangle):
        (x0, y0), (x1, y1) = annotation.min, annotation.max
    else:
        return text_bounds_image(annotation)
    return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))


def draw_selection_indicator(
    image: np.ndarray, bounds: Rect, padding: float = SELECTION_PADDING
) -> np.ndarray:
    """Thin box around the selected annotation."""
    top_left = _pt((bounds[0] - padding, bounds[1] - padding))
    bottom_right = _pt((bounds[2] + padding, bounds[3] + padding))
    cv2.rectangle(image, top_left, bottom_right, SELECTION_COLOR, 1, cv2.LINE_AA)
    return image


def draw_annotation(image: np.ndarray, annotation: Annotation) -> np.ndarray:
    if isinstance(annotation, Arrow):
        return draw_arrow(image, annotation)
    if isinstance(annotation, Rectangle):
        return draw_rectangle(image, annotation)
    return draw_text(image, annotation)


def draw_annotations_on_image(
    image: np.ndarray,
    annotations: List[Annotation],
    selected: Optional[int] = None,
    preview: Optional[Annotation] = None,
) -> np.ndarray:
    """
    Render the interactive overlay on a copy of ``image``.

    Args:
        image: RGBA image
        annotations: Annotation list in z-order
        selected: Index to highlight, if any
        preview: In-progress shape drawn on top, if any

    Returns:
        Image with annotations drawn
    """
    result = np.ascontiguousarray(image.copy())

    for index, annotation in enumerate(annotations):
        draw_annotation(result, annotation)
        if index == selected:
            draw_selection_indicator(result, annotation_bounds_image(annotation))

    if preview is not None:
        draw_annotation(result, preview)

    return result


def blank_canvas(width: int, height: int, gray: int = 40) -> np.ndarray:
    """Opaque placeholder used when the source image could not be decoded."""
    canvas = np.full((height, width, 4), gray, dtype=np.uint8)
    canvas[:, :, 3] = 255
    return canvas


def color_from_hex(value: str) -> Color:
    """Parse ``#RRGGBB`` or ``#RRGGBBAA``."""
    value = value.lstrip("#")
    if len(value) not in (6, 8):
        raise ValueError(f"Invalid hex color: {value!r}")
    channels = [int(value[i:i + 2], 16) for i in range(0, len(value), 2)]
    return Color.from_rgba8(*channels)
