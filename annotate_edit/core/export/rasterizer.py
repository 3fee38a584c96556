"""
Flatten annotations into a pixel buffer for export.

Strokes are stamped as square blocks along each segment and overwrite the
pixels underneath (no blending, no antialiasing). Text annotations are not
rasterized; they only appear in the interactive view.
"""

import logging
import math
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from ..annotation.state import Annotation, Arrow, Rectangle, Text
from .image_io import save_rgba

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
RGBA = Tuple[int, int, int, int]

EXPORT_SUFFIX = "_annotated"
EXPORT_EXTENSION = ".png"


def export_path(
    image_path: Path, suffix: str = EXPORT_SUFFIX, extension: str = EXPORT_EXTENSION
) -> Path:
    """``<dir>/<stem>_annotated.png`` next to the source image."""
    image_path = Path(image_path)
    stem = image_path.stem or "out"
    return image_path.with_name(f"{stem}{suffix}{extension}")


def draw_thick_line(
    buffer: np.ndarray,
    p0: Point,
    p1: Point,
    thickness: float,
    color: Sequence[int],
):
    """
    Draw a thick segment in place.

    Samples are taken every half pixel along the segment; at each sample a
    square of side ``2 * half + 1`` is stamped, clipped to the buffer.
    """
    h, w = buffer.shape[:2]
    dx = p1[0] - p0[0]
    dy = p1[1] - p0[1]
    steps = int(math.hypot(dx, dy) * 2.0)
    half = int(max(thickness / 2.0, 0.5))
    rgba = np.asarray(color, dtype=np.uint8)

    for i in range(steps + 1):
        t = i / max(steps, 1)
        cx = int(p0[0] + dx * t)
        cy = int(p0[1] + dy * t)
        x0, x1 = max(cx - half, 0), min(cx + half + 1, w)
        y0, y1 = max(cy - half, 0), min(cy + half + 1, h)
        if x0 < x1 and y0 < y1:
            buffer[y0:y1, x0:x1] = rgba


def arrowhead_points(start: Point, end: Point, thickness: float) -> Optional[Tuple[Point, Point]]:
    """
    Base corners of the arrowhead at ``end``.

    Returns:
        (p1, p2), or None for a zero-length arrow (no direction)
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.hypot(dx, dy)
    if length <= 0.0:
        return None
    dir_x, dir_y = dx / length, dy / length
    perp_x, perp_y = -dir_y, dir_x
    head_len = max(thickness * 4.0, 10.0)
    base_x = end[0] - dir_x * head_len
    base_y = end[1] - dir_y * head_len
    offset = head_len * 0.4
    p1 = (base_x + perp_x * offset, base_y + perp_y * offset)
    p2 = (base_x - perp_x * offset, base_y - perp_y * offset)
    return p1, p2


def draw_arrow(buffer: np.ndarray, arrow: Arrow):
    color = arrow.color.to_rgba8()
    draw_thick_line(buffer, arrow.start, arrow.end, arrow.thickness, color)
    head = arrowhead_points(arrow.start, arrow.end, arrow.thickness)
    if head is None:
        return
    p1, p2 = head
    draw_thick_line(buffer, arrow.end, p1, arrow.thickness, color)
    draw_thick_line(buffer, arrow.end, p2, arrow.thickness, color)
    draw_thick_line(buffer, p1, p2, arrow.thickness, color)


def draw_rectangle(buffer: np.ndarray, rect: Rectangle):
    color = rect.color.to_rgba8()
    corners = rect.corners()
    for a, b in zip(corners, corners[1:] + corners[:1]):
        draw_thick_line(buffer, a, b, rect.thickness, color)


def rasterize(buffer: np.ndarray, annotations: Iterable[Annotation]) -> np.ndarray:
    """
    Burn annotations into a copy of ``buffer``.

    Args:
        buffer: RGBA source pixels; never modified
        annotations: Annotation list in z-order (later draws on top)

    Returns:
        New RGBA buffer with the same dimensions
    """
    result = buffer.copy()
    for annotation in annotations:
        if isinstance(annotation, Arrow):
            draw_arrow(result, annotation)
        elif isinstance(annotation, Rectangle):
            draw_rectangle(result, annotation)
        elif isinstance(annotation, Text):
            # No glyph rasterization in the export path
            continue
    return result


def export_annotated(
    buffer: np.ndarray, annotations: Iterable[Annotation], output_path: Path
) -> bool:
    """
    Rasterize and write the flattened image.

    Returns:
        True if the export was written; failures are logged, not raised
    """
    flattened = rasterize(buffer, annotations)
    try:
        ok = save_rgba(output_path, flattened)
    except (OSError, ValueError) as e:
        logger.error(f"Could not export to {output_path}: {e}")
        return False
    if ok:
        logger.info(f"Exported to {output_path}")
    else:
        logger.error(f"Could not export to {output_path}")
    return ok
