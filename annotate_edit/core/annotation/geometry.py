"""
Pure geometry helpers for the annotation engine.

Image space is fixed to the source image's pixel grid; view space is the
on-screen drawing surface. The image is centered in the viewport, then
panned (view units) and scaled around that center.

These functions have no side effects and can be tested in isolation.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[float, float]
Rect = Tuple[float, float, float, float]  # (min_x, min_y, max_x, max_y)

ZOOM_MIN = 0.1
ZOOM_MAX = 10.0


def clamp_zoom(zoom: float, zoom_min: float = ZOOM_MIN, zoom_max: float = ZOOM_MAX) -> float:
    """Clamp a zoom factor to the configured bounds."""
    return max(zoom_min, min(zoom_max, zoom))


def view_from_image(
    point: Point,
    viewport_center: Point,
    pan: Point,
    zoom: float,
    image_size: Point,
) -> Point:
    """
    Map an image-space point to view space.

    Args:
        point: (x, y) in image pixels
        viewport_center: Center of the visible viewport (view units)
        pan: Pan offset (view units)
        zoom: Uniform scale factor
        image_size: (width, height) of the image in pixels

    Returns:
        (x, y) in view units
    """
    return (
        viewport_center[0] + pan[0] + (point[0] - image_size[0] * 0.5) * zoom,
        viewport_center[1] + pan[1] + (point[1] - image_size[1] * 0.5) * zoom,
    )


def image_from_view(
    point: Point,
    viewport_center: Point,
    pan: Point,
    zoom: float,
    image_size: Point,
) -> Point:
    """
    Map a view-space point to image space.

    Exact inverse of :func:`view_from_image` for ``zoom > 0``.
    """
    return (
        (point[0] - viewport_center[0] - pan[0]) / zoom + image_size[0] * 0.5,
        (point[1] - viewport_center[1] - pan[1]) / zoom + image_size[1] * 0.5,
    )


def zoom_at_cursor(
    cursor: Point,
    viewport_center: Point,
    pan: Point,
    zoom: float,
    new_zoom: float,
    zoom_min: float = ZOOM_MIN,
    zoom_max: float = ZOOM_MAX,
) -> Tuple[Point, float]:
    """
    Change zoom while keeping the image point under the cursor fixed.

    The requested zoom is clamped first, then pan is solved so that
    ``image_from_view(cursor)`` is the same before and after.

    Returns:
        (new_pan, new_zoom)
    """
    new_zoom = clamp_zoom(new_zoom, zoom_min, zoom_max)
    rel_x = cursor[0] - viewport_center[0] - pan[0]
    rel_y = cursor[1] - viewport_center[1] - pan[1]
    ratio = new_zoom / zoom - 1.0
    return (pan[0] - rel_x * ratio, pan[1] - rel_y * ratio), new_zoom


def scroll_zoom_factor(scroll_delta: float, rate: float = 0.002) -> float:
    """Multiplicative zoom factor for a scroll-wheel delta."""
    return 1.0 + scroll_delta * rate


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def point_to_segment_distance(p: Point, a: Point, b: Point) -> float:
    """
    Euclidean distance from ``p`` to the segment ``a``-``b``.

    The projection parameter is clamped to [0, 1]; a zero-length segment
    degrades to the distance to ``a``.
    """
    abx, aby = b[0] - a[0], b[1] - a[1]
    apx, apy = p[0] - a[0], p[1] - a[1]
    length_sq = abx * abx + aby * aby
    if length_sq == 0.0:
        return math.hypot(apx, apy)
    t = (apx * abx + apy * aby) / length_sq
    t = max(0.0, min(1.0, t))
    closest = (a[0] + abx * t, a[1] + aby * t)
    return math.hypot(p[0] - closest[0], p[1] - closest[1])


def normalize_rect(a: Point, b: Point) -> Rect:
    """Build a rect from two opposite corners in any order."""
    return (min(a[0], b[0]), min(a[1], b[1]), max(a[0], b[0]), max(a[1], b[1]))


def expand_rect(rect: Rect, margin: float) -> Rect:
    """Grow a rect on all sides; a negative margin shrinks it."""
    return (rect[0] - margin, rect[1] - margin, rect[2] + margin, rect[3] + margin)


def rect_contains(rect: Rect, p: Point) -> bool:
    """Inclusive containment. A rect shrunk past zero size contains nothing."""
    return rect[0] <= p[0] <= rect[2] and rect[1] <= p[1] <= rect[3]


@dataclass
class ViewTransform:
    """
    Pan/zoom state of the view for one open document.

    Not persisted; reset whenever a new image is opened.
    """

    image_size: Point = (800.0, 600.0)
    viewport_size: Point = (1200.0, 800.0)
    pan: Point = (0.0, 0.0)
    zoom: float = 1.0
    zoom_min: float = ZOOM_MIN
    zoom_max: float = ZOOM_MAX

    @property
    def viewport_center(self) -> Point:
        return (self.viewport_size[0] * 0.5, self.viewport_size[1] * 0.5)

    def to_view(self, point: Point) -> Point:
        return view_from_image(
            point, self.viewport_center, self.pan, self.zoom, self.image_size
        )

    def to_image(self, point: Point) -> Point:
        return image_from_view(
            point, self.viewport_center, self.pan, self.zoom, self.image_size
        )

    def delta_to_image(self, delta: Point) -> Point:
        """Convert a relative view-space movement to image space (pan-independent)."""
        return (delta[0] / self.zoom, delta[1] / self.zoom)

    def pan_by(self, delta: Point):
        self.pan = (self.pan[0] + delta[0], self.pan[1] + delta[1])

    def zoom_at(self, cursor: Optional[Point], new_zoom: float):
        """Zoom to ``new_zoom``, anchored at ``cursor`` when one is given."""
        if cursor is None:
            self.zoom = clamp_zoom(new_zoom, self.zoom_min, self.zoom_max)
            return
        self.pan, self.zoom = zoom_at_cursor(
            cursor,
            self.viewport_center,
            self.pan,
            self.zoom,
            new_zoom,
            self.zoom_min,
            self.zoom_max,
        )

    def image_rect_on_screen(self) -> Rect:
        """View-space rect covered by the whole image (for drawing the background)."""
        top_left = self.to_view((0.0, 0.0))
        bottom_right = self.to_view(self.image_size)
        return (top_left[0], top_left[1], bottom_right[0], bottom_right[1])

    def reset(self):
        self.pan = (0.0, 0.0)
        self.zoom = 1.0
