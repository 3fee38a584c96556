"""
State management for annotation sessions.

Contains data classes for the markup primitives (arrow, rectangle, text),
their persisted dictionary form, and the interaction state of a session.
All annotation geometry is stored in image pixel space.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

Point = Tuple[float, float]


def _point_to_list(point: Point) -> List[float]:
    return [float(point[0]), float(point[1])]


def _point_from_data(data) -> Point:
    if not isinstance(data, (list, tuple)) or len(data) != 2:
        raise ValueError(f"Invalid point: {data!r}")
    return (_number(data[0]), _number(data[1]))


def _number(value) -> float:
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as e:
        raise ValueError(f"Number out of range: {value!r}") from e
    # json accepts NaN, Infinity and 1e400
    if not math.isfinite(number):
        raise ValueError(f"Expected a finite number, got {value!r}")
    return number


@dataclass(frozen=True)
class Color:
    """RGBA color with normalized float channels, clamped only on render."""

    r: float = 1.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0

    def to_rgba8(self) -> Tuple[int, int, int, int]:
        """Convert to 8-bit channels, clamping out-of-range values."""
        return tuple(
            int(max(0.0, min(1.0, c)) * 255.0) for c in (self.r, self.g, self.b, self.a)
        )

    @classmethod
    def from_rgba8(cls, r: int, g: int, b: int, a: int = 255) -> "Color":
        return cls(r / 255.0, g / 255.0, b / 255.0, a / 255.0)

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary."""
        return cls(
            r=_number(data["r"]),
            g=_number(data["g"]),
            b=_number(data["b"]),
            a=_number(data["a"]),
        )


@dataclass
class Arrow:
    """Straight arrow from ``start`` to ``end``; the head sits at ``end``."""

    start: Point
    end: Point
    color: Color = field(default_factory=Color)
    thickness: float = 3.0

    kind = "Arrow"

    def move_by(self, dx: float, dy: float):
        self.start = (self.start[0] + dx, self.start[1] + dy)
        self.end = (self.end[0] + dx, self.end[1] + dy)

    def to_dict(self):
        return {
            "type": self.kind,
            "start": _point_to_list(self.start),
            "end": _point_to_list(self.end),
            "color": self.color.to_dict(),
            "thickness": float(self.thickness),
        }

    @classmethod
    def from_dict(cls, data: dict):
        return cls(
            start=_point_from_data(data["start"]),
            end=_point_from_data(data["end"]),
            color=Color.from_dict(data["color"]),
            thickness=_number(data["thickness"]),
        )


@dataclass
class Rectangle:
    """Outlined rectangle given by two opposite corners (not normalized)."""

    min: Point
    max: Point
    color: Color = field(default_factory=Color)
    thickness: float = 3.0

    kind = "Rectangle"

    def corners(self) -> List[Point]:
        """The four corners in drawing order."""
        (x0, y0), (x1, y1) = self.min, self.max
        return [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]

    def move_by(self, dx: float, dy: float):
        self.min = (self.min[0] + dx, self.min[1] + dy)
        self.max = (self.max[0] + dx, self.max[1] + dy)

    def to_dict(self):
        return {
            "type": self.kind,
            "min": _point_to_list(self.min),
            "max": _point_to_list(self.max),
            "color": self.color.to_dict(),
            "thickness": float(self.thickness),
        }

    @classmethod
    def from_dict(cls, data: dict):
        return cls(
            min=_point_from_data(data["min"]),
            max=_point_from_data(data["max"]),
            color=Color.from_dict(data["color"]),
            thickness=_number(data["thickness"]),
        )


@dataclass
class Text:
    """Text label anchored at its top-left corner."""

    pos: Point
    content: str
    font_size: float = 20.0
    color: Color = field(default_factory=Color)

    kind = "Text"

    def move_by(self, dx: float, dy: float):
        self.pos = (self.pos[0] + dx, self.pos[1] + dy)

    def to_dict(self):
        return {
            "type": self.kind,
            "pos": _point_to_list(self.pos),
            "content": self.content,
            "font_size": float(self.font_size),
            "color": self.color.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict):
        content = data["content"]
        if not isinstance(content, str):
            raise ValueError(f"Text content must be a string, got {content!r}")
        return cls(
            pos=_point_from_data(data["pos"]),
            content=content,
            font_size=_number(data["font_size"]),
            color=Color.from_dict(data["color"]),
        )


Annotation = Union[Arrow, Rectangle, Text]

ANNOTATION_TYPES = {cls.kind: cls for cls in (Arrow, Rectangle, Text)}


def annotation_to_dict(annotation: Annotation) -> Dict[str, Any]:
    """Persisted record for one annotation (kind-tagged, wrapped in ``kind``)."""
    return {"kind": annotation.to_dict()}


def annotation_from_dict(data: Dict[str, Any]) -> Annotation:
    """
    Create an annotation from its persisted record.

    Raises:
        ValueError: If the record is not a known, well-formed annotation
    """
    if not isinstance(data, dict) or not isinstance(data.get("kind"), dict):
        raise ValueError(f"Invalid annotation record: {data!r}")
    kind = data["kind"]
    cls = ANNOTATION_TYPES.get(kind.get("type"))
    if cls is None:
        raise ValueError(f"Unknown annotation type: {kind.get('type')!r}")
    try:
        return cls.from_dict(kind)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed {cls.kind} record: {e}") from e


def translated(annotation: Annotation, dx: float, dy: float) -> Annotation:
    """Return a moved copy of ``annotation``, leaving the original untouched."""
    moved = replace(annotation)
    moved.move_by(dx, dy)
    return moved


class Tool(Enum):
    """Active tool, chosen by the user outside the interaction state machine."""

    ARROW = "arrow"
    RECTANGLE = "rectangle"
    TEXT = "text"
    SELECT = "select"


@dataclass
class Idle:
    """No gesture in progress."""


@dataclass
class Drawing:
    """Arrow/rectangle being dragged out; points are in view space."""

    start: Point
    current: Point


@dataclass
class Moving:
    """Selected annotation being dragged; ``last_pos`` is in view space."""

    index: int
    last_pos: Point


InteractionState = Union[Idle, Drawing, Moving]

