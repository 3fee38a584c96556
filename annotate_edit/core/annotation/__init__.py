"""
Core annotation module - UI-agnostic markup engine.

This module provides the data model, view transform, hit-testing,
undo/redo and gesture handling for image markup, usable with any UI
framework (Qt, Tk, Web, CLI).
"""

from .session import AnnotationSession
from .events import AnnotationEvent, EventType, EventEmitter
from .geometry import ViewTransform
from .history import HistoryManager
from .state import Arrow, Color, Rectangle, Text, Tool
from .store import AnnotationStore, sidecar_path

__all__ = [
    "AnnotationSession",
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "ViewTransform",
    "HistoryManager",
    "AnnotationStore",
    "sidecar_path",
    "Arrow",
    "Color",
    "Rectangle",
    "Text",
    "Tool",
]
