"""
Event system for annotation workflow.

Provides a decoupled way for the annotation core to notify UI components
about state changes without depending on specific UI frameworks.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during annotation."""

    # Document events
    IMAGE_LOADED = "image_loaded"
    ANNOTATIONS_LOADED = "annotations_loaded"

    # Annotation list events
    ANNOTATION_ADDED = "annotation_added"
    ANNOTATION_REMOVED = "annotation_removed"
    ANNOTATION_MOVED = "annotation_moved"
    SELECTION_CHANGED = "selection_changed"

    # Gesture events
    DRAWING_STARTED = "drawing_started"
    DRAWING_UPDATED = "drawing_updated"
    DRAWING_CANCELLED = "drawing_cancelled"
    TEXT_INPUT_REQUESTED = "text_input_requested"
    TEXT_INPUT_FINISHED = "text_input_finished"

    # History events
    HISTORY_UNDONE = "history_undone"
    HISTORY_REDONE = "history_redone"

    # View events
    VIEW_CHANGED = "view_changed"

    # Persistence events
    ANNOTATIONS_SAVED = "annotations_saved"
    SAVE_FAILED = "save_failed"
    EXPORT_COMPLETED = "export_completed"
    EXPORT_FAILED = "export_failed"


@dataclass
class AnnotationEvent:
    """Event that occurs during annotation."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners:
            self._listeners[event_type].remove(callback)

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        if event.event_type in self._listeners:
            for callback in self._listeners[event.event_type]:
                try:
                    callback(event)
                except Exception:
                    # Log but don't crash on listener errors
                    logger.exception(f"Error in listener for {event.event_type.value}")

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
