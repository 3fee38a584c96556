"""
GUI adapter for annotation session.

Bridges the AnnotationSession with toolkit event loops: raw pointer,
scroll and key events go in, redraw callbacks and an overlay image come out.
"""

import logging
from typing import Optional, Callable, Tuple

import numpy as np

from ..core.annotation import AnnotationSession, AnnotationEvent, EventType
from ..core.annotation.utils import blank_canvas, draw_annotations_on_image

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

PRIMARY_BUTTON = "primary"
MIDDLE_BUTTON = "middle"

DELETE_KEYS = ("delete", "backspace")

REDRAW_EVENTS = (
    EventType.IMAGE_LOADED,
    EventType.ANNOTATIONS_LOADED,
    EventType.ANNOTATION_ADDED,
    EventType.ANNOTATION_REMOVED,
    EventType.ANNOTATION_MOVED,
    EventType.SELECTION_CHANGED,
    EventType.DRAWING_UPDATED,
    EventType.DRAWING_CANCELLED,
    EventType.HISTORY_UNDONE,
    EventType.HISTORY_REDONE,
    EventType.VIEW_CHANGED,
)


class GUIAnnotationAdapter:
    """
    Adapter connecting AnnotationSession to a GUI toolkit.

    Provides a compatibility layer that:
    - Maps button identity to tool gestures (primary) or panning (middle)
    - Maps key presses to undo/redo/save/delete
    - Translates session events to GUI callbacks
    - Handles visualization rendering
    """

    def __init__(
        self,
        session: AnnotationSession,
        update_image_callback: Optional[Callable] = None,
        text_input_callback: Optional[Callable[[Point], None]] = None,
    ):
        """
        Initialize adapter.

        Args:
            session: Core annotation session
            update_image_callback: Called whenever the view needs a redraw
            text_input_callback: Called with the view position where a text
                entry popup should open
        """
        self.session = session
        self.update_image_callback = update_image_callback
        self.text_input_callback = text_input_callback

        self._panning = False
        self._last_pan_pos: Optional[Point] = None

        # Subscribe to session events
        self._setup_event_handlers()

    def _setup_event_handlers(self):
        """Setup event handlers for session events."""
        for event_type in REDRAW_EVENTS:
            self.session.events.on(event_type, self._on_redraw)
        self.session.events.on(
            EventType.TEXT_INPUT_REQUESTED,
            self._on_text_input_requested,
        )
        self.session.events.on(EventType.SAVE_FAILED, self._on_save_failed)

    def _on_redraw(self, event: AnnotationEvent):
        if self.update_image_callback:
            self.update_image_callback()

    def _on_text_input_requested(self, event: AnnotationEvent):
        if self.text_input_callback:
            self.text_input_callback(event.data["view_pos"])

    def _on_save_failed(self, event: AnnotationEvent):
        logger.warning(f"Annotations were not saved to {event.data.get('path')}")

    # Pointer events

    def on_pointer_pressed(self, pos: Point, button: str = PRIMARY_BUTTON):
        if button == MIDDLE_BUTTON:
            self._panning = True
            self._last_pan_pos = pos
        elif button == PRIMARY_BUTTON and not self._panning:
            self.session.drag_start(pos)

    def on_pointer_dragged(self, pos: Point, button: str = PRIMARY_BUTTON):
        if button == MIDDLE_BUTTON and self._panning:
            last = self._last_pan_pos if self._last_pan_pos is not None else pos
            self._last_pan_pos = pos
            self.session.pan_by((pos[0] - last[0], pos[1] - last[1]))
        elif button == PRIMARY_BUTTON and not self._panning:
            self.session.drag_move(pos)

    def on_pointer_released(self, pos: Optional[Point] = None, button: str = PRIMARY_BUTTON):
        if button == MIDDLE_BUTTON:
            self._panning = False
            self._last_pan_pos = None
        elif button == PRIMARY_BUTTON:
            self.session.drag_end(pos)

    def on_scroll(self, delta: float, cursor: Optional[Point] = None):
        self.session.scroll(delta, cursor)

    def on_resize(self, width: float, height: float):
        self.session.set_viewport_size(width, height)

    # Keyboard

    def on_key(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
        """
        Handle a key press.

        Returns:
            True if the key was consumed
        """
        key = key.lower()
        if ctrl and key == "z":
            if shift:
                self.session.redo()
            else:
                self.session.undo()
            return True
        if ctrl and key == "s":
            self.session.save_and_export()
            return True
        if key in DELETE_KEYS:
            return self.session.delete_selected()
        return False

    def on_text_committed(self, content: str) -> bool:
        return self.session.commit_text(content)

    def on_text_cancelled(self):
        self.session.cancel_text()

    def get_visualization(self) -> np.ndarray:
        """
        Get visualization for display.

        The overlay is rendered in image space; the GUI places it on screen
        using ``session.transform.image_rect_on_screen()``.

        Returns:
            RGBA visualization image
        """
        viz_data = self.session.get_visualization_data()

        image = viz_data["image"]
        if image is None:
            width, height = viz_data["transform"].image_size
            image = blank_canvas(int(width), int(height))

        return draw_annotations_on_image(
            image,
            viz_data["annotations"],
            selected=viz_data["selected"],
            preview=viz_data["preview"],
        )

    @property
    def is_panning(self) -> bool:
        return self._panning
