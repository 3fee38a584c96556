"""
Annotation session management.

Core logic for managing an interactive markup session on one image.
UI-agnostic - can be used with any interface (GUI, Web, CLI).
"""

import logging
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple

import numpy as np

from ...utils.config import load_config
from ...utils.misc import clamp
from .events import EventEmitter, AnnotationEvent, EventType
from .geometry import ViewTransform, distance, scroll_zoom_factor
from .history import HistoryManager
from .hit_test import hit_test
from .state import (
    Annotation,
    Arrow,
    Color,
    Drawing,
    Idle,
    InteractionState,
    Moving,
    Rectangle,
    Text,
    Tool,
)
from .store import AnnotationStore

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class AnnotationSession:
    """
    Manages the state and logic of a markup session.

    This class handles:
    - The annotation list and its sidecar persistence
    - Snapshot history for undo/redo
    - Selection and the drag-gesture state machine
    - Pan/zoom of the view
    - Export of the flattened image
    - Event emission for UI updates

    The session is UI-agnostic - it emits events that UI components
    can listen to, rather than directly manipulating UI elements.
    Every committed mutation is recorded in history first and saved after.
    """

    def __init__(self, cfg=None):
        """
        Initialize annotation session.

        Args:
            cfg: EasyDict configuration; defaults from ``load_config()``
        """
        self.cfg = cfg if cfg is not None else load_config()

        self.image_path: Optional[Path] = None
        self._image: Optional[np.ndarray] = None

        self.store = AnnotationStore()
        self.history = HistoryManager(max_history=int(self.cfg.history_limit))
        self.transform = ViewTransform(
            image_size=(
                float(self.cfg.placeholder_width),
                float(self.cfg.placeholder_height),
            ),
            zoom_min=self.cfg.zoom_min,
            zoom_max=self.cfg.zoom_max,
        )

        self.tool = Tool.ARROW
        self.color = Color(*self.cfg.default_color)
        self.thickness = float(self.cfg.default_thickness)
        self.font_size = float(self.cfg.default_font_size)

        self.selected: Optional[int] = None
        self.interaction: InteractionState = Idle()
        self.text_anchor: Optional[Point] = None

        # Event emitter for UI notifications
        self.events = EventEmitter()

    # Document

    def open_image(self, image_path: Path):
        """
        Open an image and its sidecar annotations.

        An undecodable image is not an error: the session falls back to the
        placeholder size and export becomes unavailable.

        Args:
            image_path: Path to the source image
        """
        from ..export.image_io import load_rgba

        self.image_path = Path(image_path)
        self._image = load_rgba(self.image_path)
        if self._image is not None:
            h, w = self._image.shape[:2]
            self.transform.image_size = (float(w), float(h))
        else:
            self.transform.image_size = (
                float(self.cfg.placeholder_width),
                float(self.cfg.placeholder_height),
            )
        self.transform.reset()

        self.store = AnnotationStore.for_image(
            self.image_path, self.cfg.sidecar_extension
        )
        self.store.load()
        self.history.clear()
        self.selected = None
        self.interaction = Idle()
        self.text_anchor = None

        self.events.emit(
            AnnotationEvent(
                EventType.IMAGE_LOADED,
                {
                    "path": str(self.image_path),
                    "image_size": self.transform.image_size,
                    "decoded": self._image is not None,
                },
            )
        )
        self.events.emit(
            AnnotationEvent(
                EventType.ANNOTATIONS_LOADED, {"num_annotations": len(self.store)}
            )
        )

    @property
    def image(self) -> Optional[np.ndarray]:
        """Decoded RGBA source pixels, or None if the image could not be read."""
        return self._image

    @property
    def annotations(self) -> List[Annotation]:
        return self.store.annotations

    # Settings

    def set_tool(self, tool: Tool):
        if isinstance(self.interaction, Drawing):
            self.interaction = Idle()
            self.events.emit(AnnotationEvent(EventType.DRAWING_CANCELLED))
        self.tool = Tool(tool)

    def set_color(self, color: Color):
        self.color = color

    def set_thickness(self, thickness: float):
        self.thickness = clamp(
            float(thickness), self.cfg.thickness_min, self.cfg.thickness_max
        )

    def set_font_size(self, font_size: float):
        self.font_size = clamp(
            float(font_size), self.cfg.font_size_min, self.cfg.font_size_max
        )

    def set_viewport_size(self, width: float, height: float):
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must have a positive size, got {width}x{height}")
        self.transform.viewport_size = (float(width), float(height))
        self.events.emit(AnnotationEvent(EventType.VIEW_CHANGED))

    # View

    def pan_by(self, delta: Point):
        self.transform.pan_by(delta)
        self.events.emit(AnnotationEvent(EventType.VIEW_CHANGED))

    def zoom_at(self, cursor: Optional[Point], new_zoom: float):
        self.transform.zoom_at(cursor, new_zoom)
        self.events.emit(
            AnnotationEvent(EventType.VIEW_CHANGED, {"zoom": self.transform.zoom})
        )

    def scroll(self, scroll_delta: float, cursor: Optional[Point] = None):
        """Zoom in response to a scroll gesture, keeping the cursor anchored."""
        if scroll_delta == 0:
            return
        factor = scroll_zoom_factor(scroll_delta, self.cfg.scroll_zoom_rate)
        self.zoom_at(cursor, self.transform.zoom * factor)

    # Drag gestures

    def drag_start(self, view_pos: Point):
        """
        Begin a primary-button drag at a view-space position.

        What happens depends on the active tool: arrow/rectangle start
        drawing, text requests text entry, select hit-tests and grabs.
        """
        if self.tool in (Tool.ARROW, Tool.RECTANGLE):
            self.interaction = Drawing(start=view_pos, current=view_pos)
            self.events.emit(
                AnnotationEvent(EventType.DRAWING_STARTED, {"tool": self.tool.value})
            )
        elif self.tool == Tool.TEXT:
            self.text_anchor = self.transform.to_image(view_pos)
            self.events.emit(
                AnnotationEvent(
                    EventType.TEXT_INPUT_REQUESTED,
                    {"anchor": self.text_anchor, "view_pos": view_pos},
                )
            )
        elif self.tool == Tool.SELECT:
            index = self.hit_test(view_pos)
            if index is None:
                self._set_selection(None)
                return
            self._set_selection(index)
            self.history.record(self.annotations)
            self.interaction = Moving(index=index, last_pos=view_pos)

    def drag_move(self, view_pos: Point):
        """Continue the current drag to a new view-space position."""
        if isinstance(self.interaction, Drawing):
            self.interaction.current = view_pos
            self.events.emit(AnnotationEvent(EventType.DRAWING_UPDATED))
        elif isinstance(self.interaction, Moving):
            last = self.interaction.last_pos
            delta = self.transform.delta_to_image(
                (view_pos[0] - last[0], view_pos[1] - last[1])
            )
            self.interaction.last_pos = view_pos
            if self.store.update_geometry(self.interaction.index, delta):
                self.events.emit(
                    AnnotationEvent(
                        EventType.ANNOTATION_MOVED,
                        {"index": self.interaction.index, "delta": delta},
                    )
                )

    def drag_end(self, view_pos: Optional[Point] = None):
        """
        Finish the current drag.

        Args:
            view_pos: Release position; the last known pointer is used if None
        """
        state = self.interaction
        self.interaction = Idle()

        if isinstance(state, Drawing):
            end = view_pos if view_pos is not None else state.current
            if distance(state.start, end) <= self.cfg.min_drag_distance:
                logger.debug("Discarding drag below the minimum distance")
                self.events.emit(AnnotationEvent(EventType.DRAWING_CANCELLED))
                return
            annotation = self._build_shape(state.start, end)
            if annotation is not None:
                self._commit_add(annotation)
        elif isinstance(state, Moving):
            self.save()

    def preview(self) -> Optional[Annotation]:
        """In-progress shape in image space while drawing (not stored)."""
        if not isinstance(self.interaction, Drawing):
            return None
        return self._build_shape(self.interaction.start, self.interaction.current)

    def _build_shape(self, view_start: Point, view_end: Point) -> Optional[Annotation]:
        start = self.transform.to_image(view_start)
        end = self.transform.to_image(view_end)
        if self.tool == Tool.ARROW:
            return Arrow(start=start, end=end, color=self.color, thickness=self.thickness)
        if self.tool == Tool.RECTANGLE:
            return Rectangle(min=start, max=end, color=self.color, thickness=self.thickness)
        return None

    # Text entry

    @property
    def text_input_active(self) -> bool:
        return self.text_anchor is not None

    def commit_text(self, content: str) -> bool:
        """
        Finish pending text entry.

        Empty content is discarded without touching history.

        Returns:
            True if a text annotation was added
        """
        anchor = self.text_anchor
        self.text_anchor = None
        self.events.emit(AnnotationEvent(EventType.TEXT_INPUT_FINISHED))
        if anchor is None or not content:
            return False
        self._commit_add(
            Text(pos=anchor, content=content, font_size=self.font_size, color=self.color)
        )
        return True

    def cancel_text(self):
        if self.text_anchor is not None:
            self.text_anchor = None
            self.events.emit(AnnotationEvent(EventType.TEXT_INPUT_FINISHED))

    # Selection and editing

    def hit_test(self, view_pos: Point) -> Optional[int]:
        return hit_test(
            self.annotations,
            view_pos,
            self.transform,
            margin=self.cfg.hit_margin,
            char_width=self.cfg.text_char_width,
            line_height=self.cfg.text_line_height,
            text_margin=self.cfg.text_margin,
        )

    def select(self, index: Optional[int]):
        self._set_selection(index if self.store.is_valid_index(index) else None)

    def add_annotation(self, annotation: Annotation) -> int:
        """
        Append an annotation programmatically (recorded and saved).

        Raises:
            ValueError: For a text annotation with empty content

        Returns:
            Index of the new annotation
        """
        if isinstance(annotation, Text) and not annotation.content:
            raise ValueError("Text annotations need non-empty content")
        return self._commit_add(annotation)

    def remove_annotation(self, index: int) -> bool:
        """
        Remove one annotation (recorded and saved); out of range is a no-op.

        The selection and an in-progress move follow the annotation they
        pointed at; a move of the removed annotation is dropped.
        """
        if not self.store.is_valid_index(index):
            return False
        self.history.record(self.annotations)
        self.store.remove(index)
        if self.selected is not None:
            if self.selected == index:
                self._set_selection(None)
            elif self.selected > index:
                self._set_selection(self.selected - 1)
        if isinstance(self.interaction, Moving):
            if self.interaction.index == index:
                self.interaction = Idle()
            elif self.interaction.index > index:
                self.interaction.index -= 1
        self.events.emit(AnnotationEvent(EventType.ANNOTATION_REMOVED, {"index": index}))
        self.save()
        return True

    def delete_selected(self) -> bool:
        """Delete the selection, unless text entry is in progress."""
        if self.text_input_active or not self.store.is_valid_index(self.selected):
            return False
        return self.remove_annotation(self.selected)

    # History

    def undo(self) -> bool:
        """
        Undo the last recorded operation.

        Returns:
            True if undo was successful, False if no history
        """
        restored = self.history.undo(self.annotations)
        if restored is None:
            return False
        self._restore(restored)
        self.events.emit(AnnotationEvent(EventType.HISTORY_UNDONE))
        return True

    def redo(self) -> bool:
        """Redo the last undone operation; False if the redo stack is empty."""
        restored = self.history.redo(self.annotations)
        if restored is None:
            return False
        self._restore(restored)
        self.events.emit(AnnotationEvent(EventType.HISTORY_REDONE))
        return True

    def _restore(self, annotations: List[Annotation]):
        self.store.replace_all(annotations)
        if isinstance(self.interaction, Moving):
            self.interaction = Idle()
        if self.selected is not None and not self.store.is_valid_index(self.selected):
            self._set_selection(None)
        self.save()

    # Persistence

    def save(self) -> bool:
        """Persist the annotation list to the sidecar file."""
        if self.store.path is None:
            return False
        if self.store.save():
            self.events.emit(
                AnnotationEvent(
                    EventType.ANNOTATIONS_SAVED, {"path": str(self.store.path)}
                )
            )
            return True
        self.events.emit(
            AnnotationEvent(EventType.SAVE_FAILED, {"path": str(self.store.path)})
        )
        return False

    def export(self, output_path: Optional[Path] = None) -> Optional[Path]:
        """
        Write the flattened image.

        Args:
            output_path: Destination; defaults to ``<stem>_annotated.png``

        Returns:
            The written path, or None if nothing was exported
        """
        from ..export.rasterizer import export_annotated, export_path

        if self._image is None or self.image_path is None:
            logger.warning("No decoded image to export")
            self.events.emit(
                AnnotationEvent(EventType.EXPORT_FAILED, {"reason": "no image"})
            )
            return None

        if output_path is None:
            output_path = export_path(
                self.image_path, self.cfg.export_suffix, self.cfg.export_extension
            )
        output_path = Path(output_path)

        if export_annotated(self._image, self.annotations, output_path):
            self.events.emit(
                AnnotationEvent(EventType.EXPORT_COMPLETED, {"path": str(output_path)})
            )
            return output_path
        self.events.emit(
            AnnotationEvent(EventType.EXPORT_FAILED, {"path": str(output_path)})
        )
        return None

    def save_and_export(self) -> Optional[Path]:
        self.save()
        return self.export()

    # Visualization

    def get_visualization_data(self) -> Dict[str, Any]:
        """
        Get data needed for visualization.

        Returns:
            Dictionary with visualization data
        """
        return {
            "image": self._image,
            "annotations": self.annotations,
            "selected": self.selected,
            "preview": self.preview(),
            "transform": self.transform,
            "text_anchor": self.text_anchor,
        }

    # Internals

    def _commit_add(self, annotation: Annotation) -> int:
        self.history.record(self.annotations)
        index = self.store.add(annotation)
        self.events.emit(
            AnnotationEvent(
                EventType.ANNOTATION_ADDED, {"index": index, "kind": annotation.kind}
            )
        )
        self.save()
        return index

    def _set_selection(self, index: Optional[int]):
        if index == self.selected:
            return
        self.selected = index
        self.events.emit(AnnotationEvent(EventType.SELECTION_CHANGED, {"index": index}))
