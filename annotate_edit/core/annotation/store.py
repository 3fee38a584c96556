"""
Ordered annotation storage backed by a JSON sidecar file.

The sidecar lives next to the image: ``photo.png`` is annotated by
``photo.png.annotz``. List order is z-order and is preserved on disk.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .state import (
    Annotation,
    Text,
    annotation_from_dict,
    annotation_to_dict,
    translated,
)

logger = logging.getLogger(__name__)

SIDECAR_EXTENSION = "annotz"


def sidecar_path(image_path: Path, extension: str = SIDECAR_EXTENSION) -> Path:
    """
    Derive the sidecar path for an image.

    The image's own extension is kept as an extra suffix so the sidecar is
    clearly tied to (but distinct from) the image file. An image without an
    extension gets `photo.annotz`; older sidecars named `photo..annotz` are
    not read.
    """
    image_path = Path(image_path)
    return image_path.with_name(f"{image_path.name}.{extension}")


def parse_annotations(data) -> List[Annotation]:
    """
    Build the annotation list from a decoded sidecar document.

    Text records with empty content are skipped; anything else that is not
    a well-formed record makes the whole document invalid.

    Raises:
        ValueError: If the document is malformed
    """
    if not isinstance(data, dict) or not isinstance(data.get("annotations"), list):
        raise ValueError("Sidecar must be an object with an 'annotations' list")

    annotations = []
    for position, record in enumerate(data["annotations"]):
        annotation = annotation_from_dict(record)
        if isinstance(annotation, Text) and not annotation.content:
            logger.warning(f"Skipping text annotation #{position} with empty content")
            continue
        annotations.append(annotation)
    return annotations


def dump_annotations(annotations: List[Annotation]) -> str:
    """Serialize the full list as a pretty-printed sidecar document."""
    return json.dumps(
        {"annotations": [annotation_to_dict(a) for a in annotations]}, indent=2
    )


class AnnotationStore:
    """
    Ordered collection of annotations for one image.

    Mutations are silent no-ops on out-of-range indices. Persistence never
    raises: a missing or corrupt sidecar loads as an empty list, and a failed
    save is logged and leaves the previous file intact.
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Args:
            path: Sidecar file location; None keeps the store in memory only
        """
        self.path = Path(path) if path is not None else None
        self._annotations: List[Annotation] = []

    @classmethod
    def for_image(cls, image_path: Path, extension: str = SIDECAR_EXTENSION):
        return cls(sidecar_path(image_path, extension))

    @property
    def annotations(self) -> List[Annotation]:
        return self._annotations

    def __len__(self) -> int:
        return len(self._annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._annotations)

    def __getitem__(self, index: int) -> Annotation:
        return self._annotations[index]

    def is_valid_index(self, index: Optional[int]) -> bool:
        return index is not None and 0 <= index < len(self._annotations)

    def add(self, annotation: Annotation) -> int:
        """Append on top of the z-order and return its index."""
        self._annotations.append(annotation)
        return len(self._annotations) - 1

    def remove(self, index: int) -> bool:
        """Remove the annotation at ``index``; returns False if out of range."""
        if not self.is_valid_index(index):
            return False
        del self._annotations[index]
        return True

    def update_geometry(self, index: int, delta: Tuple[float, float]) -> bool:
        """Translate one annotation by an image-space delta, keeping its style."""
        if not self.is_valid_index(index):
            return False
        self._annotations[index] = translated(self._annotations[index], delta[0], delta[1])
        return True

    def replace_all(self, annotations: List[Annotation]):
        self._annotations = list(annotations)

    def load(self) -> List[Annotation]:
        """
        Read the sidecar file, replacing the in-memory list.

        Returns:
            The loaded list (empty if the file is missing or malformed)
        """
        self._annotations = []
        if self.path is None or not self.path.exists():
            return self._annotations

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._annotations = parse_annotations(data)
            logger.info(f"Loaded {len(self._annotations)} annotations from {self.path}")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable sidecar {self.path}: {e}")
            self._annotations = []

        return self._annotations

    def save(self) -> bool:
        """
        Write the whole list to the sidecar file.

        The document is written to a temporary file in the same directory and
        moved over the sidecar, so readers never see a partial file.

        Returns:
            True on success, False if the write failed
        """
        if self.path is None:
            return False

        tmp_name = None
        try:
            payload = dump_annotations(self._annotations)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
            logger.debug(f"Saved {len(self._annotations)} annotations to {self.path}")
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Could not save annotations to {self.path}: {e}")
            return False
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
