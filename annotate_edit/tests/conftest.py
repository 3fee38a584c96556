"""
Test fixtures and utilities for annotate_edit tests.

Provides reusable fixtures for images on disk, sessions and annotations.
"""

import pytest
import numpy as np
import cv2
from pathlib import Path
import tempfile

from annotate_edit.core.annotation import (
    AnnotationSession,
    Arrow,
    Color,
    Rectangle,
    Text,
    ViewTransform,
)
from annotate_edit.utils.config import load_config

IMAGE_SIZE = (100, 100)  # (width, height)


@pytest.fixture
def temp_dir():
    """Create temporary directory for images and sidecars."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_image():
    """Create a white RGBA test image."""
    w, h = IMAGE_SIZE
    return np.full((h, w, 4), 255, dtype=np.uint8)


@pytest.fixture
def image_file(temp_dir):
    """Write a white BGR PNG to disk and return its path."""
    w, h = IMAGE_SIZE
    path = temp_dir / "photo.png"
    cv2.imwrite(str(path), np.full((h, w, 3), 255, dtype=np.uint8))
    return path


@pytest.fixture
def cfg():
    """Default configuration, ignoring the caller's environment."""
    return load_config({})


@pytest.fixture
def identity_transform():
    """Transform under which view space equals image space."""
    w, h = IMAGE_SIZE
    return ViewTransform(image_size=(float(w), float(h)), viewport_size=(float(w), float(h)))


@pytest.fixture
def session(cfg, image_file):
    """
    Session on ``image_file`` whose viewport matches the image,
    so view coordinates equal image coordinates until pan/zoom change.
    """
    session = AnnotationSession(cfg)
    session.open_image(image_file)
    session.set_viewport_size(*IMAGE_SIZE)
    return session


@pytest.fixture
def red():
    return Color(1.0, 0.0, 0.0, 1.0)


@pytest.fixture
def sample_annotations(red):
    """One annotation of every kind, in z-order."""
    return [
        Arrow(start=(0.0, 0.0), end=(100.0, 0.0), color=red, thickness=3.0),
        Rectangle(min=(10.0, 10.0), max=(50.0, 40.0), color=Color(0, 1, 0, 1), thickness=2.0),
        Text(pos=(20.0, 60.0), content="hello", font_size=20.0, color=Color(0, 0, 1, 0.5)),
    ]


def drag(session, start, end, steps=4):
    """Simulate a primary-button drag from ``start`` to ``end``."""
    session.drag_start(start)
    for i in range(1, steps + 1):
        t = i / steps
        session.drag_move(
            (start[0] + (end[0] - start[0]) * t, start[1] + (end[1] - start[1]) * t)
        )
    session.drag_end(end)


def assert_points_close(p1, p2, atol=1e-6):
    """Assert two 2D points are equal within tolerance."""
    assert np.allclose(p1, p2, atol=atol), f"Points not equal: {p1} != {p2}"
