"""
Pixel buffer I/O.

Buffers are always ``(H, W, 4)`` uint8 arrays in RGBA order; OpenCV's BGR(A)
ordering never leaks out of this module.
"""

import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def to_rgba(image: np.ndarray) -> np.ndarray:
    """
    Normalize a decoded OpenCV image to RGBA.

    Args:
        image: Grayscale, BGR or BGRA array as returned by ``cv2.imread``

    Returns:
        RGBA uint8 array
    """
    if image.dtype != np.uint8:
        # 16-bit PNGs and friends
        scale = 255.0 / np.iinfo(image.dtype).max if image.dtype.kind in "ui" else 255.0
        image = np.clip(image.astype(np.float64) * scale, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    raise ValueError(f"Unsupported channel count: {image.shape[2]}")


def load_rgba(path: Path) -> Optional[np.ndarray]:
    """
    Decode an image file into an RGBA buffer.

    Returns:
        The buffer, or None if the file is missing or cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Image not found: {path}")
        return None
    try:
        image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if image is None:
            logger.warning(f"Could not decode image: {path}")
            return None
        return to_rgba(image)
    except (cv2.error, ValueError) as e:
        logger.warning(f"Could not decode image {path}: {e}")
        return None


def save_rgba(path: Path, buffer: np.ndarray) -> bool:
    """
    Encode an RGBA buffer; the format follows the file extension.

    Returns:
        True if the file was written
    """
    path = Path(path)
    if buffer.ndim != 3 or buffer.shape[2] != 4:
        raise ValueError(f"Buffer must be (H, W, 4), got shape {buffer.shape}")
    try:
        return bool(cv2.imwrite(str(path), cv2.cvtColor(buffer, cv2.COLOR_RGBA2BGRA)))
    except cv2.error as e:
        logger.error(f"Could not encode {path}: {e}")
        return False
