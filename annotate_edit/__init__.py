"""Vector markup for raster images: annotate, persist beside the image, export flattened."""

from pathlib import Path

__version__ = (Path(__file__).parent / "VERSION").read_text().strip()
