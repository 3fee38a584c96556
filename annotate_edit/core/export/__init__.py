"""
Export module - flattening annotations into raster images.
"""

from .rasterizer import (
    draw_thick_line,
    rasterize,
    export_annotated,
    export_path,
)
from .image_io import load_rgba, save_rgba

__all__ = [
    "draw_thick_line",
    "rasterize",
    "export_annotated",
    "export_path",
    "load_rgba",
    "save_rgba",
]
