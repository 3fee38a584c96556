"""
Engine configuration.

Defaults live in a single EasyDict so every tunable can be overridden from
the environment (``ANNOTATE_EDIT_<KEY>``, nested keys joined with ``__``).
"""

import copy
import os
from typing import Mapping, Optional

from easydict import EasyDict as edict

from .env import load_cfg_from_env

DEFAULT_CONFIG = edict(
    # View transform
    zoom_min=0.1,
    zoom_max=10.0,
    scroll_zoom_rate=0.002,
    # Hit testing, in view-space units
    hit_margin=8.0,
    text_char_width=0.6,
    text_line_height=1.2,
    text_margin=4.0,
    # Gestures shorter than this (view-space units) are treated as clicks
    min_drag_distance=5.0,
    # Persistence
    sidecar_extension="annotz",
    export_suffix="_annotated",
    export_extension=".png",
    # Used when the source image cannot be decoded
    placeholder_width=800,
    placeholder_height=600,
    # Style defaults and the ranges the settings are clamped to
    default_color=(1.0, 0.0, 0.0, 1.0),
    default_thickness=3.0,
    thickness_min=1.0,
    thickness_max=20.0,
    default_font_size=20.0,
    font_size_min=8.0,
    font_size_max=72.0,
    # 0 keeps every undo snapshot
    history_limit=0,
)


def load_config(env: Optional[Mapping[str, str]] = None) -> edict:
    """Return a fresh copy of the defaults with environment overrides applied."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if env is None:
        env = os.environ
    return load_cfg_from_env(cfg, dict(env))
