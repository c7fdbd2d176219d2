"""Utility modules for radarmap."""

from radarmap.utils.cv_utils import (
    # Type aliases
    Image,
    align_to,
    crop,
    ensure_bgra,
    # Image I/O
    load_image,
    save_png,
)
from radarmap.utils.palette import (
    color_distance,
    colors_equal,
    exact_mask,
    is_palette_color,
    match_mask,
    palette_mask,
    replacement_mask,
)

__all__ = [
    # Type aliases
    "Image",
    # Image I/O
    "load_image",
    "save_png",
    # Geometry
    "crop",
    "align_to",
    "ensure_bgra",
    # Color matching
    "colors_equal",
    "is_palette_color",
    "color_distance",
    "match_mask",
    "exact_mask",
    "palette_mask",
    "replacement_mask",
]
