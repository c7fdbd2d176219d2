"""
Tolerance-based color matching against the legend palette.

Two colors are equal within ``eps`` when the sum of their absolute
per-channel differences is strictly below ``eps``. Anti-aliasing and lossy
re-encoding shift colors by a few units, so exact comparison is reserved
for the transparent color and the bad palette color exclusion.

Scalar helpers work on single colors; the ``*_mask`` helpers evaluate the
same predicates over a whole (rows, cols, 4) raster.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from radarmap.models import ColorModel


def colors_equal(a: Sequence[int], b: Sequence[int], eps: int) -> bool:
    diff = sum(abs(int(x) - int(y)) for x, y in zip(a, b))
    return diff < eps


def is_palette_color(colors: ColorModel, color: Sequence[int]) -> bool:
    return any(colors_equal(p, color, colors.tight_eps) for p in colors.palette)


def is_replacement_color(colors: ColorModel, color: Sequence[int]) -> bool:
    """Palette colors other than the bad one may be used as fills."""
    return is_palette_color(colors, color) and tuple(color) != colors.bad_palette_color


def color_distance(raster: NDArray[np.uint8], color: Sequence[int]) -> NDArray[np.int32]:
    ref = np.asarray(color, dtype=np.int32)
    return np.abs(raster.astype(np.int32) - ref).sum(axis=-1)


def match_mask(raster: NDArray[np.uint8], color: Sequence[int], eps: int) -> NDArray[np.bool_]:
    return color_distance(raster, color) < eps


def exact_mask(raster: NDArray[np.uint8], color: Sequence[int]) -> NDArray[np.bool_]:
    return np.all(raster == np.asarray(color, dtype=raster.dtype), axis=-1)


def palette_mask(raster: NDArray[np.uint8], colors: ColorModel) -> NDArray[np.bool_]:
    mask = np.zeros(raster.shape[:2], dtype=bool)
    for p in colors.palette:
        mask |= match_mask(raster, p, colors.tight_eps)
    return mask


def replacement_mask(raster: NDArray[np.uint8], colors: ColorModel) -> NDArray[np.bool_]:
    return palette_mask(raster, colors) & ~exact_mask(raster, colors.bad_palette_color)
