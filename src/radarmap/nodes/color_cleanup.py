"""Palette-conformance cleanup of the resampled raster.

Each output pixel is computed from the untouched resampled raster (the
reference) and the stencil only, so the whole pass is a set of
whole-raster mask operations over shifted neighbourhood views.
"""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray

from radarmap.models import ColorModel, PipelineState
from radarmap.utils import cv_utils, palette

BOUNDARY_RADIUS = 2
BOUNDARY_MIN_COUNT = 5  # strictly more than this many of each kind
NEIGHBOUR_OFFSETS = range(-2, 2)  # [-2, 2): 4x4 window, not centered
NEIGHBOUR_MAX_DISTANCE = 10


def _shifted(mask: NDArray[np.bool_], dx: int, dy: int, pad: int, fill: bool) -> NDArray[np.bool_]:
    """View where out[y, x] == mask[y + dy, x + dx], ``fill`` outside."""
    padded = np.pad(mask, pad, mode="constant", constant_values=fill)
    rows, cols = mask.shape
    return padded[pad + dy : pad + dy + rows, pad + dx : pad + dx + cols]


def _window(radius: int) -> Iterator[tuple[int, int]]:
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            yield dx, dy


def boundary_mask(reference: NDArray[np.uint8], colors: ColorModel) -> NDArray[np.bool_]:
    """Pixels on the seam between the map interior and the outer chrome.

    Out-of-bounds positions count as outer background.
    """
    outer = palette.match_mask(reference, colors.background_outer, colors.loose_eps)
    outer |= palette.exact_mask(reference, colors.transparent)
    inner = palette.match_mask(reference, colors.background_inner, colors.loose_eps)

    cnt_outer = np.zeros(reference.shape[:2], dtype=np.int32)
    cnt_inner = np.zeros(reference.shape[:2], dtype=np.int32)
    for dx, dy in _window(BOUNDARY_RADIUS):
        cnt_outer += _shifted(outer, dx, dy, BOUNDARY_RADIUS, True)
        cnt_inner += _shifted(inner, dx, dy, BOUNDARY_RADIUS, False)
    return (cnt_outer > BOUNDARY_MIN_COUNT) & (cnt_inner > BOUNDARY_MIN_COUNT)


def kept_black_mask(
    reference: NDArray[np.uint8], stencil: NDArray[np.uint8], colors: ColorModel
) -> NDArray[np.bool_]:
    """Black pixels with no stencil ink nearby are intentional and kept.

    The stencil may have any shape; neighbours are looked up within the
    stencil's own bounds, so a larger stencil still contributes its pixels
    just past the reference's right and bottom edges.
    """
    rows, cols = reference.shape[:2]
    black = palette.match_mask(reference, colors.black, colors.tight_eps)

    lo, hi = -NEIGHBOUR_OFFSETS[0], NEIGHBOUR_OFFSETS[-1]
    stencil_black = palette.match_mask(stencil[: rows + hi, : cols + hi], colors.black, colors.loose_eps)
    padded = np.zeros((rows + lo + hi, cols + lo + hi), dtype=bool)
    padded[lo : lo + stencil_black.shape[0], lo : lo + stencil_black.shape[1]] = stencil_black

    near = np.zeros((rows, cols), dtype=bool)
    for dx in NEIGHBOUR_OFFSETS:
        for dy in NEIGHBOUR_OFFSETS:
            near |= padded[lo + dy : lo + dy + rows, lo + dx : lo + dx + cols]
    return black & ~near


def bad_road_mask(
    reference: NDArray[np.uint8], stencil: NDArray[np.uint8], colors: ColorModel
) -> NDArray[np.bool_]:
    """Bad palette color where the stencil shows a road of the same color."""
    return palette.match_mask(
        reference, colors.bad_palette_color, colors.tight_eps
    ) & palette.match_mask(stencil, colors.bad_palette_color, colors.road_eps)


def nearest_palette_neighbour(reference: NDArray[np.uint8], colors: ColorModel) -> NDArray[np.uint8]:
    """
    Closest replacement-eligible palette color in the 4x4 window of each pixel.

    Offsets are scanned dx-major, dy-minor over [-2, 2); a neighbour wins when
    its Manhattan distance is strictly below the best so far, so among
    equidistant neighbours the first in scan order is kept. Pixels with no
    eligible neighbour get the transparent color.
    """
    rows, cols = reference.shape[:2]
    eligible = palette.replacement_mask(reference, colors)

    result = np.empty_like(reference)
    result[:] = np.asarray(colors.transparent, dtype=np.uint8)
    best = np.full((rows, cols), NEIGHBOUR_MAX_DISTANCE, dtype=np.int32)

    pad = 2
    padded = np.pad(reference, ((pad, pad), (pad, pad), (0, 0)), mode="constant")
    for dx in NEIGHBOUR_OFFSETS:
        for dy in NEIGHBOUR_OFFSETS:
            dist = abs(dx) + abs(dy)
            take = _shifted(eligible, dx, dy, pad, False) & (dist < best)
            neighbour = padded[pad + dy : pad + dy + rows, pad + dx : pad + dx + cols]
            result[take] = neighbour[take]
            best[take] = dist
    return result


def clean_colors(
    reference: NDArray[np.uint8],
    stencil: NDArray[np.uint8],
    colors: ColorModel,
) -> NDArray[np.uint8]:
    """
    Replace pixels that do not belong to the legend palette.

    Rules, in priority order:
    1. Seam between outer and inner background -> boundary color.
    2. Non-palette pixels (other than kept black), and bad-color pixels
       over a stencil road -> nearest palette neighbour, or transparent.
    3. Anything else is left unchanged.

    ``reference`` is never modified. The stencil is anchored top-left; where
    it does not cover the reference it reads as transparent.

    Returns:
        New BGRA raster with the shape of ``reference``
    """
    replace = ~palette.palette_mask(reference, colors) & ~kept_black_mask(reference, stencil, colors)
    aligned = cv_utils.align_to(stencil, reference.shape, colors.transparent)
    replace |= bad_road_mask(reference, aligned, colors)
    boundary = boundary_mask(reference, colors)

    out = reference.copy()
    if replace.any():
        fills = nearest_palette_neighbour(reference, colors)
        out[replace] = fills[replace]
    out[boundary] = np.asarray(colors.boundary, dtype=np.uint8)
    return out


def clean(state: PipelineState) -> PipelineState:
    """Run the palette cleanup over the resampled raster."""
    warnings = list(state.warnings)
    if state.stencil.shape[:2] != state.resampled.shape[:2]:
        warnings.append(
            "W_STENCIL_SHAPE_MISMATCH:"
            f"{state.stencil.shape[1]}x{state.stencil.shape[0]}:"
            f"{state.resampled.shape[1]}x{state.resampled.shape[0]}"
        )
    cleaned = clean_colors(state.resampled, state.stencil, state.config.colors)
    return state.model_copy(update={"cleaned": cleaned, "warnings": warnings})
