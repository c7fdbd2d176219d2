"""Center and grid-spacing detection from background and gridline pixel counts."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from radarmap import config
from radarmap.models import (
    Calibration,
    ColorModel,
    PipelineState,
    ProcessingError,
    ProcessingStage,
)
from radarmap.utils import palette

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AxisScan:
    """Per-axis histograms (one bin per column or per row)."""

    background: NDArray[np.int64]
    density: NDArray[np.int64]  # background smoothed over the window
    line: NDArray[np.int64]
    candidates: tuple[int, ...]
    center: int


@dataclass(frozen=True)
class GridScan:
    columns: AxisScan
    rows: AxisScan
    deltas: dict[int, int]  # spacing -> count, in insertion order

    @property
    def mode_delta(self) -> int | None:
        best: tuple[int, int] | None = None
        for delta, count in self.deltas.items():
            if best is None or count > best[1]:
                best = (delta, count)
        return best[0] if best else None


def smooth_background(counts: NDArray[np.int64], window: int = config.BACKGROUND_WINDOW) -> NDArray[np.int64]:
    """Sum every bin with its +-window neighbours, replicating edge bins."""
    if counts.size == 0:
        return counts.copy()
    padded = np.pad(counts, window, mode="edge")
    kernel = np.ones(2 * window + 1, dtype=np.int64)
    return np.convolve(padded, kernel, mode="valid")


def _scan_axis(
    background: NDArray[np.int64],
    line: NDArray[np.int64],
    window: int,
    candidate_ratio: tuple[int, int],
    deltas: dict[int, int],
) -> AxisScan:
    density = smooth_background(background, window)
    num, den = candidate_ratio
    peak = int(line.max()) if line.size else 0
    threshold = peak * num // den

    candidates: list[int] = []
    # Running best is seeded with index 0 whether or not it is a candidate
    center = 0
    prev: int | None = None
    for idx in np.flatnonzero(line > threshold):
        idx = int(idx)
        candidates.append(idx)
        if density[idx] < density[center]:
            center = idx
        if prev is not None:
            deltas[idx - prev] = deltas.get(idx - prev, 0) + 1
        prev = idx

    return AxisScan(
        background=background,
        density=density,
        line=line,
        candidates=tuple(candidates),
        center=center,
    )


def scan_grid_lines(
    image: NDArray[np.uint8],
    colors: ColorModel,
    window: int = config.BACKGROUND_WINDOW,
    candidate_ratio: tuple[int, int] = config.CANDIDATE_RATIO,
) -> GridScan:
    """Build the column/row histograms and pick gridline candidates."""
    bg = palette.match_mask(image, colors.background_outer, colors.loose_eps)
    line = palette.match_mask(image, colors.line, colors.loose_eps)

    deltas: dict[int, int] = {}
    columns = _scan_axis(
        bg.sum(axis=0).astype(np.int64),
        line.sum(axis=0).astype(np.int64),
        window,
        candidate_ratio,
        deltas,
    )
    rows = _scan_axis(
        bg.sum(axis=1).astype(np.int64),
        line.sum(axis=1).astype(np.int64),
        window,
        candidate_ratio,
        deltas,
    )
    return GridScan(columns=columns, rows=rows, deltas=deltas)


def detect_center(
    image: NDArray[np.uint8],
    colors: ColorModel,
    default_grid_spacing: int = config.DEFAULT_GRID_SPACING,
    window: int = config.BACKGROUND_WINDOW,
    candidate_ratio: tuple[int, int] = config.CANDIDATE_RATIO,
) -> Calibration:
    """
    Recover the center pixel and scale factor of a source rendering.

    The center is the gridline candidate with the least background around it;
    the scale is the most frequent spacing between consecutive gridlines
    divided by ``default_grid_spacing``.

    Degenerate input (no candidates on an axis, or no spacing) yields a
    calibration with ``reliable=False``: the center falls back to index 0 on
    that axis and the scale to 1.0.
    """
    scan = scan_grid_lines(image, colors, window, candidate_ratio)

    logger.debug(
        "column candidates %s (peak %d of %d rows)",
        scan.columns.candidates,
        int(scan.columns.line.max(initial=0)),
        image.shape[0],
    )
    logger.debug(
        "row candidates %s (peak %d of %d cols)",
        scan.rows.candidates,
        int(scan.rows.line.max(initial=0)),
        image.shape[1],
    )
    logger.debug("deltas %s", scan.deltas)

    mode = scan.mode_delta
    reliable = mode is not None and bool(scan.columns.candidates) and bool(scan.rows.candidates)
    scale = mode / default_grid_spacing if mode is not None else 1.0

    calibration = Calibration(
        center_x=scan.columns.center,
        center_y=scan.rows.center,
        scale=scale,
        reliable=reliable,
    )
    logger.debug("detected center (%d, %d) scale %.4f", calibration.center_x, calibration.center_y, scale)
    return calibration


def detect(state: PipelineState) -> PipelineState:
    """
    Calibrate the cropped source raster.

    Manual center/scale from the config override the detected values. An
    unreliable calibration is a warning, or a non-recoverable error when
    ``strict_calibration`` is set.
    """
    cfg = state.config
    detected = detect_center(
        state.source,
        cfg.colors,
        default_grid_spacing=cfg.default_grid_spacing,
        window=cfg.background_window,
        candidate_ratio=cfg.candidate_ratio,
    )

    update: dict[str, object] = {}
    if cfg.manual_center is not None:
        update["center_x"], update["center_y"] = cfg.manual_center
    if cfg.manual_scale is not None:
        update["scale"] = cfg.manual_scale
    if cfg.manual_center is not None and cfg.manual_scale is not None:
        update["reliable"] = True
    calibration = detected.model_copy(update=update)

    if calibration.reliable:
        return state.model_copy(update={"calibration": calibration})

    details = {
        "center_x": calibration.center_x,
        "center_y": calibration.center_y,
        "scale": calibration.scale,
    }
    if cfg.strict_calibration:
        return state.model_copy(update={
            "calibration": calibration,
            "errors": state.errors + [ProcessingError(
                stage=ProcessingStage.DETECT,
                error_type="calibration_unreliable",
                recoverable=False,
                message="No gridline spacing detected; calibration is a default",
                details=details,
            )],
        })
    return state.model_copy(update={
        "calibration": calibration,
        "warnings": state.warnings + [
            f"W_CALIBRATION_UNRELIABLE:{calibration.center_x}:{calibration.center_y}:{calibration.scale:g}"
        ],
    })
