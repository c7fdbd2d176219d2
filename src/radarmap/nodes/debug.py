"""Debug artifact writers for the reprojection pipeline."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
from numpy.typing import NDArray

from radarmap import config
from radarmap.models import PipelineState, ProcessingError
from radarmap.utils import cv_utils

from .center_detection import GridScan, scan_grid_lines


def _safe_write(path: Path, image: NDArray[np.uint8]) -> str | None:
    saved = cv_utils.save_png(image, path)
    if isinstance(saved, ProcessingError):
        return f"W_DEBUG_WRITE_FAILED:{path.name}"
    return None


def draw_detection_overlay(
    source: NDArray[np.uint8],
    scan: GridScan,
    center: tuple[int, int],
) -> NDArray[np.uint8]:
    """Draw gridline candidates (cyan) and the chosen center (magenta)."""
    out = source.copy()
    rows, cols = out.shape[:2]
    for x in scan.columns.candidates:
        cv2.line(out, (x, 0), (x, rows - 1), (255, 255, 0, 255), 1)
    for y in scan.rows.candidates:
        cv2.line(out, (0, y), (cols - 1, y), (255, 255, 0, 255), 1)
    cv2.drawMarker(
        out,
        center,
        color=config.CENTER_MARKER_COLOR,
        markerType=cv2.MARKER_CROSS,
        markerSize=15,
        thickness=2,
    )
    return out


def mark_center(image: NDArray[np.uint8], center_pixel: tuple[int, int] | None) -> NDArray[np.uint8]:
    out = image.copy()
    if center_pixel is not None:
        x, y = center_pixel
        out[y, x] = np.asarray(config.CENTER_MARKER_COLOR, dtype=np.uint8)
    return out


def write_debug_artifacts(state: PipelineState, debug_dir: Path) -> list[str]:
    """Write intermediate rasters; returns warning codes for failed writes."""
    warnings: list[str] = []
    cfg = state.config
    debug_dir.mkdir(parents=True, exist_ok=True)

    if state.source is not None and state.calibration is not None:
        scan = scan_grid_lines(
            state.source, cfg.colors, cfg.background_window, cfg.candidate_ratio
        )
        overlay = draw_detection_overlay(
            state.source, scan, (state.calibration.center_x, state.calibration.center_y)
        )
        if (w := _safe_write(debug_dir / "detection.png", overlay)) is not None:
            warnings.append(w)

    if state.resampled is not None:
        if (w := _safe_write(debug_dir / "resampled.png", state.resampled)) is not None:
            warnings.append(w)

    if state.cleaned is not None:
        marked = mark_center(state.cleaned, state.center_pixel)
        if (w := _safe_write(debug_dir / "cleaned_center.png", marked)) is not None:
            warnings.append(w)

    return warnings
