"""Inverse-mapping resampler from the local azimuthal-equidistant frame to Web-Mercator."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from radarmap import config
from radarmap.models import (
    Calibration,
    MercatorBounds,
    PipelineState,
    ProcessingError,
    ProcessingStage,
)
from radarmap.utils.projection import ProjectionError, Projections, open_projections

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResampleResult:
    raster: NDArray[np.uint8]
    bounds: MercatorBounds
    center_pixel: tuple[int, int] | None  # (x, y) of the earth center in the output


def source_pixel_coords(
    local_x: NDArray[np.float64],
    local_y: NDArray[np.float64],
    calibration: Calibration,
    pixels_per_radian: float,
) -> tuple[NDArray[np.int64], NDArray[np.int64], NDArray[np.bool_]]:
    """Convert local-projection radians to source pixel indices.

    Rounds by adding 0.5 and truncating toward zero. Raster y grows
    downward while local y grows north, hence the sign flip. The returned
    mask is False where the projection produced non-finite values.
    """
    finite = np.isfinite(local_x) & np.isfinite(local_y)
    fx = np.where(finite, local_x * pixels_per_radian + calibration.center_x + 0.5, 0.0)
    fy = np.where(finite, -local_y * pixels_per_radian + calibration.center_y + 0.5, 0.0)
    return np.trunc(fx).astype(np.int64), np.trunc(fy).astype(np.int64), finite


def sample_nearest(
    source: NDArray[np.uint8],
    src_x: NDArray[np.int64],
    src_y: NDArray[np.int64],
    valid: NDArray[np.bool_] | None = None,
) -> NDArray[np.uint8]:
    """Pull source pixels at integer coordinates; out-of-range is transparent."""
    rows, cols = source.shape[:2]
    inside = (src_x >= 0) & (src_x < cols) & (src_y >= 0) & (src_y < rows)
    if valid is not None:
        inside &= valid
    out = np.zeros(src_x.shape + (source.shape[2],), dtype=np.uint8)
    out[inside] = source[src_y[inside], src_x[inside]]
    return out


def target_bounds(
    projections: Projections,
    earth_center_rad: tuple[float, float],
    source_shape: tuple[int, ...],
    pixels_per_radian: float,
) -> MercatorBounds:
    """Mercator bounding box of the source raster's angular extent."""
    lon, lat = earth_center_rad
    rows, cols = source_shape[:2]
    radius_x = cols / 2.0 / pixels_per_radian / math.cos(lat)
    radius_y = rows / 2.0 / pixels_per_radian

    x0, y0 = projections.transform_point("geodetic", "global", lon - radius_x, lat - radius_y)
    x1, y1 = projections.transform_point("geodetic", "global", lon + radius_x, lat + radius_y)
    logger.debug("earth radius (%.8f, %.8f) rad", radius_x, radius_y)
    return MercatorBounds(min_x=x0, min_y=y0, max_x=x1, max_y=y1)


def target_grid(
    bounds: MercatorBounds, width: int, height: int
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Mercator coordinates of every output pixel, row 0 at the northern edge."""
    cols = np.arange(width, dtype=np.float64)
    rows = np.arange(height, dtype=np.float64)
    xs = bounds.min_x + (bounds.width * cols) / width
    ys = bounds.min_y + (bounds.height * (height - rows)) / height
    return np.meshgrid(xs, ys)


def resample(
    source: NDArray[np.uint8],
    earth_center_deg: tuple[float, float],
    calibration: Calibration,
    base_pixels_per_radian: float = config.BASE_PIXELS_PER_RADIAN,
    target_height: int = config.TARGET_HEIGHT,
) -> ResampleResult:
    """
    Resample ``source`` onto a Web-Mercator grid of ``target_height`` rows.

    Every output pixel is mapped back through global -> local projection to
    the nearest source pixel (no interpolation). The output width keeps the
    aspect ratio of the Mercator bounding box.

    Raises:
        ProjectionError: if a projection handle cannot be constructed
    """
    lon_deg, lat_deg = earth_center_deg
    center_rad = (math.radians(lon_deg), math.radians(lat_deg))
    ppr = base_pixels_per_radian * calibration.scale
    logger.debug("source pixels per radian %.4f", ppr)

    with open_projections(lon_deg, lat_deg) as projections:
        logger.debug(
            "center@local %s, center@global %s",
            projections.transform_point("geodetic", "local", *center_rad),
            projections.transform_point("geodetic", "global", *center_rad),
        )
        bounds = target_bounds(projections, center_rad, source.shape, ppr)
        width = int(target_height / bounds.height * bounds.width)
        logger.debug("target bounds %s, size %dx%d", bounds, width, target_height)

        gx, gy = target_grid(bounds, width, target_height)
        lx, ly = projections.transform("global", "local", gx, gy)
        src_x, src_y, finite = source_pixel_coords(lx, ly, calibration, ppr)
        raster = sample_nearest(source, src_x, src_y, finite)

        center_pixel = _center_pixel(projections, bounds, width, target_height)

    return ResampleResult(raster=raster, bounds=bounds, center_pixel=center_pixel)


def _center_pixel(
    projections: Projections, bounds: MercatorBounds, width: int, height: int
) -> tuple[int, int] | None:
    cx, cy = projections.transform_point("local", "global", 0.0, 0.0)
    if not (math.isfinite(cx) and math.isfinite(cy)) or width <= 0:
        return None
    px = int((cx - bounds.min_x) / bounds.width * width + 0.5)
    py = int((bounds.max_y - cy) / bounds.height * height + 0.5)
    if 0 <= px < width and 0 <= py < height:
        return (px, py)
    return None


def reproject(state: PipelineState) -> PipelineState:
    """Resample the calibrated source onto the Web-Mercator grid."""
    cfg = state.config
    try:
        result = resample(
            state.source,
            state.earth_center,
            state.calibration,
            base_pixels_per_radian=cfg.base_pixels_per_radian,
            target_height=cfg.target_height,
        )
    except ProjectionError as e:
        return state.model_copy(update={
            "errors": state.errors + [ProcessingError(
                stage=ProcessingStage.RESAMPLE,
                error_type="projection_init_failed",
                recoverable=False,
                message=str(e),
                details={"projection": e.name, "definition": e.definition},
            )],
        })

    if result.raster.shape[1] == 0:
        return state.model_copy(update={
            "errors": state.errors + [ProcessingError(
                stage=ProcessingStage.RESAMPLE,
                error_type="empty_target",
                recoverable=False,
                message="Target raster has zero width",
                details={"bounds": result.bounds.model_dump()},
            )],
        })

    return state.model_copy(update={
        "resampled": result.raster,
        "bounds": result.bounds,
        "center_pixel": result.center_pixel,
    })
