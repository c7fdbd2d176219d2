"""Write node: final PNG, optional georeference sidecar and debug artifacts."""

from __future__ import annotations

import json
import math
from pathlib import Path

from radarmap import config
from radarmap.models import (
    GeoreferenceInfo,
    LonLatBounds,
    PipelineState,
    ProcessingError,
    ProcessingStage,
)
from radarmap.utils import cv_utils
from radarmap.utils.projection import ProjectionError, open_projections

from .debug import write_debug_artifacts


def build_georeference(state: PipelineState) -> GeoreferenceInfo:
    """Describe the cleaned raster's placement in EPSG:3857 and lon/lat."""
    lon, lat = state.earth_center
    bounds = state.bounds
    with open_projections(lon, lat) as projections:
        west, south = projections.transform_point("global", "geodetic", bounds.min_x, bounds.min_y)
        east, north = projections.transform_point("global", "geodetic", bounds.max_x, bounds.max_y)
    rows, cols = state.cleaned.shape[:2]
    return GeoreferenceInfo(
        width=cols,
        height=rows,
        crs=config.GLOBAL_PROJ,
        mercator_bounds=bounds,
        lonlat_bounds=LonLatBounds(
            west=math.degrees(west),
            south=math.degrees(south),
            east=math.degrees(east),
            north=math.degrees(north),
        ),
        earth_center=state.earth_center,
        calibration=state.calibration,
    )


def write(state: PipelineState) -> PipelineState:
    """
    Write the cleaned raster as PNG.

    Updates state with:
    - written_path: path of the PNG
    - georef_written_path: path of the JSON sidecar, when configured
    - errors: any non-recoverable write error
    """
    cfg = state.config

    saved = cv_utils.save_png(state.cleaned, state.output_path, compression=cfg.png_compression)
    if isinstance(saved, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [saved]})

    update: dict[str, object] = {"written_path": str(saved)}
    warnings = list(state.warnings)

    if cfg.georef_path:
        georef_path = Path(cfg.georef_path)
        try:
            info = build_georeference(state)
            georef_path.parent.mkdir(parents=True, exist_ok=True)
            georef_path.write_text(json.dumps(info.model_dump(mode="json"), indent=2))
            update["georef_written_path"] = str(georef_path)
        except (OSError, ProjectionError) as e:
            warnings.append(f"W_GEOREF_NOT_WRITTEN:{e}")

    if cfg.debug_dir:
        warnings.extend(write_debug_artifacts(state, Path(cfg.debug_dir)))

    update["warnings"] = warnings
    return state.model_copy(update=update)
