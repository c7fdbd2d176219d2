"""Load node: read source and stencil images, crop the source to its region of interest."""

from radarmap.models import PipelineState, ProcessingError, ProcessingStage
from radarmap.utils import cv_utils


def load(state: PipelineState) -> PipelineState:
    """
    Read the source and stencil rasters as BGRA.

    Updates state with:
    - source: cropped source raster
    - stencil: stencil raster
    - errors: any non-recoverable I/O error
    """
    cfg = state.config

    source = cv_utils.load_image(state.source_path, stage=ProcessingStage.LOAD)
    if isinstance(source, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [source]})

    if cfg.crop_rect is not None:
        source = cv_utils.crop(source, cfg.crop_rect, stage=ProcessingStage.LOAD)
        if isinstance(source, ProcessingError):
            return state.model_copy(update={"errors": state.errors + [source]})

    stencil = cv_utils.load_image(state.stencil_path, stage=ProcessingStage.LOAD)
    if isinstance(stencil, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [stencil]})

    return state.model_copy(update={"source": source, "stencil": stencil})
