import numpy as np
from pydantic import BaseModel, ConfigDict

from radarmap import config

from .colors import ColorModel
from .errors import ProcessingError
from .geometry import Calibration, MercatorBounds


class PipelineConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    colors: ColorModel = ColorModel()

    # Region of interest (x, y, width, height); None keeps the whole image
    crop_rect: tuple[int, int, int, int] | None = config.CROP_RECT

    base_pixels_per_radian: float = config.BASE_PIXELS_PER_RADIAN
    target_height: int = config.TARGET_HEIGHT
    png_compression: int = config.PNG_COMPRESSION

    default_grid_spacing: int = config.DEFAULT_GRID_SPACING
    background_window: int = config.BACKGROUND_WINDOW
    candidate_ratio: tuple[int, int] = config.CANDIDATE_RATIO

    # Manual calibration overrides detection when set
    manual_center: tuple[int, int] | None = None
    manual_scale: float | None = None
    strict_calibration: bool = False

    georef_path: str | None = None
    debug_dir: str | None = None


class PipelineState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    source_path: str
    output_path: str
    stencil_path: str
    earth_center: tuple[float, float]  # lon, lat in degrees
    config: PipelineConfig = PipelineConfig()

    source: np.ndarray | None = None
    stencil: np.ndarray | None = None

    calibration: Calibration | None = None

    resampled: np.ndarray | None = None
    bounds: MercatorBounds | None = None
    center_pixel: tuple[int, int] | None = None

    cleaned: np.ndarray | None = None

    written_path: str | None = None
    georef_written_path: str | None = None

    warnings: list[str] = []
    errors: list[ProcessingError] = []
