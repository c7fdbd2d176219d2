from .colors import Color, ColorModel
from .errors import ProcessingError, ProcessingStage
from .geometry import Calibration, GeoreferenceInfo, LonLatBounds, MercatorBounds
from .state import PipelineConfig, PipelineState

__all__ = [
    "Calibration",
    "Color",
    "ColorModel",
    "GeoreferenceInfo",
    "LonLatBounds",
    "MercatorBounds",
    "PipelineConfig",
    "PipelineState",
    "ProcessingError",
    "ProcessingStage",
]
