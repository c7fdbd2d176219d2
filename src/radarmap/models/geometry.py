from pydantic import BaseModel, ConfigDict


class Calibration(BaseModel):
    """Pixel-to-angle calibration of a source rendering.

    ``center_x``/``center_y`` locate the earth center in the cropped source
    raster; ``scale`` multiplies the base pixels-per-radian constant.
    ``reliable`` is False when detection found no grid spacing or no
    candidate on an axis, in which case the values are defaults.
    """

    model_config = ConfigDict(frozen=True)

    center_x: int
    center_y: int
    scale: float
    reliable: bool = True


class MercatorBounds(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


class LonLatBounds(BaseModel):
    west: float
    south: float
    east: float
    north: float


class GeoreferenceInfo(BaseModel):
    """Sidecar describing where the output raster sits on the globe."""

    width: int
    height: int
    crs: str
    mercator_bounds: MercatorBounds
    lonlat_bounds: LonLatBounds
    earth_center: tuple[float, float]
    calibration: Calibration
