from pydantic import BaseModel, ConfigDict, model_validator

from radarmap import config

Color = tuple[int, int, int, int]


class ColorModel(BaseModel):
    """Reference colors and tolerances shared by detection and cleanup.

    Colors are in (B, G, R, A) order to match rasters read by OpenCV.
    """

    model_config = ConfigDict(frozen=True)

    palette: tuple[Color, ...] = config.PALETTE
    bad_palette_color: Color = config.BAD_PALETTE_COLOR

    background_outer: Color = config.BACKGROUND_OUTER
    background_inner: Color = config.BACKGROUND_INNER
    line: Color = config.LINE_COLOR
    boundary: Color = config.BOUNDARY_COLOR
    black: Color = config.BLACK
    transparent: Color = config.TRANSPARENT

    tight_eps: int = config.TIGHT_EPS
    loose_eps: int = config.LOOSE_EPS
    road_eps: int = config.ROAD_EPS

    @model_validator(mode="after")
    def _bad_color_in_palette(self) -> "ColorModel":
        if self.bad_palette_color not in self.palette:
            raise ValueError(
                f"bad_palette_color {self.bad_palette_color} is not a palette entry"
            )
        return self
