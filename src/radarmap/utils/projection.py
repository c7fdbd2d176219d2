"""
Geodetic projection boundary backed by pyproj.

Three projection contexts are used by the resampler:
- geodetic: longitude/latitude, the common coordinate space
- local: azimuthal-equidistant on the unit sphere centered at the earth center,
  so projected units are radians of arc
- global: Web-Mercator (EPSG:3857)

Geographic coordinates cross this boundary in radians, like the PROJ.4 API.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike, NDArray
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from radarmap import config

logger = logging.getLogger(__name__)


class ProjectionError(RuntimeError):
    """A projection handle could not be constructed."""

    def __init__(self, name: str, definition: str, reason: str):
        self.name = name
        self.definition = definition
        self.reason = reason
        super().__init__(f"Can't create {name} projection '{definition}': {reason}")


def create_projection(name: str, definition: str) -> CRS:
    """Build a reusable projection handle from a PROJ string or authority code."""
    try:
        return CRS.from_user_input(definition)
    except CRSError as e:
        raise ProjectionError(name, definition, str(e)) from e


def local_definition(lon_deg: float, lat_deg: float) -> str:
    return config.LOCAL_PROJ_TEMPLATE.format(lon=lon_deg, lat=lat_deg)


@dataclass
class Projections:
    """Owned set of projection handles with cached point transformers."""

    geodetic: CRS
    local: CRS
    global_: CRS
    _transformers: dict[tuple[str, str], Transformer] = field(default_factory=dict, repr=False)

    def _crs(self, name: str) -> CRS:
        return {"geodetic": self.geodetic, "local": self.local, "global": self.global_}[name]

    def _transformer(self, src: str, dst: str) -> Transformer:
        key = (src, dst)
        if key not in self._transformers:
            try:
                self._transformers[key] = Transformer.from_crs(
                    self._crs(src), self._crs(dst), always_xy=True
                )
            except (CRSError, ProjError) as e:
                raise ProjectionError(f"{src}->{dst}", "", str(e)) from e
        return self._transformers[key]

    def transform(
        self, src: str, dst: str, x: ArrayLike, y: ArrayLike
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Transform points between two named contexts.

        Geographic input/output is in radians. Points that cannot be
        projected come back as non-finite values.
        """
        transformer = self._transformer(src, dst)
        xx, yy = transformer.transform(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            radians=True,
            errcheck=False,
        )
        return np.asarray(xx, dtype=np.float64), np.asarray(yy, dtype=np.float64)

    def transform_point(self, src: str, dst: str, x: float, y: float) -> tuple[float, float]:
        xx, yy = self.transform(src, dst, x, y)
        return float(xx), float(yy)

    def close(self) -> None:
        self._transformers.clear()


@contextmanager
def open_projections(lon_deg: float, lat_deg: float) -> Iterator[Projections]:
    """Acquire the geodetic/local/global handles for one resampling run.

    Raises:
        ProjectionError: if any handle fails to construct
    """
    geodetic = create_projection("geodetic", config.GEODETIC_PROJ)
    local = create_projection("local", local_definition(lon_deg, lat_deg))
    global_ = create_projection("global", config.GLOBAL_PROJ)
    projections = Projections(geodetic=geodetic, local=local, global_=global_)
    try:
        yield projections
    finally:
        projections.close()
