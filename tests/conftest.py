from __future__ import annotations

import numpy as np
import pytest

from radarmap.models import ColorModel

WHITE = (255, 255, 255, 255)
GRAY = (50, 50, 50, 255)  # matches no reference color


def solid(rows: int, cols: int, color: tuple[int, int, int, int]) -> np.ndarray:
    out = np.empty((rows, cols, 4), dtype=np.uint8)
    out[:] = np.asarray(color, dtype=np.uint8)
    return out


@pytest.fixture
def colors() -> ColorModel:
    return ColorModel()
