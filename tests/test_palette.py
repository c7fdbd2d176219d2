from __future__ import annotations

import numpy as np
import pytest
from pydantic import ValidationError

from radarmap import config
from radarmap.models import ColorModel
from radarmap.utils import palette

from .conftest import GRAY, solid


def test_colors_equal_is_strict_below_eps():
    a = (10, 10, 10, 255)
    assert palette.colors_equal(a, (11, 10, 10, 255), 2)
    assert not palette.colors_equal(a, (11, 11, 10, 255), 2)
    assert palette.colors_equal(a, (11, 11, 10, 255), 3)


def test_colors_equal_does_not_wrap_uint8():
    a = np.array([0, 0, 0, 255], dtype=np.uint8)
    b = np.array([255, 0, 0, 255], dtype=np.uint8)
    assert not palette.colors_equal(a, b, 10)


@pytest.mark.parametrize("offset", [0, 1, 3, 9, 10, 30, 60])
def test_tolerance_is_monotonic(offset):
    ref = config.BACKGROUND_OUTER
    pixel = tuple(min(255, c + offset) for c in ref[:3]) + (255,)
    epsilons = [config.TIGHT_EPS, config.LOOSE_EPS, config.ROAD_EPS]
    for small, large in zip(epsilons, epsilons[1:]):
        if palette.colors_equal(pixel, ref, small):
            assert palette.colors_equal(pixel, ref, large)


def test_palette_membership_uses_tight_eps(colors):
    entry = colors.palette[5]
    assert palette.is_palette_color(colors, entry)
    assert palette.is_palette_color(colors, (entry[0] + 1,) + entry[1:])
    assert not palette.is_palette_color(colors, (entry[0] + 2,) + entry[1:])
    assert not palette.is_palette_color(colors, GRAY)


def test_bad_color_is_palette_but_not_replacement(colors):
    bad = colors.bad_palette_color
    assert palette.is_palette_color(colors, bad)
    assert not palette.is_replacement_color(colors, bad)
    assert palette.is_replacement_color(colors, colors.palette[0])


def test_masks_agree_with_scalar_helpers(colors):
    raster = solid(2, 3, GRAY)
    raster[0, 0] = colors.palette[0]
    raster[0, 1] = colors.bad_palette_color
    raster[1, 2] = (colors.palette[3][0] + 1,) + colors.palette[3][1:]

    mask = palette.palette_mask(raster, colors)
    repl = palette.replacement_mask(raster, colors)
    for y in range(2):
        for x in range(3):
            assert mask[y, x] == palette.is_palette_color(colors, raster[y, x])
            assert repl[y, x] == palette.is_replacement_color(colors, raster[y, x])


def test_color_model_rejects_bad_color_outside_palette():
    with pytest.raises(ValidationError):
        ColorModel(palette=((1, 2, 3, 255),), bad_palette_color=(0, 68, 136, 255))


def test_color_model_is_immutable(colors):
    with pytest.raises(ValidationError):
        colors.tight_eps = 5


def test_utils_exports_raster_masks_for_fills():
    from radarmap import utils

    assert "replacement_mask" in utils.__all__
    assert "is_replacement_color" not in utils.__all__
