from __future__ import annotations

import json

import cv2
import numpy as np
import pytest
from click.testing import CliRunner

from radarmap.cli import main
from radarmap.models import PipelineConfig, ProcessingStage
from radarmap.pipeline import pipeline, run_pipeline

from .conftest import GRAY, WHITE, solid

EARTH_CENTER = (43.97838, 56.293779)


def _radar_source(colors) -> np.ndarray:
    """Synthetic screenshot: gridlines every 40 px with palette echoes."""
    source = solid(100, 160, WHITE)
    for x in (20, 60, 100, 140):
        source[:, x] = colors.line
    for y in (10, 50, 90):
        source[y, :] = colors.line
    source[25:45, 65:95] = colors.palette[1]
    source[30:40, 70:90] = colors.palette[6]
    source[35, 75] = GRAY
    return source


@pytest.fixture
def inputs(tmp_path, colors):
    source_path = tmp_path / "source.png"
    stencil_path = tmp_path / "stencil.png"
    cv2.imwrite(str(source_path), _radar_source(colors))
    cv2.imwrite(str(stencil_path), solid(60, 96, colors.transparent))
    return source_path, stencil_path


def _config(tmp_path, **overrides) -> PipelineConfig:
    values = {
        "crop_rect": None,
        "target_height": 60,
        "default_grid_spacing": 40,
        "manual_center": (80, 50),
        "georef_path": str(tmp_path / "out.json"),
    }
    values.update(overrides)
    return PipelineConfig(**values)


def test_pipeline_writes_png_and_georeference(tmp_path, inputs):
    source_path, stencil_path = inputs
    output_path = tmp_path / "out.png"

    state = run_pipeline(
        str(source_path), str(output_path), str(stencil_path), EARTH_CENTER, _config(tmp_path)
    )

    assert state.errors == []
    assert state.calibration.scale == pytest.approx(1.0)
    assert (state.calibration.center_x, state.calibration.center_y) == (80, 50)
    assert state.written_path == str(output_path)

    written = cv2.imread(str(output_path), cv2.IMREAD_UNCHANGED)
    assert written.shape[0] == 60
    assert written.shape[2] == 4
    assert np.array_equal(written, state.cleaned)

    georef = json.loads((tmp_path / "out.json").read_text())
    assert georef["height"] == 60
    assert georef["crs"] == "EPSG:3857"
    lonlat = georef["lonlat_bounds"]
    assert lonlat["west"] < EARTH_CENTER[0] < lonlat["east"]
    assert lonlat["south"] < EARTH_CENTER[1] < lonlat["north"]


def test_pipeline_output_is_deterministic(tmp_path, inputs):
    source_path, stencil_path = inputs
    cfg = _config(tmp_path, georef_path=None)

    a = run_pipeline(str(source_path), str(tmp_path / "a.png"), str(stencil_path), EARTH_CENTER, cfg)
    b = run_pipeline(str(source_path), str(tmp_path / "b.png"), str(stencil_path), EARTH_CENTER, cfg)

    assert (tmp_path / "a.png").read_bytes() == (tmp_path / "b.png").read_bytes()
    assert np.array_equal(a.cleaned, b.cleaned)


def test_stencil_mismatch_is_a_warning(tmp_path, inputs):
    source_path, _ = inputs
    stencil_path = tmp_path / "small_stencil.png"
    cv2.imwrite(str(stencil_path), solid(5, 5, (0, 0, 0, 0)))

    state = run_pipeline(
        str(source_path), str(tmp_path / "out.png"), str(stencil_path), EARTH_CENTER, _config(tmp_path)
    )

    assert state.errors == []
    assert any(w.startswith("W_STENCIL_SHAPE_MISMATCH") for w in state.warnings)


def test_missing_source_is_fatal_and_writes_nothing(tmp_path, inputs):
    _, stencil_path = inputs
    output_path = tmp_path / "out.png"

    state = run_pipeline(
        str(tmp_path / "missing.png"), str(output_path), str(stencil_path), EARTH_CENTER, _config(tmp_path)
    )

    assert [e.error_type for e in state.errors] == ["file_not_found"]
    assert state.errors[0].stage == ProcessingStage.LOAD
    assert state.written_path is None
    assert not output_path.exists()


def test_crop_outside_image_is_fatal(tmp_path, inputs):
    source_path, stencil_path = inputs

    state = run_pipeline(
        str(source_path),
        str(tmp_path / "out.png"),
        str(stencil_path),
        EARTH_CENTER,
        _config(tmp_path, crop_rect=(100, 0, 100, 50)),
    )

    assert [e.error_type for e in state.errors] == ["crop_out_of_bounds"]


def test_undetectable_calibration_warns_or_fails(tmp_path, colors):
    source_path = tmp_path / "blank.png"
    stencil_path = tmp_path / "stencil.png"
    cv2.imwrite(str(source_path), solid(40, 40, WHITE))
    cv2.imwrite(str(stencil_path), solid(40, 40, colors.transparent))
    args = (str(source_path), str(tmp_path / "out.png"), str(stencil_path), EARTH_CENTER)

    lenient = run_pipeline(*args, _config(tmp_path, manual_center=None, georef_path=None))
    assert lenient.errors == []
    assert not lenient.calibration.reliable
    assert any(w.startswith("W_CALIBRATION_UNRELIABLE") for w in lenient.warnings)

    strict = run_pipeline(
        *args, _config(tmp_path, manual_center=None, georef_path=None, strict_calibration=True)
    )
    assert [e.error_type for e in strict.errors] == ["calibration_unreliable"]
    assert strict.resampled is None


def test_debug_artifacts(tmp_path, inputs):
    source_path, stencil_path = inputs
    debug_dir = tmp_path / "debug"

    state = run_pipeline(
        str(source_path),
        str(tmp_path / "out.png"),
        str(stencil_path),
        EARTH_CENTER,
        _config(tmp_path, debug_dir=str(debug_dir)),
    )

    assert state.errors == []
    for name in ("detection.png", "resampled.png", "cleaned_center.png"):
        assert (debug_dir / name).exists()


def test_cli_success(tmp_path, inputs):
    source_path, stencil_path = inputs
    output_path = tmp_path / "cli.png"

    result = CliRunner().invoke(
        main,
        [
            str(EARTH_CENTER[0]),
            str(EARTH_CENTER[1]),
            str(source_path),
            str(output_path),
            str(stencil_path),
            "--no-crop",
            "--target-height",
            "60",
            "--grid-spacing",
            "40",
            "--center",
            "80",
            "50",
        ],
    )

    assert result.exit_code == 0, result.output
    assert f"Wrote to {output_path}" in result.output
    assert output_path.exists()


def test_cli_missing_input_exits_nonzero(tmp_path, inputs):
    _, stencil_path = inputs

    result = CliRunner().invoke(
        main,
        ["44.0", "56.3", str(tmp_path / "missing.png"), str(tmp_path / "o.png"), str(stencil_path)],
    )

    assert result.exit_code == 1
    assert not (tmp_path / "o.png").exists()


def test_cli_accepts_negative_coordinates(tmp_path, inputs):
    source_path, stencil_path = inputs
    output_path = tmp_path / "west.png"

    result = CliRunner().invoke(
        main,
        [
            "-70.5",
            "-33.4",
            str(source_path),
            str(output_path),
            str(stencil_path),
            "--no-crop",
            "--target-height",
            "60",
            "--center",
            "80",
            "50",
            "--scale",
            "1",
        ],
    )

    assert result.exit_code == 0, result.output
    assert f"Wrote to {output_path}" in result.output
    assert output_path.exists()


def test_every_stage_is_a_pipeline_node():
    nodes = {name for name in pipeline.nodes if not name.startswith("__")}
    assert {stage.value for stage in ProcessingStage} == nodes
