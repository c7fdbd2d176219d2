"""CLI for reprojecting a radar coverage screenshot onto Web-Mercator."""

import logging
import sys
from pathlib import Path

import click

from radarmap import config
from radarmap.models import PipelineConfig
from radarmap.pipeline import run_pipeline


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("lon", type=float)
@click.argument("lat", type=float)
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("output", type=click.Path(path_type=Path))
@click.argument("stencil", type=click.Path(path_type=Path))
@click.option(
    "--crop",
    type=(int, int, int, int),
    default=config.CROP_RECT,
    show_default=True,
    help="Region of interest in the source image: X Y WIDTH HEIGHT",
)
@click.option("--no-crop", is_flag=True, help="Use the whole source image")
@click.option(
    "--base-scale",
    type=float,
    default=config.BASE_PIXELS_PER_RADIAN,
    show_default=True,
    help="Source pixels per radian at scale factor 1",
)
@click.option(
    "--target-height",
    type=int,
    default=config.TARGET_HEIGHT,
    show_default=True,
    help="Output height in pixels",
)
@click.option(
    "--grid-spacing",
    type=int,
    default=config.DEFAULT_GRID_SPACING,
    show_default=True,
    help="Gridline spacing in pixels at scale factor 1",
)
@click.option(
    "--center",
    type=(int, int),
    default=None,
    help="Earth center pixel in the cropped source (skips detected center)",
)
@click.option("--scale", type=float, default=None, help="Scale factor (skips detected scale)")
@click.option(
    "--strict-calibration",
    is_flag=True,
    help="Fail instead of warning when calibration cannot be detected",
)
@click.option(
    "--georef",
    type=click.Path(path_type=Path),
    help="Write output bounds as JSON to this path",
)
@click.option(
    "--debug-dir",
    type=click.Path(path_type=Path),
    help="Write intermediate rasters to this directory",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def main(
    lon: float,
    lat: float,
    source: Path,
    output: Path,
    stencil: Path,
    crop: tuple[int, int, int, int],
    no_crop: bool,
    base_scale: float,
    target_height: int,
    grid_spacing: int,
    center: tuple[int, int] | None,
    scale: float | None,
    strict_calibration: bool,
    georef: Path | None,
    debug_dir: Path | None,
    verbose: bool,
) -> None:
    """Reproject SOURCE centered at LON LAT onto Web-Mercator, writing OUTPUT.

    STENCIL is a reference rendering in output geometry, used to tell
    intentional ink from anti-aliasing. LON and LAT may be negative.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if target_height < 1:
        click.echo("Error: --target-height must be >= 1", err=True)
        sys.exit(1)
    if grid_spacing < 1:
        click.echo("Error: --grid-spacing must be >= 1", err=True)
        sys.exit(1)
    if scale is not None and scale <= 0:
        click.echo("Error: --scale must be > 0", err=True)
        sys.exit(1)

    pipeline_config = PipelineConfig(
        crop_rect=None if no_crop else crop,
        base_pixels_per_radian=base_scale,
        target_height=target_height,
        default_grid_spacing=grid_spacing,
        manual_center=center,
        manual_scale=scale,
        strict_calibration=strict_calibration,
        georef_path=str(georef) if georef else None,
        debug_dir=str(debug_dir) if debug_dir else None,
    )

    state = run_pipeline(
        str(source), str(output), str(stencil), (lon, lat), pipeline_config
    )

    if verbose and state.calibration is not None:
        cal = state.calibration
        click.echo(f"Calibration: center ({cal.center_x}, {cal.center_y}), scale {cal.scale:g}")
    if verbose and state.bounds is not None:
        b = state.bounds
        click.echo(f"Corner-coordinates of result: ({b.min_x} {b.max_y}) ({b.max_x} {b.min_y})")

    for w in state.warnings:
        click.echo(f"  Warning: {w}", err=True)

    if state.errors or state.written_path is None:
        for e in state.errors:
            click.echo(f"  [{e.stage.value}] {e.message}", err=True)
        click.echo(f"Error processing {source}", err=True)
        sys.exit(1)

    click.echo(f"Wrote to {state.written_path}")
    if state.georef_written_path:
        click.echo(f"Georeference: {state.georef_written_path}")


if __name__ == "__main__":
    main()
