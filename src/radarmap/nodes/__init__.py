"""Pipeline nodes for radar map reprojection.

This module intentionally uses lazy imports to avoid loading heavy optional
dependencies during package import.
"""

from __future__ import annotations

from radarmap.models import PipelineState


def load(state: PipelineState) -> PipelineState:
    from radarmap.nodes.loading import load as _load

    return _load(state)


def detect(state: PipelineState) -> PipelineState:
    from radarmap.nodes.center_detection import detect as _detect

    return _detect(state)


def resample(state: PipelineState) -> PipelineState:
    from radarmap.nodes.resampling import reproject as _reproject

    return _reproject(state)


def clean(state: PipelineState) -> PipelineState:
    from radarmap.nodes.color_cleanup import clean as _clean

    return _clean(state)


def write(state: PipelineState) -> PipelineState:
    from radarmap.nodes.output import write as _write

    return _write(state)


__all__ = [
    "clean",
    "detect",
    "load",
    "resample",
    "write",
]
