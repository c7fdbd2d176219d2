"""
Raster I/O and geometry helpers built on OpenCV.

Rasters are (rows, cols, 4) uint8 arrays in BGRA order. Functions that touch
the filesystem or can reject their input return ``Result | ProcessingError``
instead of raising.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeAlias

import cv2
import numpy as np
from numpy.typing import NDArray

from radarmap import config
from radarmap.models import ProcessingError, ProcessingStage

# Any dtype keeps cv2's MatLike annotations happy
Image: TypeAlias = NDArray[Any]


def _io_error(stage: ProcessingStage, error_type: str, message: str, path: Path, **details: Any) -> ProcessingError:
    return ProcessingError(
        stage=stage,
        error_type=error_type,
        recoverable=False,
        message=message,
        details={"path": str(path), **details},
    )


# =============================================================================
# SECTION 1: IMAGE I/O
# =============================================================================


def load_image(
    path: str | Path,
    stage: ProcessingStage = ProcessingStage.LOAD,
) -> Image | ProcessingError:
    """
    Read a raster with its alpha channel and normalize it to 8-bit BGRA.

    Grayscale and BGR files become opaque BGRA; 16-bit files are scaled
    down to 8 bits.

    Returns:
        BGRA uint8 array, or ProcessingError with error_type one of
        file_not_found, imread_failed, permission_denied, io_error
    """
    path = Path(path)
    if not path.is_file():
        return _io_error(stage, "file_not_found", f"Image file not found: {path}", path)

    try:
        raster = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    except PermissionError:
        return _io_error(stage, "permission_denied", f"Permission denied reading: {path}", path)
    except (OSError, cv2.error) as e:
        return _io_error(stage, "io_error", f"Error reading image: {e}", path, error=str(e))

    if raster is None:
        return _io_error(stage, "imread_failed", f"Unreadable or unsupported image: {path}", path)
    if raster.dtype == np.uint16:
        raster = (raster // 257).astype(np.uint8)
    return ensure_bgra(raster)


def save_png(
    image: Image,
    path: str | Path,
    compression: int = config.PNG_COMPRESSION,
    stage: ProcessingStage = ProcessingStage.WRITE,
) -> Path | ProcessingError:
    """Write ``image`` as PNG at zlib level ``compression``, creating parent dirs."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        ok = cv2.imwrite(str(path), image, [cv2.IMWRITE_PNG_COMPRESSION, compression])
    except PermissionError:
        return _io_error(stage, "permission_denied", f"Permission denied writing: {path}", path)
    except (OSError, cv2.error) as e:
        return _io_error(stage, "io_error", f"Error writing image: {e}", path, error=str(e))

    if not ok:
        return _io_error(stage, "imwrite_failed", f"Failed to write image: {path}", path)
    return path


# =============================================================================
# SECTION 2: GEOMETRY
# =============================================================================


def crop(
    image: Image,
    rect: tuple[int, int, int, int],
    stage: ProcessingStage = ProcessingStage.LOAD,
) -> Image | ProcessingError:
    """Region of interest ``(x, y, width, height)`` as a view, or crop_out_of_bounds."""
    x, y, w, h = rect
    rows, cols = image.shape[:2]
    if w <= 0 or h <= 0 or x < 0 or y < 0 or x + w > cols or y + h > rows:
        return ProcessingError(
            stage=stage,
            error_type="crop_out_of_bounds",
            recoverable=False,
            message=f"Crop rectangle {rect} does not fit a {cols}x{rows} image",
            details={"rect": list(rect), "width": cols, "height": rows},
        )
    return image[y : y + h, x : x + w]


def align_to(image: Image, shape: tuple[int, ...], fill: tuple[int, ...] = config.TRANSPARENT) -> Image:
    """Copy ``image`` into a canvas of ``shape``, anchored top-left.

    The overlapping region is copied; the rest of the canvas holds ``fill``.
    """
    if image.shape == tuple(shape):
        return image
    out = np.empty(shape, dtype=np.uint8)
    out[:] = np.asarray(fill, dtype=np.uint8)
    rows = min(shape[0], image.shape[0])
    cols = min(shape[1], image.shape[1])
    out[:rows, :cols] = image[:rows, :cols]
    return out


# =============================================================================
# SECTION 3: HELPERS
# =============================================================================


def ensure_bgra(image: Image) -> Image:
    channels = 1 if image.ndim == 2 else image.shape[2]
    if channels == 4:
        return image
    if channels == 1:
        return cv2.cvtColor(image.reshape(image.shape[:2]), cv2.COLOR_GRAY2BGRA)
    return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
