from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from ..config import InvalidSettingsError
from .palette import PaletteMatcher
from .raster import Raster

logger = logging.getLogger(__name__)

ALPHA_CUTOFF = 128
BASE_DITHER_STRENGTH = 64


@dataclass(frozen=True)
class ThresholdMatrix:
    matrix: Tuple[Tuple[int, ...], ...]
    divisor: int

    @property
    def size(self) -> int:
        return len(self.matrix)

    def as_array(self) -> np.ndarray:
        return np.asarray(self.matrix, dtype=np.float64)


@dataclass(frozen=True)
class DiffusionTap:
    dx: int
    dy: int
    weight: float


ORDERED_MATRICES: Dict[str, ThresholdMatrix] = {
    "bayer-4x4": ThresholdMatrix(
        ((0, 8, 2, 10), (12, 4, 14, 6), (3, 11, 1, 9), (15, 7, 13, 5)), 16
    ),
    "bayer-8x8": ThresholdMatrix(
        (
            (0, 32, 8, 40, 2, 34, 10, 42),
            (48, 16, 56, 24, 50, 18, 58, 26),
            (12, 44, 4, 36, 14, 46, 6, 38),
            (60, 28, 52, 20, 62, 30, 54, 22),
            (3, 35, 11, 43, 1, 33, 9, 41),
            (51, 19, 59, 27, 49, 17, 57, 25),
            (15, 47, 7, 39, 13, 45, 5, 37),
            (63, 31, 55, 23, 61, 29, 53, 21),
        ),
        64,
    ),
    "halftone-dot": ThresholdMatrix(
        ((12, 5, 6, 13), (4, 0, 1, 7), (8, 2, 3, 11), (14, 9, 10, 15)), 16
    ),
    "diagonal-line": ThresholdMatrix(
        ((15, 7, 3, 7), (7, 3, 7, 15), (3, 7, 15, 7), (7, 15, 7, 3)), 16
    ),
    "cross-hatch": ThresholdMatrix(
        ((0, 8, 0, 8), (8, 15, 8, 15), (0, 8, 0, 8), (8, 15, 8, 15)), 16
    ),
    "grid": ThresholdMatrix(
        ((0, 0, 0, 0), (0, 15, 15, 0), (0, 15, 15, 0), (0, 0, 0, 0)), 16
    ),
}


def _taps(*entries: Tuple[int, int, float]) -> Tuple[DiffusionTap, ...]:
    return tuple(DiffusionTap(dx, dy, weight) for dx, dy, weight in entries)


ERROR_KERNELS: Dict[str, Tuple[DiffusionTap, ...]] = {
    "floyd-steinberg": _taps(
        (1, 0, 7 / 16), (-1, 1, 3 / 16), (0, 1, 5 / 16), (1, 1, 1 / 16)
    ),
    "burkes": _taps(
        (1, 0, 8 / 32), (2, 0, 4 / 32),
        (-2, 1, 2 / 32), (-1, 1, 4 / 32), (0, 1, 8 / 32), (1, 1, 4 / 32), (2, 1, 2 / 32),
    ),
    "stucki": _taps(
        (1, 0, 8 / 42), (2, 0, 4 / 42),
        (-2, 1, 2 / 42), (-1, 1, 4 / 42), (0, 1, 8 / 42), (1, 1, 4 / 42), (2, 1, 2 / 42),
        (-2, 2, 1 / 42), (-1, 2, 2 / 42), (0, 2, 4 / 42), (1, 2, 2 / 42), (2, 2, 1 / 42),
    ),
    "sierra-2": _taps(
        (1, 0, 4 / 16), (2, 0, 3 / 16),
        (-2, 1, 1 / 16), (-1, 1, 2 / 16), (0, 1, 3 / 16), (1, 1, 2 / 16), (2, 1, 1 / 16),
    ),
    "sierra-lite": _taps((1, 0, 2 / 4), (-1, 1, 1 / 4), (0, 1, 1 / 4)),
}

NO_DITHER = "none"

DITHER_METHODS: Tuple[str, ...] = (NO_DITHER,) + tuple(ORDERED_MATRICES) + tuple(ERROR_KERNELS)


def ordered_dither(raster: Raster, matcher: PaletteMatcher, dither: ThresholdMatrix, strength: float) -> Raster:
    """Nudge each visible pixel by its matrix threshold, then snap to the palette."""
    pixels = raster.pixels
    visible = pixels[..., 3] >= ALPHA_CUTOFF

    size = dither.size
    ys, xs = np.nonzero(visible)
    thresholds = dither.as_array()[ys % size, xs % size]
    nudge = (thresholds / dither.divisor - 0.5) * BASE_DITHER_STRENGTH * (strength / 100.0)

    nudged = np.clip(pixels[ys, xs, :3].astype(np.float64) + nudge[:, None], 0, 255)
    pixels[ys, xs, :3] = matcher.rgb[matcher.nearest_indices(nudged)]
    pixels[ys, xs, 3] = 255
    pixels[~visible, 3] = 0
    return raster


def quantize(raster: Raster, matcher: PaletteMatcher) -> Raster:
    """Snap visible pixels to the palette without spreading any error."""
    pixels = raster.pixels
    visible = pixels[..., 3] >= ALPHA_CUTOFF
    pixels[visible, :3] = matcher.rgb[matcher.nearest_indices(pixels[visible, :3])]
    pixels[visible, 3] = 255
    pixels[~visible, 3] = 0
    return raster


def diffuse_error(
    working: np.ndarray,
    visible: np.ndarray,
    x: int,
    y: int,
    error: np.ndarray,
    kernel: Sequence[DiffusionTap],
) -> None:
    """Spread ``error`` from ``(x, y)`` to in-bounds, visible neighbours of ``working``."""
    height, width = visible.shape
    for tap in kernel:
        nx, ny = x + tap.dx, y + tap.dy
        if 0 <= nx < width and 0 <= ny < height and visible[ny, nx]:
            working[ny, nx, :3] += error * tap.weight


def error_diffusion_dither(
    raster: Raster, matcher: PaletteMatcher, kernel: Sequence[DiffusionTap], strength: float
) -> Raster:
    """Row-major error diffusion over a float32 working copy of the raster."""

    pixels = raster.pixels
    working = pixels.astype(np.float32)
    visible = pixels[..., 3] >= ALPHA_CUTOFF
    factor = strength / 100.0

    for y in range(raster.height):
        for x in range(raster.width):
            if not visible[y, x]:
                pixels[y, x, 3] = 0
                continue

            old = working[y, x, :3].astype(np.float64)
            new = matcher.rgb[matcher.nearest_index(old)]
            pixels[y, x, :3] = new
            pixels[y, x, 3] = 255
            diffuse_error(working, visible, x, y, (old - new) * factor, kernel)

    return raster


def apply_dithering(raster: Raster, palette: Sequence[Sequence[int]], algorithm: str, strength: float) -> Raster:
    """Map every visible pixel of ``raster`` onto ``palette`` in place.

    Pixels with alpha below 128 only have their alpha forced to 0; all others
    end up fully opaque.
    """

    matcher = PaletteMatcher(palette)
    logger.debug(
        "Dithering %dx%d with %s at strength %s over %d colors",
        raster.width,
        raster.height,
        algorithm,
        strength,
        len(matcher),
    )
    if algorithm in ORDERED_MATRICES:
        return ordered_dither(raster, matcher, ORDERED_MATRICES[algorithm], strength)
    if algorithm in ERROR_KERNELS:
        return error_diffusion_dither(raster, matcher, ERROR_KERNELS[algorithm], strength)
    if algorithm == NO_DITHER:
        return quantize(raster, matcher)
    raise InvalidSettingsError(f"Unknown dither method: {algorithm}")


__all__ = [
    "ALPHA_CUTOFF",
    "BASE_DITHER_STRENGTH",
    "DITHER_METHODS",
    "DiffusionTap",
    "ERROR_KERNELS",
    "NO_DITHER",
    "ORDERED_MATRICES",
    "ThresholdMatrix",
    "apply_dithering",
    "diffuse_error",
    "error_diffusion_dither",
    "ordered_dither",
    "quantize",
]
