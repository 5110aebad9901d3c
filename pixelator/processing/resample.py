from __future__ import annotations

import logging
from typing import Callable, Dict, Tuple

import numpy as np

from .raster import Raster, to_u8

logger = logging.getLogger(__name__)

LANCZOS_LOBES = 3

Resampler = Callable[[Raster, int, int], Raster]


def resample_nearest(src: Raster, width: int, height: int) -> Raster:
    """Sample the source at ``floor(x * W0 / W1)``; hard edges survive untouched."""
    xs = np.floor(np.arange(width) * (src.width / width)).astype(np.intp)
    ys = np.floor(np.arange(height) * (src.height / height)).astype(np.intp)
    xs = np.minimum(xs, src.width - 1)
    ys = np.minimum(ys, src.height - 1)
    return Raster(width, height, src.pixels[ys[:, None], xs[None, :]].copy())


def resample_bilinear(src: Raster, width: int, height: int) -> Raster:
    x_ratio = (src.width - 1) / width
    y_ratio = (src.height - 1) / height

    src_x = np.arange(width) * x_ratio
    src_y = np.arange(height) * y_ratio
    x1 = np.floor(src_x).astype(np.intp)
    y1 = np.floor(src_y).astype(np.intp)
    x2 = np.minimum(x1 + 1, src.width - 1)
    y2 = np.minimum(y1 + 1, src.height - 1)
    dx = (src_x - x1)[None, :, None]
    dy = (src_y - y1)[:, None, None]

    pixels = src.pixels.astype(np.float64)
    v1 = pixels[y1[:, None], x1[None, :]]
    v2 = pixels[y1[:, None], x2[None, :]]
    v3 = pixels[y2[:, None], x1[None, :]]
    v4 = pixels[y2[:, None], x2[None, :]]

    top = v1 * (1 - dx) + v2 * dx
    bottom = v3 * (1 - dx) + v4 * dx
    value = top * (1 - dy) + bottom * dy
    # Round half up before storing.
    return Raster(width, height, to_u8(np.floor(value + 0.5)))


def lanczos_kernel(x: np.ndarray, a: int = LANCZOS_LOBES) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    inside = (x > -a) & (x < a)
    return np.where(inside, np.sinc(x) * np.sinc(x / a), 0.0)


def _lanczos_taps(src_size: int, dst_size: int, a: int) -> Tuple[np.ndarray, np.ndarray]:
    """Source indices and weights for each destination coordinate on one axis.

    Taps run from ``floor(center) - a + 1`` to ``floor(center) + a`` around
    ``center = (d + 0.5) * ratio - 0.5``. Out-of-range taps get weight 0.
    """

    ratio = src_size / dst_size
    centers = (np.arange(dst_size) + 0.5) * ratio - 0.5
    offsets = np.arange(-a + 1, a + 1)
    indices = np.floor(centers)[:, None].astype(np.intp) + offsets[None, :]
    weights = lanczos_kernel(centers[:, None] - indices, a)
    in_bounds = (indices >= 0) & (indices < src_size)
    weights = np.where(in_bounds, weights, 0.0)
    return np.clip(indices, 0, src_size - 1), weights


def resample_lanczos(src: Raster, width: int, height: int, a: int = LANCZOS_LOBES) -> Raster:
    """Lanczos resampling with the 2-D kernel applied as two 1-D passes.

    The per-pixel weight is the product of the axis weights, so the
    normalising total factors into the two axis totals.
    """

    idx_x, w_x = _lanczos_taps(src.width, width, a)
    idx_y, w_y = _lanczos_taps(src.height, height, a)
    pixels = src.pixels.astype(np.float64)

    horizontal = np.zeros((src.height, width, 4), dtype=np.float64)
    for tap in range(idx_x.shape[1]):
        horizontal += pixels[:, idx_x[:, tap], :] * w_x[None, :, tap, None]

    accum = np.zeros((height, width, 4), dtype=np.float64)
    for tap in range(idx_y.shape[1]):
        accum += horizontal[idx_y[:, tap], :, :] * w_y[:, tap, None, None]

    total = w_y.sum(axis=1)[:, None] * w_x.sum(axis=1)[None, :]
    valid = total > 0
    out = np.zeros_like(accum)
    out[valid] = accum[valid] / total[valid][:, None]
    return Raster(width, height, to_u8(out))


RESAMPLERS: Dict[str, Resampler] = {
    "nearest": resample_nearest,
    "bilinear": resample_bilinear,
    "lanczos": resample_lanczos,
}


def resample(src: Raster, width: int, height: int, method: str = "nearest") -> Raster:
    try:
        resampler = RESAMPLERS[method]
    except KeyError:
        raise ValueError(f"Unknown resampling method: {method}") from None
    logger.debug(
        "Resampling %dx%d -> %dx%d (%s)", src.width, src.height, width, height, method
    )
    return resampler(src, width, height)


__all__ = [
    "LANCZOS_LOBES",
    "RESAMPLERS",
    "lanczos_kernel",
    "resample",
    "resample_bilinear",
    "resample_lanczos",
    "resample_nearest",
]
