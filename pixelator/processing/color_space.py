"""sRGB to CIE Lab (D65) conversion and CIE76 colour difference.

Scalar helpers serve the per-pixel error-diffusion loop; the ``*_array``
variants are vectorized over any ``(..., 3)`` shape.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

Lab = Tuple[float, float, float]

# D65 reference white, XYZ scaled x100.
REF_X = 95.047
REF_Y = 100.000
REF_Z = 108.883

_LAB_EPSILON = 0.008856
_SRGB_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)


def _decode_channel(value: float) -> float:
    c = value / 255.0
    if c > 0.04045:
        return ((c + 0.055) / 1.055) ** 2.4
    return c / 12.92


def _lab_pivot(t: float) -> float:
    if t > _LAB_EPSILON:
        return t ** (1.0 / 3.0)
    return 7.787 * t + 16.0 / 116.0


def rgb_to_lab(rgb: Sequence[float]) -> Lab:
    """Convert one sRGB triple (0..255, floats allowed) to Lab."""
    r = _decode_channel(rgb[0]) * 100.0
    g = _decode_channel(rgb[1]) * 100.0
    b = _decode_channel(rgb[2]) * 100.0

    x = (r * 0.4124 + g * 0.3576 + b * 0.1805) / REF_X
    y = (r * 0.2126 + g * 0.7152 + b * 0.0722) / REF_Y
    z = (r * 0.0193 + g * 0.1192 + b * 0.9505) / REF_Z

    fx, fy, fz = _lab_pivot(x), _lab_pivot(y), _lab_pivot(z)
    return (116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))


def delta_e(lab_a: Sequence[float], lab_b: Sequence[float]) -> float:
    """CIE76 difference: plain Euclidean distance in Lab."""
    dl = lab_a[0] - lab_b[0]
    da = lab_a[1] - lab_b[1]
    db = lab_a[2] - lab_b[2]
    return math.sqrt(dl * dl + da * da + db * db)


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorized :func:`rgb_to_lab`. Accepts ``(..., 3)`` in 0..255, returns float64."""
    c = np.asarray(rgb, dtype=np.float64) / 255.0
    # Clamp the power branch's base so negative working values never hit a fractional power.
    linear = np.where(
        c > 0.04045,
        ((np.maximum(c, 0.04045) + 0.055) / 1.055) ** 2.4,
        c / 12.92,
    ) * 100.0

    xyz = linear @ _SRGB_TO_XYZ.T
    xyz = xyz / np.array([REF_X, REF_Y, REF_Z])

    f = np.where(xyz > _LAB_EPSILON, np.cbrt(xyz), 7.787 * xyz + 16.0 / 116.0)
    out = np.empty_like(f)
    out[..., 0] = 116.0 * f[..., 1] - 16.0
    out[..., 1] = 500.0 * (f[..., 0] - f[..., 1])
    out[..., 2] = 200.0 * (f[..., 1] - f[..., 2])
    return out


def delta_e_array(lab_a: np.ndarray, lab_b: np.ndarray) -> np.ndarray:
    """Broadcasting CIE76 distance over the last axis."""
    diff = np.asarray(lab_a, dtype=np.float64) - np.asarray(lab_b, dtype=np.float64)
    return np.sqrt(np.sum(diff * diff, axis=-1))


__all__ = [
    "Lab",
    "REF_X",
    "REF_Y",
    "REF_Z",
    "rgb_to_lab",
    "delta_e",
    "rgb_to_lab_array",
    "delta_e_array",
]
