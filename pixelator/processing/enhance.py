from __future__ import annotations

import numpy as np

from .raster import Raster, to_u8

LUMA_WEIGHTS = np.array([0.2989, 0.5870, 0.1140], dtype=np.float64)


def contrast_factor(contrast: float) -> float:
    if contrast == 259:
        raise ValueError("Contrast of 259 has no defined contrast factor")
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


def apply_color_modifiers(
    src: Raster, brightness: float = 0, contrast: float = 0, saturation: float = 0
) -> Raster:
    """Return a copy of ``src`` with brightness, contrast and saturation applied.

    Order is brightness, then contrast, then saturation. A zero value skips its
    step entirely. Intermediate values are not clamped; only the final write
    back to 8 bits is. Alpha is untouched.
    """

    out = src.copy()
    if brightness == 0 and contrast == 0 and saturation == 0:
        return out

    rgb = src.pixels[..., :3].astype(np.float64)

    if brightness != 0:
        rgb = rgb + brightness

    if contrast != 0:
        rgb = contrast_factor(contrast) * (rgb - 128.0) + 128.0

    if saturation != 0:
        gray = (rgb @ LUMA_WEIGHTS)[..., None]
        rgb = gray + (rgb - gray) * (1.0 + saturation / 100.0)

    out.pixels[..., :3] = to_u8(rgb)
    return out


__all__ = ["LUMA_WEIGHTS", "apply_color_modifiers", "contrast_factor"]
