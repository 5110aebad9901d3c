from __future__ import annotations

import numpy as np

from .kmeans import nearest_centroid
from .raster import Raster


def opaque_colors(raster: Raster) -> np.ndarray:
    """Distinct RGB colours of fully opaque pixels, in first-seen raster order."""
    flat = raster.pixels.reshape(-1, 4)
    opaque = flat[flat[:, 3] == 255, :3]
    if len(opaque) == 0:
        return np.empty((0, 3), dtype=np.uint8)
    _, first_seen = np.unique(opaque, axis=0, return_index=True)
    return opaque[np.sort(first_seen)]


def apply_transparency_mask(raster: Raster, threshold: int, use_template_palette: bool = True) -> Raster:
    """Binarize alpha against ``threshold`` and return the result as a new raster.

    Alpha 0 stays 0, alpha below ``threshold`` becomes 0 and everything else
    becomes 255. With ``use_template_palette`` the partially transparent pixels
    that turn opaque are recoloured to the nearest colour (RGB distance) already
    used by the image's fully opaque pixels, so edges pick up no new colours.
    """

    out = raster.copy()
    pixels = out.pixels
    alpha = raster.alpha

    hidden = (alpha > 0) & (alpha < threshold)
    shown = (alpha > 0) & (alpha >= threshold)

    if use_template_palette:
        template = opaque_colors(raster)
        recolor = shown & (alpha < 255)
        if len(template) and recolor.any():
            source = pixels[recolor, :3].astype(np.float64)
            indices = nearest_centroid(source, template.astype(np.float64))
            pixels[recolor, :3] = template[indices]

    pixels[hidden, 3] = 0
    pixels[shown, 3] = 255
    return out


__all__ = ["apply_transparency_mask", "opaque_colors"]
