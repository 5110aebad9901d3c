from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from ..config import SETTINGS, WorkerSettings
from .kmeans import kmeans
from .palette import PaletteMatcher, to_hex
from .raster import Raster

logger = logging.getLogger(__name__)


def sample_visible_pixels(raster: Raster, limit: int) -> np.ndarray:
    """Evenly strided RGB samples (alpha > 128), roughly ``limit`` of them at most."""
    flat = raster.pixels.reshape(-1, 4)
    step = max(1, math.ceil(len(flat) / limit))
    strided = flat[::step]
    return strided[strided[:, 3] > 128, :3].astype(np.float64)


def suggest_missing_colors(
    raster: Raster,
    palette: Sequence[Sequence[int]],
    count: int,
    *,
    rng: Optional[np.random.Generator] = None,
    settings: WorkerSettings = SETTINGS,
) -> List[str]:
    """Colours whose addition to ``palette`` would most reduce quantization error.

    The image is clustered, and each populated cluster is scored by the delta E
    to its nearest palette colour times the number of pixels it holds. The
    ``count`` highest scoring centroids come back as ``#RRGGBB`` strings.
    """

    if len(palette) == 0 or count <= 0:
        return []

    samples = sample_visible_pixels(raster, settings.suggest_sample_limit)
    if len(samples) == 0:
        return []

    result = kmeans(
        samples,
        min(settings.suggest_clusters, len(samples)),
        rng=rng,
        settings=settings,
    )
    counts = result.counts
    populated = counts > 0
    centroids = result.rounded_centroids()[populated]
    weights = counts[populated]

    errors = PaletteMatcher(palette).nearest_distances(centroids)
    total_error = errors * weights
    # Stable sort keeps cluster order among equal scores.
    order = np.argsort(-total_error, kind="stable")

    suggestions = [to_hex(centroids[i]) for i in order[:count]]
    logger.debug(
        "Suggested %d of %d clusters from %d samples", len(suggestions), len(centroids), len(samples)
    )
    return suggestions


__all__ = ["sample_visible_pixels", "suggest_missing_colors"]
