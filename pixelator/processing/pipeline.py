from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

import numpy as np

from ..config import SETTINGS, InvalidSettingsError, WorkerSettings
from .dither import DITHER_METHODS, NO_DITHER, apply_dithering
from .enhance import apply_color_modifiers
from .kmeans import kmeans
from .palette import RGB, PaletteMatcher, resolve_palette
from .raster import Raster
from .resample import RESAMPLERS, resample

logger = logging.getLogger(__name__)


def _as_int(payload: Mapping[str, Any], key: str, default: Optional[int] = None) -> int:
    raw = payload.get(key)
    if raw is None:
        if default is None:
            raise InvalidSettingsError(f"Missing required setting: {key}")
        return default
    try:
        return int(raw)
    except (TypeError, ValueError, OverflowError):
        raise InvalidSettingsError(f"Setting {key} must be an integer, got {raw!r}") from None


def _as_float(payload: Mapping[str, Any], key: str) -> float:
    raw = payload.get(key)
    if raw is None:
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidSettingsError(f"Setting {key} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise InvalidSettingsError(f"Setting {key} must be finite, got {raw!r}")
    return value


def _as_bool(payload: Mapping[str, Any], key: str) -> bool:
    raw = payload.get(key)
    if raw is None:
        return False
    if not isinstance(raw, bool):
        raise InvalidSettingsError(f"Setting {key} must be true or false, got {raw!r}")
    return raw


@dataclass
class PipelineSettings:
    target_width: int
    target_height: int
    resampling_method: str = "nearest"
    dither_method: str = NO_DITHER
    dither_strength: float = 0
    palette: List[RGB] = field(default_factory=list)
    use_kmeans: bool = False
    kmeans_colors: int = 0
    brightness: float = 0
    contrast: float = 0
    saturation: float = 0

    @classmethod
    def from_message(cls, payload: Mapping[str, Any]) -> "PipelineSettings":
        """Build settings from the camelCase ``settings`` object of a process request."""
        return cls(
            target_width=_as_int(payload, "targetWidth"),
            target_height=_as_int(payload, "targetHeight"),
            resampling_method=str(payload.get("resamplingMethod") or "nearest").lower(),
            dither_method=str(payload.get("ditherMethod") or NO_DITHER).lower(),
            dither_strength=_as_float(payload, "ditherStrength"),
            palette=resolve_palette(payload.get("palette")),
            use_kmeans=_as_bool(payload, "useKmeans"),
            kmeans_colors=_as_int(payload, "kmeansColors", 0),
            brightness=_as_float(payload, "brightness"),
            contrast=_as_float(payload, "contrast"),
            saturation=_as_float(payload, "saturation"),
        )

    def validate(self, settings: WorkerSettings = SETTINGS) -> None:
        if self.target_width < 1 or self.target_height < 1:
            raise InvalidSettingsError(
                f"Target dimensions must be at least 1x1, got {self.target_width}x{self.target_height}"
            )
        if self.target_width * self.target_height > settings.max_raster_pixels:
            raise InvalidSettingsError(
                f"Target {self.target_width}x{self.target_height} exceeds {settings.max_raster_pixels} pixels"
            )
        if self.resampling_method not in RESAMPLERS:
            raise InvalidSettingsError(f"Unknown resampling method: {self.resampling_method}")
        if self.dither_method not in DITHER_METHODS:
            raise InvalidSettingsError(f"Unknown dither method: {self.dither_method}")
        if not 0 <= self.dither_strength <= 100:
            raise InvalidSettingsError(f"Dither strength must be within 0..100, got {self.dither_strength}")
        if not self.palette and self.dither_method != NO_DITHER:
            raise InvalidSettingsError(f"Dither method {self.dither_method} needs a non-empty palette")
        if self.kmeans_colors < 0:
            raise InvalidSettingsError(f"kmeansColors must not be negative, got {self.kmeans_colors}")
        if self.contrast == 259:
            raise InvalidSettingsError("Contrast of 259 has no defined contrast factor")

    @property
    def has_modifiers(self) -> bool:
        return self.brightness != 0 or self.contrast != 0 or self.saturation != 0


def recolor_with_kmeans(
    raster: Raster,
    colors: int,
    *,
    rng: Optional[np.random.Generator] = None,
    settings: WorkerSettings = SETTINGS,
) -> Raster:
    """Replace visible pixels (alpha > 128) with their nearest k-means centroid, in place."""
    pixels = raster.pixels
    visible = pixels[..., 3] > 128
    points = pixels[visible, :3]
    if len(points) == 0 or colors <= 0:
        return raster

    result = kmeans(points, min(colors, len(points)), rng=rng, settings=settings)
    matcher = PaletteMatcher(result.rounded_centroids())
    pixels[visible, :3] = matcher.rgb[matcher.nearest_indices(points)]
    return raster


def process(
    src: Raster,
    options: PipelineSettings,
    *,
    rng: Optional[np.random.Generator] = None,
    settings: WorkerSettings = SETTINGS,
) -> Raster:
    """Run modifiers, resampling, optional k-means recolor and dithering in order."""
    options.validate(settings)
    if src.width * src.height > settings.max_raster_pixels:
        raise InvalidSettingsError(
            f"Source {src.width}x{src.height} exceeds {settings.max_raster_pixels} pixels"
        )

    started = time.perf_counter()
    raster = src
    if options.has_modifiers:
        raster = apply_color_modifiers(
            raster, options.brightness, options.contrast, options.saturation
        )

    raster = resample(raster, options.target_width, options.target_height, options.resampling_method)

    if options.use_kmeans and options.kmeans_colors > 0:
        recolor_with_kmeans(raster, options.kmeans_colors, rng=rng, settings=settings)

    if options.palette:
        apply_dithering(raster, options.palette, options.dither_method, options.dither_strength)

    logger.debug(
        "Processed %dx%d -> %dx%d in %.3fs",
        src.width,
        src.height,
        raster.width,
        raster.height,
        time.perf_counter() - started,
    )
    return raster


__all__ = ["PipelineSettings", "process", "recolor_with_kmeans"]
