"""Pixelation and dithering pipeline components."""

from .color_space import delta_e, rgb_to_lab
from .dither import DITHER_METHODS, apply_dithering
from .enhance import apply_color_modifiers
from .kmeans import Cluster, KMeansResult, kmeans
from .masking import apply_transparency_mask
from .palette import PRESET_PALETTES, PaletteMatcher, find_nearest_color, parse_hex, resolve_palette, to_hex
from .pipeline import PipelineSettings, process, recolor_with_kmeans
from .raster import Raster
from .resample import RESAMPLERS, resample
from .suggest import suggest_missing_colors

__all__ = [
    "delta_e",
    "rgb_to_lab",
    "DITHER_METHODS",
    "apply_dithering",
    "apply_color_modifiers",
    "Cluster",
    "KMeansResult",
    "kmeans",
    "apply_transparency_mask",
    "PRESET_PALETTES",
    "PaletteMatcher",
    "find_nearest_color",
    "parse_hex",
    "resolve_palette",
    "to_hex",
    "PipelineSettings",
    "process",
    "recolor_with_kmeans",
    "Raster",
    "RESAMPLERS",
    "resample",
    "suggest_missing_colors",
]
