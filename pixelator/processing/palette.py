from __future__ import annotations

import re
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np

from ..config import InvalidSettingsError
from .color_space import rgb_to_lab, rgb_to_lab_array

RGB = Tuple[int, int, int]

_HEX_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)

WPLACE_PALETTE: Tuple[str, ...] = (
    "#000000", "#3c3c3c", "#787878", "#aaaaaa", "#d2d2d2", "#ffffff", "#600018",
    "#a50e1e", "#ed1c24", "#fa8072", "#e45c1a", "#ff7f27", "#f6aa09", "#f9dd3b",
    "#fffabc", "#9c8431", "#c5ad31", "#e8d45f", "#4a6b3a", "#5a944a", "#84c573",
    "#0eb968", "#13e67b", "#87ff5e", "#0c816e", "#10aea6", "#13e1be", "#0f799f",
    "#60f7f2", "#bbfaf2", "#28509e", "#4093e4", "#7dc7ff", "#4d31b8", "#6b50f6",
    "#99b1fb", "#4a4284", "#7a71c4", "#b5aef1", "#780c99", "#aa38b9", "#e09ff9",
    "#cb007a", "#ec1f80", "#f38da9", "#9b5249", "#d18078", "#fab6a4", "#684634",
    "#95682a", "#dba463", "#7b6352", "#9c846b", "#d6b594", "#d18051", "#f8b277",
    "#ffc5a5", "#6d643f", "#948c6b", "#cdc59e", "#333941", "#6d758d", "#b3b9d1",
)

GEOPIXELS_PALETTE: Tuple[str, ...] = (
    "#FFFFFF", "#F4F59F", "#FFCA3A", "#FF9F1C", "#FF595E", "#E71D36", "#F3BBC2",
    "#FF85A1", "#BD637D", "#CDB4DB", "#6A4C93", "#4D194D", "#A8D0DC", "#2EC4B6",
    "#1A535C", "#6D9DCD", "#1982C4", "#A1C181", "#8AC926", "#A0A0A0", "#6B4226",
    "#505050", "#CFD078", "#145A7A", "#8B1D24", "#C07F7A", "#C49A6C", "#5B7B1C",
    "#000000",
)

PRESET_PALETTES: Dict[str, Tuple[str, ...]] = {
    "wplace": WPLACE_PALETTE,
    "geopixels": GEOPIXELS_PALETTE,
}


def parse_hex(value: str) -> RGB:
    """Parse ``#rrggbb`` or ``rrggbb``; anything after the sixth digit is ignored."""
    match = _HEX_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidSettingsError(f"Invalid hex color: {value!r}")
    return (int(match.group(1), 16), int(match.group(2), 16), int(match.group(3), 16))


def to_hex(rgb: Sequence[float]) -> str:
    channels = [min(255, max(0, int(np.floor(float(c) + 0.5)))) for c in rgb[:3]]
    return "#{:02X}{:02X}{:02X}".format(*channels)


def resolve_palette(value: Union[str, Sequence[str], None]) -> List[RGB]:
    """Turn a preset name or a list of hex strings into RGB triples."""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = PRESET_PALETTES[value.lower()]
        except KeyError:
            raise InvalidSettingsError(f"Unknown palette preset: {value}") from None
    return [parse_hex(hx) for hx in value]


class PaletteMatcher:
    """Nearest-colour lookups against one palette, by CIE76 distance in Lab.

    The palette's Lab form is computed once per matcher; create a new matcher
    per pass rather than sharing one across calls.
    """

    def __init__(self, palette: Sequence[Sequence[int]]) -> None:
        if len(palette) == 0:
            raise InvalidSettingsError("Palette must contain at least one color")
        self.rgb = np.asarray(palette, dtype=np.uint8).reshape(-1, 3)
        self.lab = rgb_to_lab_array(self.rgb)

    def __len__(self) -> int:
        return len(self.rgb)

    def nearest_index(self, rgb: Sequence[float]) -> int:
        lab = np.asarray(rgb_to_lab(rgb), dtype=np.float64)
        diff = self.lab - lab
        # argmin of squared distance matches argmin of delta E and keeps the first tie.
        return int(np.argmin(np.einsum("ij,ij->i", diff, diff)))

    def nearest(self, rgb: Sequence[float]) -> RGB:
        r, g, b = self.rgb[self.nearest_index(rgb)]
        return (int(r), int(g), int(b))

    def nearest_indices(self, rgb: np.ndarray, chunk: int = 16384) -> np.ndarray:
        """Vectorized :meth:`nearest_index` over an ``(n, 3)`` array."""
        flat = np.asarray(rgb, dtype=np.float64).reshape(-1, 3)
        out = np.empty(len(flat), dtype=np.intp)
        for start in range(0, len(flat), chunk):
            lab = rgb_to_lab_array(flat[start : start + chunk])
            diff = lab[:, None, :] - self.lab[None, :, :]
            out[start : start + chunk] = np.argmin(np.sum(diff * diff, axis=2), axis=1)
        return out

    def nearest_distances(self, rgb: np.ndarray) -> np.ndarray:
        """Delta E from each colour in an ``(n, 3)`` array to its nearest palette entry."""
        lab = rgb_to_lab_array(np.asarray(rgb, dtype=np.float64).reshape(-1, 3))
        diff = lab[:, None, :] - self.lab[None, :, :]
        return np.sqrt(np.min(np.sum(diff * diff, axis=2), axis=1))


def find_nearest_color(pixel: Sequence[float], palette: Sequence[Sequence[int]]) -> RGB:
    """Palette entry closest to ``pixel`` in Lab; ties go to the earliest entry."""
    return PaletteMatcher(palette).nearest(pixel)


__all__ = [
    "GEOPIXELS_PALETTE",
    "PRESET_PALETTES",
    "PaletteMatcher",
    "RGB",
    "WPLACE_PALETTE",
    "find_nearest_color",
    "parse_hex",
    "resolve_palette",
    "to_hex",
]
