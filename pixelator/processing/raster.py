from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image


def to_u8(values: np.ndarray) -> np.ndarray:
    """Store float channel values the way a clamped 8-bit buffer does.

    Values are clamped to [0, 255] and rounded to the nearest integer, ties to even.
    """

    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


@dataclass
class Raster:
    """A ``width`` x ``height`` RGBA pixel buffer.

    ``pixels`` is a ``uint8`` array shaped ``(height, width, 4)``. Stages either
    mutate it in place or build a new raster.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        expected = (self.height, self.width, 4)
        if self.pixels.shape != expected:
            raise ValueError(f"Raster pixels must have shape {expected}, got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            self.pixels = to_u8(self.pixels)

    @classmethod
    def blank(cls, width: int, height: int) -> "Raster":
        return cls(width, height, np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "Raster":
        if width < 1 or height < 1:
            raise ValueError(f"Raster dimensions must be positive, got {width}x{height}")
        expected = width * height * 4
        if len(data) != expected:
            raise ValueError(
                f"RGBA buffer for {width}x{height} must be {expected} bytes, got {len(data)}"
            )
        pixels = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4).copy()
        return cls(width, height, pixels)

    @classmethod
    def from_image(cls, img: Image.Image) -> "Raster":
        rgba = img.convert("RGBA")
        width, height = rgba.size
        return cls(width, height, np.asarray(rgba, dtype=np.uint8).copy())

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    def copy(self) -> "Raster":
        return Raster(self.width, self.height, self.pixels.copy())

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)
