import numpy as np
import pytest
from PIL import Image

from pixelator.processing.raster import Raster


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def gradient_raster() -> Raster:
    """16x8 opaque raster with a horizontal red ramp and a vertical blue ramp."""
    img = Image.new("RGBA", (16, 8))
    pixels = img.load()
    for y in range(8):
        for x in range(16):
            pixels[x, y] = (x * 17, 90, y * 36, 255)
    return Raster.from_image(img)


@pytest.fixture
def alpha_ramp_raster() -> Raster:
    """16x16 mid-gray raster whose alpha runs through every value 0..255."""
    pixels = np.full((16, 16, 4), 140, dtype=np.uint8)
    pixels[..., 3] = np.arange(256, dtype=np.uint8).reshape(16, 16)
    return Raster(16, 16, pixels)


@pytest.fixture
def make_solid():
    def _make(width: int, height: int, rgba) -> Raster:
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = rgba
        return Raster(width, height, pixels)

    return _make
