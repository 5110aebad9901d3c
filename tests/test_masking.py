import numpy as np

from pixelator.processing.masking import apply_transparency_mask, opaque_colors
from pixelator.processing.raster import Raster


def _row(*pixels) -> Raster:
    return Raster(len(pixels), 1, np.array([pixels], dtype=np.uint8))


def test_alpha_is_binarized_against_threshold() -> None:
    src = _row((9, 9, 9, 0), (9, 9, 9, 50), (9, 9, 9, 100), (9, 9, 9, 255))

    out = apply_transparency_mask(src, 100, use_template_palette=False)

    assert out.alpha.tolist() == [[0, 0, 255, 255]]
    assert out.pixels[..., :3].tolist() == src.pixels[..., :3].tolist()


def test_source_raster_is_left_alone() -> None:
    src = _row((9, 9, 9, 50), (9, 9, 9, 255))

    apply_transparency_mask(src, 10)

    assert src.alpha.tolist() == [[50, 255]]


def test_partially_transparent_pixels_take_the_nearest_opaque_color() -> None:
    src = _row((250, 0, 0, 255), (0, 0, 240, 255), (200, 30, 30, 180), (10, 10, 200, 128), (10, 10, 200, 20))

    out = apply_transparency_mask(src, 100)

    assert out.pixels[0, 2].tolist() == [250, 0, 0, 255]
    assert out.pixels[0, 3].tolist() == [0, 0, 240, 255]
    # Below the threshold: hidden, colour untouched.
    assert out.pixels[0, 4].tolist() == [10, 10, 200, 0]


def test_without_opaque_pixels_colors_are_kept() -> None:
    src = _row((12, 34, 56, 200), (1, 2, 3, 150))

    out = apply_transparency_mask(src, 128)

    assert out.pixels.tolist() == [[[12, 34, 56, 255], [1, 2, 3, 255]]]


def test_opaque_colors_are_distinct_in_first_seen_order() -> None:
    src = _row((5, 5, 5, 255), (1, 1, 1, 255), (5, 5, 5, 255), (7, 7, 7, 10))

    assert opaque_colors(src).tolist() == [[5, 5, 5], [1, 1, 1]]
