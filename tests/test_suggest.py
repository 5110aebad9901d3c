import numpy as np
import pytest

from pixelator.processing.raster import Raster
from pixelator.processing.suggest import sample_visible_pixels, suggest_missing_colors

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def _two_color_raster(first, second, first_columns: int, width: int = 8, height: int = 8) -> Raster:
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :first_columns] = (*first, 255)
    pixels[:, first_columns:] = (*second, 255)
    return Raster(width, height, pixels)


@pytest.mark.parametrize("count", [1, 5, 50])
def test_fully_transparent_raster_yields_no_suggestions(count, make_solid, rng) -> None:
    src = make_solid(10, 10, (200, 10, 10, 0))

    assert suggest_missing_colors(src, [WHITE], count, rng=rng) == []


def test_empty_palette_yields_no_suggestions(rng) -> None:
    src = _two_color_raster(RED, BLUE, 4)

    assert suggest_missing_colors(src, [], 3, rng=rng) == []


def test_non_positive_count_yields_no_suggestions(rng) -> None:
    src = _two_color_raster(RED, BLUE, 4)

    assert suggest_missing_colors(src, [RED], 0, rng=rng) == []


def test_missing_color_is_suggested_first(rng) -> None:
    src = _two_color_raster(RED, BLUE, 4)

    suggestions = suggest_missing_colors(src, [RED], 5, rng=rng)

    assert suggestions[0] == "#0000FF"
    assert len(suggestions) <= 5


def test_suggestions_are_weighted_by_pixel_count(rng) -> None:
    # Blue sits further from white than green does, but green covers three times the area.
    src = _two_color_raster(GREEN, BLUE, 6)

    assert suggest_missing_colors(src, [WHITE], 2, rng=rng) == ["#00FF00", "#0000FF"]


def test_equal_areas_rank_by_perceptual_error(rng) -> None:
    src = _two_color_raster(GREEN, BLUE, 4)

    assert suggest_missing_colors(src, [WHITE], 1, rng=rng) == ["#0000FF"]


def test_result_never_exceeds_requested_count(gradient_raster, rng) -> None:
    suggestions = suggest_missing_colors(gradient_raster, [(0, 0, 0)], 3, rng=rng)

    assert len(suggestions) == 3
    assert all(len(hx) == 7 and hx.startswith("#") for hx in suggestions)


def test_sampling_uses_an_even_stride(make_solid) -> None:
    src = make_solid(100, 100, (1, 2, 3, 255))

    samples = sample_visible_pixels(src, 4096)

    # ceil(10000 / 4096) == 3, so every third pixel is taken.
    assert len(samples) == 3334


def test_sampling_skips_pixels_at_or_below_half_alpha(alpha_ramp_raster) -> None:
    samples = sample_visible_pixels(alpha_ramp_raster, 4096)

    assert len(samples) == 127
