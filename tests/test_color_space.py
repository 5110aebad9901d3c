import numpy as np
import pytest

from pixelator.processing.color_space import delta_e, delta_e_array, rgb_to_lab, rgb_to_lab_array


def test_black_maps_to_lab_origin() -> None:
    assert rgb_to_lab((0, 0, 0)) == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)


def test_white_maps_to_full_lightness() -> None:
    l_value, a_value, b_value = rgb_to_lab((255, 255, 255))

    assert l_value == pytest.approx(100.0, abs=1e-6)
    assert a_value == pytest.approx(0.0, abs=0.05)
    assert b_value == pytest.approx(0.0, abs=0.05)


def test_pure_red_has_positive_a_channel() -> None:
    l_value, a_value, b_value = rgb_to_lab((255, 0, 0))

    assert l_value == pytest.approx(53.24, abs=0.1)
    assert a_value == pytest.approx(80.09, abs=0.2)
    assert b_value == pytest.approx(67.20, abs=0.2)


def test_delta_e_is_symmetric_and_zero_on_identity() -> None:
    rng = np.random.default_rng(7)
    for _ in range(50):
        lab_a = rgb_to_lab(rng.integers(0, 256, size=3))
        lab_b = rgb_to_lab(rng.integers(0, 256, size=3))
        assert delta_e(lab_a, lab_b) == delta_e(lab_b, lab_a)
        assert delta_e(lab_a, lab_a) == 0.0


def test_delta_e_is_plain_euclidean_distance() -> None:
    assert delta_e((50.0, 0.0, 0.0), (53.0, 4.0, 0.0)) == pytest.approx(5.0)


def test_vectorized_conversion_matches_scalar() -> None:
    rng = np.random.default_rng(11)
    colors = rng.integers(0, 256, size=(64, 3))

    vectorized = rgb_to_lab_array(colors)

    for color, lab in zip(colors, vectorized):
        assert tuple(lab) == pytest.approx(rgb_to_lab(color), abs=1e-6)


def test_vectorized_conversion_tolerates_out_of_range_working_values() -> None:
    lab = rgb_to_lab_array(np.array([[-40.0, 300.0, 128.0]]))

    assert np.isfinite(lab).all()


def test_delta_e_array_broadcasts_against_palette() -> None:
    palette = rgb_to_lab_array(np.array([[0, 0, 0], [255, 255, 255]]))
    pixel = rgb_to_lab_array(np.array([10, 10, 10]))

    distances = delta_e_array(pixel, palette)

    assert distances.shape == (2,)
    assert distances[0] < distances[1]
