import base64

import numpy as np
import pytest

from pixelator.worker import handle_message


def _raster_message(raster, *, encode: bool = False):
    data = raster.to_bytes()
    return {
        "width": raster.width,
        "height": raster.height,
        "rgba_bytes": base64.b64encode(data).decode("ascii") if encode else data,
    }


def test_process_message_returns_success(gradient_raster, rng) -> None:
    reply = handle_message(
        {
            "kind": "process",
            "raster": _raster_message(gradient_raster),
            "settings": {
                "targetWidth": 4,
                "targetHeight": 2,
                "resamplingMethod": "nearest",
                "ditherMethod": "bayer-8x8",
                "ditherStrength": 100,
                "palette": ["#000000", "#FFFFFF"],
                "useKmeans": False,
                "kmeansColors": 0,
                "brightness": 0,
                "contrast": 0,
                "saturation": 0,
            },
        },
        rng=rng,
    )

    assert reply["kind"] == "success"
    raster = reply["raster"]
    assert (raster["width"], raster["height"]) == (4, 2)
    pixels = np.frombuffer(raster["rgba_bytes"], dtype=np.uint8).reshape(-1, 4)
    assert {tuple(p) for p in pixels[:, :3].tolist()} <= {(0, 0, 0), (255, 255, 255)}


def test_process_message_accepts_and_returns_base64(gradient_raster) -> None:
    reply = handle_message(
        {
            "kind": "process",
            "raster": _raster_message(gradient_raster, encode=True),
            "settings": {"targetWidth": 16, "targetHeight": 8},
        },
        as_base64=True,
    )

    assert reply["kind"] == "success"
    assert base64.b64decode(reply["raster"]["rgba_bytes"]) == gradient_raster.to_bytes()


def test_empty_palette_with_dithering_is_an_error(gradient_raster) -> None:
    reply = handle_message(
        {
            "kind": "process",
            "raster": _raster_message(gradient_raster),
            "settings": {"targetWidth": 4, "targetHeight": 4, "ditherMethod": "floyd-steinberg", "palette": []},
        }
    )

    assert reply["kind"] == "error"
    assert "palette" in reply["message"]


def test_zero_target_dimensions_are_an_error(gradient_raster) -> None:
    reply = handle_message(
        {
            "kind": "process",
            "raster": _raster_message(gradient_raster),
            "settings": {"targetWidth": 0, "targetHeight": 4},
        }
    )

    assert reply["kind"] == "error"
    assert "0x4" in reply["message"]


def test_malformed_raster_is_an_error() -> None:
    reply = handle_message(
        {
            "kind": "process",
            "raster": {"width": 2, "height": 2, "rgba_bytes": b"\x00" * 3},
            "settings": {"targetWidth": 1, "targetHeight": 1},
        }
    )

    assert reply["kind"] == "error"


def test_non_finite_brightness_is_an_error(gradient_raster) -> None:
    reply = handle_message(
        {
            "kind": "process",
            "raster": _raster_message(gradient_raster),
            "settings": {"targetWidth": 1, "targetHeight": 1, "brightness": float("nan")},
        }
    )

    assert reply["kind"] == "error"
    assert "brightness" in reply["message"]


def test_suggest_message_returns_colors(gradient_raster, rng) -> None:
    reply = handle_message(
        {
            "kind": "suggest",
            "raster": _raster_message(gradient_raster),
            "palette": ["#000000"],
            "numSuggestions": 4,
        },
        rng=rng,
    )

    assert reply["kind"] == "suggestions"
    assert len(reply["colors"]) == 4


def test_suggest_message_uses_default_count(gradient_raster, rng) -> None:
    reply = handle_message(
        {"kind": "suggest", "raster": _raster_message(gradient_raster), "palette": "geopixels"},
        rng=rng,
    )

    assert reply["kind"] == "suggestions"
    assert len(reply["colors"]) == 5


def test_suggest_on_transparent_raster_is_empty(make_solid) -> None:
    src = make_solid(4, 4, (255, 0, 0, 0))

    reply = handle_message(
        {"kind": "suggest", "raster": _raster_message(src), "palette": ["#FFFFFF"], "numSuggestions": 3}
    )

    assert reply == {"kind": "suggestions", "colors": []}


def test_mask_message_binarizes_alpha(alpha_ramp_raster) -> None:
    reply = handle_message(
        {"kind": "mask", "raster": _raster_message(alpha_ramp_raster), "threshold": 200, "useTemplatePalette": False}
    )

    alpha = np.frombuffer(reply["raster"]["rgba_bytes"], dtype=np.uint8).reshape(-1, 4)[:, 3]
    assert alpha[:200].max() == 0
    assert (alpha[200:] == 255).all()


@pytest.mark.parametrize("message", [{}, {"kind": "render"}, {"kind": None}])
def test_unknown_kind_is_an_error(message) -> None:
    reply = handle_message(message)

    assert reply["kind"] == "error"
    assert "Unknown message kind" in reply["message"]
