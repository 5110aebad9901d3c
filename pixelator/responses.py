from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, List, Mapping

from .processing.raster import Raster

Message = Dict[str, Any]


def raster_from_payload(payload: Mapping[str, Any]) -> Raster:
    """Decode ``{width, height, rgba_bytes}``; ``rgba_bytes`` may be raw or base64 text."""
    if not isinstance(payload, Mapping):
        raise ValueError("raster must be an object with width, height and rgba_bytes")
    try:
        width = int(payload["width"])
        height = int(payload["height"])
        data = payload["rgba_bytes"]
    except KeyError as exc:
        raise ValueError(f"raster is missing {exc.args[0]}") from None

    if isinstance(data, str):
        try:
            data = base64.b64decode(data, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"rgba_bytes is not valid base64: {exc}") from None
    elif not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValueError("rgba_bytes must be bytes or a base64 string")

    return Raster.from_bytes(width, height, bytes(data))


def raster_payload(raster: Raster, *, as_base64: bool = False) -> Message:
    data = raster.to_bytes()
    return {
        "width": raster.width,
        "height": raster.height,
        "rgba_bytes": base64.b64encode(data).decode("ascii") if as_base64 else data,
    }


def success(raster: Raster, *, as_base64: bool = False) -> Message:
    return {"kind": "success", "raster": raster_payload(raster, as_base64=as_base64)}


def suggestions(colors: List[str]) -> Message:
    return {"kind": "suggestions", "colors": list(colors)}


def error(message: str) -> Message:
    return {"kind": "error", "message": message}
