"""Message boundary for the pixelation engine.

Each call takes one request message and returns one response message; no
state survives between calls.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

import numpy as np

from . import responses
from .config import SETTINGS, WorkerSettings
from .processing.masking import apply_transparency_mask
from .processing.palette import resolve_palette
from .processing.pipeline import PipelineSettings, process
from .processing.suggest import suggest_missing_colors

logger = logging.getLogger("pixelator.worker")

Handler = Callable[..., responses.Message]


def _handle_process(
    message: Mapping[str, Any], *, rng: Optional[np.random.Generator], settings: WorkerSettings, as_base64: bool
) -> responses.Message:
    src = responses.raster_from_payload(message.get("raster"))
    options = PipelineSettings.from_message(message.get("settings") or {})
    out = process(src, options, rng=rng, settings=settings)
    return responses.success(out, as_base64=as_base64)


def _handle_suggest(
    message: Mapping[str, Any], *, rng: Optional[np.random.Generator], settings: WorkerSettings, as_base64: bool
) -> responses.Message:
    src = responses.raster_from_payload(message.get("raster"))
    palette = resolve_palette(message.get("palette"))
    raw_count = message.get("numSuggestions")
    count = settings.default_suggestions if raw_count is None else int(raw_count)
    colors = suggest_missing_colors(src, palette, count, rng=rng, settings=settings)
    return responses.suggestions(colors)


def _handle_mask(
    message: Mapping[str, Any], *, rng: Optional[np.random.Generator], settings: WorkerSettings, as_base64: bool
) -> responses.Message:
    src = responses.raster_from_payload(message.get("raster"))
    threshold = int(message.get("threshold", 128))
    use_template = bool(message.get("useTemplatePalette", True))
    out = apply_transparency_mask(src, threshold, use_template)
    return responses.success(out, as_base64=as_base64)


HANDLERS: Dict[str, Handler] = {
    "process": _handle_process,
    "suggest": _handle_suggest,
    "mask": _handle_mask,
}


def handle_message(
    message: Mapping[str, Any],
    *,
    rng: Optional[np.random.Generator] = None,
    settings: WorkerSettings = SETTINGS,
    as_base64: bool = False,
) -> responses.Message:
    """Dispatch one request message; failures come back as ``kind: "error"``."""
    kind = message.get("kind") if isinstance(message, Mapping) else None
    handler = HANDLERS.get(kind) if isinstance(kind, str) else None
    if handler is None:
        return responses.error(f"Unknown message kind: {kind!r}")

    try:
        reply = handler(message, rng=rng, settings=settings, as_base64=as_base64)
    except Exception as exc:
        logger.exception("Worker failed to handle %s message", kind)
        return responses.error(str(exc))

    logger.info("Handled %s message", kind)
    return reply


__all__ = ["HANDLERS", "handle_message"]
