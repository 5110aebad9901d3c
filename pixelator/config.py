import logging
import os
from dataclasses import dataclass
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True)
class WorkerSettings:
    port: int
    log_level: str
    default_suggestions: int
    suggest_sample_limit: int
    suggest_clusters: int
    kmeans_max_iterations: int
    kmeans_seed: Optional[int]
    max_raster_pixels: int

    @classmethod
    def from_env(cls) -> "WorkerSettings":
        return cls(
            port=int(os.getenv("PORT", "5600")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            default_suggestions=int(os.getenv("DEFAULT_SUGGESTIONS", "5")),
            suggest_sample_limit=int(os.getenv("SUGGEST_SAMPLE_LIMIT", "4096")),
            suggest_clusters=int(os.getenv("SUGGEST_CLUSTERS", "128")),
            kmeans_max_iterations=int(os.getenv("KMEANS_MAX_ITER", "20")),
            kmeans_seed=_optional_int("KMEANS_SEED"),
            max_raster_pixels=int(os.getenv("MAX_RASTER_PIXELS", str(4096 * 4096))),
        )


SETTINGS = WorkerSettings.from_env()


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("pixelator")


class InvalidSettingsError(ValueError):
    """Raised when a request's configuration cannot produce a meaningful raster."""
