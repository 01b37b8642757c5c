from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .errors import UnknownAlgorithmError

CANVAS_WIDTH = 960
CANVAS_HEIGHT = 540

SUPPORTED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})

DITHER_ALGORITHMS = (
    "FloydSteinberg",
    "JarvisJudiceNinke",
    "Stucki",
    "Atkinson",
    "Sierra",
    "Sierra2",
    "SierraLite",
    "StevenPigeon",
    "Burkes",
    "FalseFloydSteinberg",
)

DEFAULT_INPUT = "*.jp*g"
DEFAULT_OUTPUT = "output"
DEFAULT_DITHER_ALGORITHM = "StevenPigeon"
DEFAULT_DITHER_STRENGTH = 0.9
DEFAULT_QUALITY = 80
DEFAULT_LINK_SECONDS = 900

OUTPUT_DIR_MODE = 0o755
POINTER_NAME = "linkedimage.jpg"

# Upper bound on created-file events waiting for the pipeline.
WATCH_QUEUE_SIZE = 64
WATCH_POLL_SECONDS = 0.5

LOG_LEVEL = os.environ.get("INKCROP_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

ErrorPolicy = Literal["abort", "continue"]


def canonical_algorithm(name: str) -> str:
    """Return the canonical spelling of a dither algorithm name."""
    lookup = {alg.lower(): alg for alg in DITHER_ALGORITHMS}
    try:
        return lookup[name.strip().lower()]
    except KeyError:
        raise UnknownAlgorithmError(name) from None


@dataclass(frozen=True)
class ProcessingOptions:
    """Per-image processing settings, shared read-only by every run."""

    dither_enabled: bool = True
    dither_algorithm: str = DEFAULT_DITHER_ALGORITHM
    dither_strength: float = DEFAULT_DITHER_STRENGTH
    serpentine: bool = False
    force_rotate: bool = False
    force_crop: bool = False
    quality: int = DEFAULT_QUALITY

    canvas_width: int = CANVAS_WIDTH
    canvas_height: int = CANVAS_HEIGHT

    def __post_init__(self) -> None:
        if not 0.0 <= self.dither_strength <= 1.0:
            raise ValueError(f"dither strength must be within 0-1, got {self.dither_strength}")
        if not 0 <= self.quality <= 100:
            raise ValueError(f"JPEG quality must be within 0-100, got {self.quality}")
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError("canvas dimensions must be positive")
        if self.dither_enabled:
            # frozen: bypass __setattr__ to store the canonical name
            object.__setattr__(self, "dither_algorithm", canonical_algorithm(self.dither_algorithm))


@dataclass(frozen=True)
class RunConfig:
    """The whole configuration surface handed over by the command line."""

    input: str = DEFAULT_INPUT
    output: Path = Path(DEFAULT_OUTPUT)
    options: ProcessingOptions = field(default_factory=ProcessingOptions)
    dither_all: bool = False
    daemon: bool = False
    link: bool = False
    link_timer: float = DEFAULT_LINK_SECONDS
    error_policy: ErrorPolicy = "abort"

    def __post_init__(self) -> None:
        if self.link_timer <= 0:
            raise ValueError(f"link timer must be positive, got {self.link_timer}")
        if self.error_policy not in ("abort", "continue"):
            raise ValueError(f"unknown error policy: {self.error_policy}")
