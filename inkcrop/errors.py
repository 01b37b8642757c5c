"""
Error types for the image normalizer and its daemons.

Everything inherits from InkcropError so the command line can catch a
single base class. Skippable conditions (unsupported extension, existing
artifact) are not errors; they are reported as ProcessResult values.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import BatchResult


class InkcropError(Exception):
    """Base exception for all inkcrop failures."""


class UnknownAlgorithmError(InkcropError, ValueError):
    """Raised when a dither algorithm name is not one of the known kernels."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown dither algorithm: {name!r}")


class PipelineError(InkcropError):
    """Raised when a single image cannot be turned into an artifact."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class DecodeError(PipelineError):
    """Raised when an input file cannot be opened or decoded."""


class EncodeError(PipelineError):
    """Raised when the JPEG artifact cannot be written."""


class OutputError(PipelineError):
    """Raised when the output location cannot be prepared."""


class BatchAborted(InkcropError):
    """Raised by the batch runner when the abort policy stops a batch."""

    def __init__(self, result: BatchResult, cause: PipelineError):
        self.result = result
        self.cause = cause
        super().__init__(f"Batch aborted after {len(result.results)} file(s): {cause}")


class WatchError(InkcropError):
    """Raised when the directory subscription cannot be set up."""

    def __init__(self, directory: str | Path, reason: str):
        self.directory = Path(directory)
        self.reason = reason
        super().__init__(f"Cannot watch {directory}: {reason}")


class SlideshowError(InkcropError):
    """Raised when the published pointer cannot be created or removed."""

    def __init__(self, pointer: str | Path, reason: str):
        self.pointer = Path(pointer)
        self.reason = reason
        super().__init__(f"Slideshow pointer {pointer}: {reason}")
