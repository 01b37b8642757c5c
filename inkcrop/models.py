"""Data models shared by the pipeline, the batch runner and the daemons."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import NamedTuple


class Dimensions(NamedTuple):
    width: int
    height: int


class ProcessStatus(str, Enum):
    """Outcome of one pipeline invocation."""

    CREATED = "created"
    SKIPPED_EXISTS = "skipped_exists"  # artifact already on disk
    SKIPPED_UNSUPPORTED = "skipped_unsupported"  # extension not handled
    FAILED = "failed"  # only recorded by the batch runner


@dataclass(frozen=True)
class OutputArtifact:
    """Name of a processed image; the name itself is the idempotence key."""

    base_name: str
    size: Dimensions
    offset_x: int
    offset_y: int
    algorithm: str | None = None

    @property
    def filename(self) -> str:
        base = self.base_name.replace("_", "-")
        if self.algorithm:
            base = f"{base}-{self.algorithm}"
        return (
            f"{base}_{self.size.width}x{self.size.height}"
            f"_{self.offset_x}x{self.offset_y}_resized.jpg"
        )


@dataclass(frozen=True)
class ProcessResult:
    source: Path
    status: ProcessStatus
    output: Path | None = None
    error: str | None = None


@dataclass
class BatchResult:
    """Accumulated results of one batch, in input order."""

    results: "list[ProcessResult]" = field(default_factory=list)

    def add(self, result: ProcessResult) -> None:
        self.results.append(result)

    def _with_status(self, *statuses: ProcessStatus) -> "list[ProcessResult]":
        return [r for r in self.results if r.status in statuses]

    @property
    def created(self) -> "list[ProcessResult]":
        return self._with_status(ProcessStatus.CREATED)

    @property
    def skipped(self) -> "list[ProcessResult]":
        return self._with_status(ProcessStatus.SKIPPED_EXISTS, ProcessStatus.SKIPPED_UNSUPPORTED)

    @property
    def failed(self) -> "list[ProcessResult]":
        return self._with_status(ProcessStatus.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed
