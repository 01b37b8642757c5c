"""
Per-file image normalization and the batch runner that drives it.

One invocation of ImagePipeline.process walks a single file through:

    extension check -> decode -> plan size -> offsets -> artifact name
    -> skip if present, else [dither] -> [rotate] -> [crop]
    -> portrait rotation -> Lanczos resize -> encode

and writes at most one JPEG. The planned size folds in the rotate, crop
and portrait steps, so an existing artifact is detected without
dithering or resampling. Skips come back as ProcessResult values;
decode, filesystem and encode failures raise PipelineError. run_batch
turns those into FAILED results and either aborts (the default) or
carries on with the next file, depending on the error policy.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from .config import DITHER_ALGORITHMS, SUPPORTED_EXTENSIONS, ErrorPolicy, ProcessingOptions
from .dither import dither_image
from .errors import BatchAborted, OutputError, PipelineError
from .image_ops import (
    artifact_for,
    crop_center,
    encode_jpeg,
    force_rotate,
    load_image,
    normalize_orientation,
    plan_dimensions,
    planned_source_size,
    resize_to,
)
from .models import BatchResult, ProcessResult, ProcessStatus
from .storage import artifact_exists

logger = logging.getLogger(__name__)


class ImagePipeline:
    def __init__(
        self,
        options: ProcessingOptions,
        output_dir: Path,
        error_policy: ErrorPolicy = "abort",
    ) -> None:
        self.options = options
        self.output_dir = Path(output_dir)
        self.error_policy = error_policy

    def process(self, path: str | Path) -> ProcessResult:
        source = Path(path)
        opts = self.options

        if source.suffix.lower() not in SUPPORTED_EXTENSIONS:
            logger.info("%s is not a supported image format, skipping", source)
            return ProcessResult(source, ProcessStatus.SKIPPED_UNSUPPORTED)

        image = load_image(source)
        original_size = image.size

        # Dithering never changes geometry, so the artifact name is known up front.
        crop_to = (opts.canvas_width, opts.canvas_height) if opts.force_crop else None
        oriented = planned_source_size(image.size, opts.force_rotate, crop_to)
        size = plan_dimensions(oriented, opts.canvas_width, opts.canvas_height)

        algorithm = opts.dither_algorithm if opts.dither_enabled else None
        artifact = artifact_for(source, size, opts.canvas_width, opts.canvas_height, algorithm)
        out_path = self.output_dir / artifact.filename

        if artifact_exists(out_path):
            logger.info("File %s already exists, skipping", out_path)
            return ProcessResult(source, ProcessStatus.SKIPPED_EXISTS, output=out_path)

        if not self.output_dir.is_dir():
            raise OutputError(self.output_dir, "output directory does not exist")

        if opts.dither_enabled:
            image = dither_image(image, opts.dither_algorithm, opts.dither_strength, opts.serpentine)
        if opts.force_rotate:
            image = force_rotate(image)
        if opts.force_crop:
            image = crop_center(image, opts.canvas_width, opts.canvas_height)
        image = normalize_orientation(image)

        resized = resize_to(image, size)
        logger.info(
            "Resized %s from %dx%d to %dx%d",
            source.name,
            image.width,
            image.height,
            size.width,
            size.height,
        )
        encode_jpeg(resized, out_path, opts.quality)
        logger.info("Created new image %s (source %dx%d)", out_path, *original_size)
        return ProcessResult(source, ProcessStatus.CREATED, output=out_path)

    def run_batch(self, paths: Iterable[str | Path]) -> BatchResult:
        paths = list(paths)
        logger.info("Processing %d file(s) into %s", len(paths), self.output_dir)

        result = BatchResult()
        for path in paths:
            try:
                outcome = self.process(path)
            except PipelineError as exc:
                logger.error("Failed to process %s: %s", path, exc.reason)
                result.add(ProcessResult(Path(path), ProcessStatus.FAILED, error=str(exc)))
                if self.error_policy == "abort":
                    raise BatchAborted(result, exc) from exc
                continue
            result.add(outcome)

        logger.info(
            "Batch finished: %d created, %d skipped, %d failed",
            len(result.created),
            len(result.skipped),
            len(result.failed),
        )
        return result


def run_all_algorithms(
    options: ProcessingOptions,
    output_dir: Path,
    paths: Iterable[str | Path],
    error_policy: ErrorPolicy = "abort",
) -> dict[str, BatchResult]:
    """Run the same inputs once per known dither algorithm."""
    paths = list(paths)
    results: dict[str, BatchResult] = {}
    for algorithm in DITHER_ALGORITHMS:
        variant = replace(options, dither_enabled=True, dither_algorithm=algorithm)
        logger.info("Dithering batch with %s", algorithm)
        results[algorithm] = ImagePipeline(variant, output_dir, error_policy).run_batch(paths)
    return results
