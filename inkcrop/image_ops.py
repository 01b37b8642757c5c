from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, EncodeError
from .models import Dimensions, OutputArtifact

logger = logging.getLogger(__name__)

# Background for the portrait rotation; a quarter turn never exposes it.
NEUTRAL_FILL = "black"


def plan_dimensions(size: tuple[int, int], max_w: int, max_h: int) -> Dimensions:
    """Scale by min(max_w / W, max_h / H), flooring the non-limiting side."""
    src_w, src_h = size
    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"cannot plan dimensions for an empty image ({src_w}x{src_h})")

    # Integer cross-multiplication: float scales land just below whole products.
    if max_w * src_h <= max_h * src_w:
        width, height = max_w, src_h * max_w // src_w
    else:
        width, height = src_w * max_h // src_h, max_h
    # Very thin images would otherwise collapse to zero pixels.
    return Dimensions(max(1, width), max(1, height))


def planned_source_size(
    size: tuple[int, int],
    force_rotate: bool = False,
    crop_to: tuple[int, int] | None = None,
) -> tuple[int, int]:
    """Size after the forced rotate, forced crop and portrait rotation steps."""
    width, height = size
    if force_rotate:
        width, height = height, width
    if crop_to is not None:
        width, height = min(crop_to[0], width), min(crop_to[1], height)
    if height > width:
        width, height = height, width
    return width, height


def center_offsets(size: Dimensions, canvas_w: int, canvas_h: int) -> tuple[int, int]:
    # Truncating division: odd padding leaves the extra pixel on the far side.
    return (canvas_w - size.width) // 2, (canvas_h - size.height) // 2


def load_image(path: Path) -> Image.Image:
    try:
        with Image.open(path) as im:
            im.load()
            image = im.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeError(path, f"cannot decode image: {exc}") from exc

    if image.mode not in ("RGB", "RGBA"):
        has_alpha = image.mode in ("LA", "PA") or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")
    return image


def force_rotate(image: Image.Image) -> Image.Image:
    return image.transpose(Image.Transpose.ROTATE_90)


def crop_center(image: Image.Image, target_w: int, target_h: int) -> Image.Image:
    """Cut a centered target_w x target_h window, or less if the image is smaller."""
    src_w, src_h = image.size
    new_w = min(target_w, src_w)
    new_h = min(target_h, src_h)
    left = (src_w - new_w) // 2
    top = (src_h - new_h) // 2
    return image.crop((left, top, left + new_w, top + new_h))


def normalize_orientation(image: Image.Image) -> Image.Image:
    if image.height > image.width:
        logger.info("Image taller than wide (%dx%d), rotating 90 degrees", image.width, image.height)
        return image.rotate(90, expand=True, fillcolor=NEUTRAL_FILL)
    return image


def resize_to(image: Image.Image, size: Dimensions) -> Image.Image:
    return image.resize(size, Image.Resampling.LANCZOS)


def artifact_for(source: Path, size: Dimensions, canvas_w: int, canvas_h: int, algorithm: str | None) -> OutputArtifact:
    offset_x, offset_y = center_offsets(size, canvas_w, canvas_h)
    return OutputArtifact(
        base_name=source.stem,
        size=size,
        offset_x=offset_x,
        offset_y=offset_y,
        algorithm=algorithm,
    )


def encode_jpeg(image: Image.Image, out_path: Path, quality: int) -> None:
    if image.mode != "RGB":
        image = image.convert("RGB")
    try:
        image.save(out_path, format="JPEG", quality=quality)
    except OSError as exc:
        # A truncated file would be taken for a finished artifact next run.
        out_path.unlink(missing_ok=True)
        raise EncodeError(out_path, f"cannot write JPEG: {exc}") from exc
