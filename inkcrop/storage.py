from __future__ import annotations

import glob
import logging
import os
from pathlib import Path

from .config import OUTPUT_DIR_MODE, POINTER_NAME

logger = logging.getLogger(__name__)


def _resolve_path(path: str | Path) -> Path:
    p = Path(path)
    return p if p.is_absolute() else (Path.cwd() / p)


def expand_inputs(pattern: str) -> list[Path]:
    return [Path(match) for match in sorted(glob.glob(pattern))]


def expand_exact(path: str | Path) -> list[Path]:
    """Glob a reported path literally: empty if it has vanished since."""
    return expand_inputs(glob.escape(str(path)))


def ensure_output_dir(path: Path) -> Path:
    if not path.is_dir():
        path.mkdir(mode=OUTPUT_DIR_MODE)
        logger.info("Created output directory %s", path)
    return path


def artifact_exists(path: Path) -> bool:
    return path.exists()


def pointer_path(output_dir: Path) -> Path:
    return output_dir / POINTER_NAME


def publish_pointer(output_dir: Path, target: Path) -> Path:
    """Replace the published pointer with a symlink to target.

    There is a short window where no pointer exists; readers polling the
    pointer must tolerate its absence.
    """
    link = pointer_path(output_dir)
    remove_pointer(output_dir)
    os.symlink(_resolve_path(target), link)
    logger.info("Linked %s -> %s", link, target)
    return link


def remove_pointer(output_dir: Path) -> bool:
    link = pointer_path(output_dir)
    if not link.is_symlink() and not link.exists():
        return False
    link.unlink()
    logger.debug("Removed pointer %s", link)
    return True
