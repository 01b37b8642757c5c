from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from inkcrop.config import ProcessingOptions


def _gradient(width: int, height: int, mode: str = "RGB") -> Image.Image:
    image = Image.linear_gradient("L").resize((width, height)).convert(mode)
    return image


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Write a small gradient image and return its path."""
    source_dir = tmp_path / "in"
    source_dir.mkdir(exist_ok=True)

    def _make(name: str, width: int, height: int, mode: str = "RGB") -> Path:
        path = source_dir / name
        image = _gradient(width, height, mode)
        fmt = "PNG" if path.suffix.lower() == ".png" else "JPEG"
        image.save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture
def plain_options() -> ProcessingOptions:
    return ProcessingOptions(dither_enabled=False)
