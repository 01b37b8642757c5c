"""Error-diffusion dithering onto the fixed four-entry display palette.

Kernels are stored as (dx, dy, weight) triples relative to the current
pixel, dx pointing in the scan direction. With serpentine scanning the
odd rows run right to left and dx is mirrored accordingly.
"""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from .config import canonical_algorithm

logger = logging.getLogger(__name__)

# RGBA entries; the palette is the same whichever kernel is selected.
PALETTE = np.array(
    [
        (0, 0, 0, 255),  # black
        (255, 255, 255, 255),  # white
        (128, 128, 128, 255),  # mid-gray
        (0, 0, 0, 0),  # transparent
    ],
    dtype=np.float32,
)

Kernel = list[tuple[int, int, float]]

KERNELS: dict[str, Kernel] = {
    "FloydSteinberg": [
        (1, 0, 7 / 16),
        (-1, 1, 3 / 16),
        (0, 1, 5 / 16),
        (1, 1, 1 / 16),
    ],
    "FalseFloydSteinberg": [
        (1, 0, 3 / 8),
        (0, 1, 3 / 8),
        (1, 1, 2 / 8),
    ],
    "JarvisJudiceNinke": [
        (1, 0, 7 / 48),
        (2, 0, 5 / 48),
        (-2, 1, 3 / 48),
        (-1, 1, 5 / 48),
        (0, 1, 7 / 48),
        (1, 1, 5 / 48),
        (2, 1, 3 / 48),
        (-2, 2, 1 / 48),
        (-1, 2, 3 / 48),
        (0, 2, 5 / 48),
        (1, 2, 3 / 48),
        (2, 2, 1 / 48),
    ],
    "Stucki": [
        (1, 0, 8 / 42),
        (2, 0, 4 / 42),
        (-2, 1, 2 / 42),
        (-1, 1, 4 / 42),
        (0, 1, 8 / 42),
        (1, 1, 4 / 42),
        (2, 1, 2 / 42),
        (-2, 2, 1 / 42),
        (-1, 2, 2 / 42),
        (0, 2, 4 / 42),
        (1, 2, 2 / 42),
        (2, 2, 1 / 42),
    ],
    "Atkinson": [
        (1, 0, 1 / 8),
        (2, 0, 1 / 8),
        (-1, 1, 1 / 8),
        (0, 1, 1 / 8),
        (1, 1, 1 / 8),
        (0, 2, 1 / 8),
    ],
    "Burkes": [
        (1, 0, 8 / 32),
        (2, 0, 4 / 32),
        (-2, 1, 2 / 32),
        (-1, 1, 4 / 32),
        (0, 1, 8 / 32),
        (1, 1, 4 / 32),
        (2, 1, 2 / 32),
    ],
    "Sierra": [
        (1, 0, 5 / 32),
        (2, 0, 3 / 32),
        (-2, 1, 2 / 32),
        (-1, 1, 4 / 32),
        (0, 1, 5 / 32),
        (1, 1, 4 / 32),
        (2, 1, 2 / 32),
        (-1, 2, 2 / 32),
        (0, 2, 3 / 32),
        (1, 2, 2 / 32),
    ],
    "Sierra2": [
        (1, 0, 4 / 16),
        (2, 0, 3 / 16),
        (-2, 1, 1 / 16),
        (-1, 1, 2 / 16),
        (0, 1, 3 / 16),
        (1, 1, 2 / 16),
        (2, 1, 1 / 16),
    ],
    "SierraLite": [
        (1, 0, 2 / 4),
        (-1, 1, 1 / 4),
        (0, 1, 1 / 4),
    ],
    # Weights sum to 12/14: part of the error is dropped on purpose.
    "StevenPigeon": [
        (1, 0, 2 / 14),
        (2, 0, 1 / 14),
        (-1, 1, 2 / 14),
        (0, 1, 2 / 14),
        (1, 1, 2 / 14),
        (-2, 2, 1 / 14),
        (0, 2, 1 / 14),
        (2, 2, 1 / 14),
    ],
}


def resolve_algorithm(name: str, strength: float) -> Kernel:
    """Look up a kernel case-insensitively and scale its weights by strength."""
    kernel = KERNELS[canonical_algorithm(name)]
    return [(dx, dy, weight * strength) for dx, dy, weight in kernel]


# The per-pixel scan works on plain floats.
_PALETTE_ENTRIES = [tuple(float(c) for c in entry) for entry in PALETTE.tolist()]


def _nearest(r: float, g: float, b: float, a: float) -> int:
    best = 0
    best_dist = None
    for idx, (pr, pg, pb, pa) in enumerate(_PALETTE_ENTRIES):
        dist = (r - pr) ** 2 + (g - pg) ** 2 + (b - pb) ** 2 + (a - pa) ** 2
        if best_dist is None or dist < best_dist:
            best, best_dist = idx, dist
    return best


def _diffuse(work: np.ndarray, kernel: Kernel, serpentine: bool) -> np.ndarray:
    h, w, _ = work.shape
    rows = work.tolist()
    out = np.empty((h, w), dtype=np.uint8)
    for y in range(h):
        row = rows[y]
        if serpentine and y % 2 == 1:
            x_range = range(w - 1, -1, -1)
            flip = -1
        else:
            x_range = range(w)
            flip = 1
        indices = [0] * w
        for x in x_range:
            r, g, b, a = row[x]
            idx = _nearest(r, g, b, a)
            indices[x] = idx
            pr, pg, pb, pa = _PALETTE_ENTRIES[idx]
            er, eg, eb, ea = r - pr, g - pg, b - pb, a - pa
            if not (er or eg or eb or ea):
                continue
            for dx, dy, weight in kernel:
                nx = x + dx * flip
                ny = y + dy
                if 0 <= nx < w and ny < h:
                    target = rows[ny][nx]
                    target[0] += er * weight
                    target[1] += eg * weight
                    target[2] += eb * weight
                    target[3] += ea * weight
        out[y] = indices
    return out


def dither_image(image: Image.Image, algorithm: str, strength: float, serpentine: bool = False) -> Image.Image:
    """Quantize image to PALETTE; returns a new RGBA image, the input is untouched."""
    kernel = resolve_algorithm(algorithm, strength)
    logger.info(
        "Dithering %dx%d image with %s (strength %.2f, serpentine %s)",
        image.width,
        image.height,
        canonical_algorithm(algorithm),
        strength,
        serpentine,
    )
    work = np.asarray(image.convert("RGBA"), dtype=np.float32)
    indices = _diffuse(work, kernel, serpentine)
    pixels = PALETTE.astype(np.uint8)[indices]
    return Image.fromarray(pixels)
