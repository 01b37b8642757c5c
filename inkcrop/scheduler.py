from __future__ import annotations

import asyncio
import itertools
import logging
from pathlib import Path
from typing import Awaitable, Callable, Sequence

from .errors import SlideshowError
from .storage import pointer_path, publish_pointer, remove_pointer

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class SlideshowDaemon:
    """Publishes each file in turn under one fixed pointer name.

    The pointer is removed before it is replaced and again after every
    dwell, so at most one pointer exists at any time.
    """

    def __init__(
        self,
        files: Sequence[Path],
        output_dir: Path,
        link_timer: float,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.files = tuple(Path(f) for f in files)
        self.output_dir = Path(output_dir)
        self.link_timer = link_timer
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def pointer(self) -> Path:
        return pointer_path(self.output_dir)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def run(self) -> None:
        if not self.files:
            logger.warning("No images to link, slideshow not started")
            return

        logger.info("Linking %d image(s) every %ss into %s", len(self.files), self.link_timer, self.pointer)
        try:
            for image_path in itertools.cycle(self.files):
                self._publish(image_path)
                await self._sleep(self.link_timer)
                self._retract()
        except asyncio.CancelledError:
            # cancelled mid-dwell: leave no stale pointer behind
            try:
                self._retract()
            except SlideshowError as exc:
                logger.error("%s", exc)
            raise

    def _publish(self, image_path: Path) -> None:
        try:
            publish_pointer(self.output_dir, image_path)
        except OSError as exc:
            raise SlideshowError(self.pointer, f"cannot link {image_path}: {exc}") from exc

    def _retract(self) -> None:
        try:
            remove_pointer(self.output_dir)
        except OSError as exc:
            raise SlideshowError(self.pointer, f"cannot remove: {exc}") from exc
