from __future__ import annotations

import glob
import logging
import os
import queue
import threading
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import WATCH_POLL_SECONDS, WATCH_QUEUE_SIZE
from .errors import WatchError
from .models import BatchResult
from .pipeline import ImagePipeline
from .storage import expand_exact

logger = logging.getLogger(__name__)


def watch_directory_for(pattern: str) -> Path:
    """Directory whose create events feed a glob pattern."""
    if glob.has_magic(pattern):
        return Path(os.path.dirname(pattern) or ".")
    path = Path(pattern)
    if path.is_dir():
        return path
    return path.parent


class _CreatedHandler(FileSystemEventHandler):
    def __init__(self, trigger: WatchTrigger) -> None:
        self._trigger = trigger

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._trigger.submit(os.fsdecode(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        # a file renamed into place is new to the directory
        if event.is_directory:
            return
        self._trigger.submit(os.fsdecode(event.dest_path))


class WatchTrigger:
    """Feeds newly created files in the watched directory to the pipeline.

    The watchdog observer thread only enqueues paths; the thread calling
    run() drains the queue and runs the pipeline. The queue is bounded,
    so a slow pipeline blocks the observer instead of buffering without
    limit.
    """

    def __init__(
        self,
        pattern: str,
        pipeline: ImagePipeline,
        queue_size: int = WATCH_QUEUE_SIZE,
        observer_factory: Callable[[], Observer] = Observer,
    ) -> None:
        self.pattern = pattern
        self.pipeline = pipeline
        self.directory = watch_directory_for(pattern)
        self._queue: queue.Queue[str] = queue.Queue(maxsize=queue_size)
        self._observer_factory = observer_factory
        self._stop = threading.Event()
        # set once the observer is subscribed
        self.ready = threading.Event()

    def _ignored(self, path: Path) -> bool:
        # Artifacts written into a watched output dir must not retrigger.
        output_dir = self.pipeline.output_dir.resolve()
        return output_dir == path.resolve().parent

    def submit(self, path: str | Path) -> None:
        path = Path(path)
        if self._ignored(path):
            logger.debug("Ignoring %s inside the output directory", path)
            return
        logger.info("New image: %s", path)
        while not self._stop.is_set():
            try:
                self._queue.put(str(path), timeout=WATCH_POLL_SECONDS)
                return
            except queue.Full:
                logger.debug("Event queue full, waiting to enqueue %s", path)

    def process_pending(self, timeout: float | None = None) -> BatchResult | None:
        """Process one queued event; None if nothing arrived within timeout."""
        try:
            reported = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        try:
            return self.pipeline.run_batch(expand_exact(reported))
        finally:
            self._queue.task_done()

    def stop(self) -> None:
        self._stop.set()

    def run(self) -> None:
        """Block until stop() is called or the observer goes away.

        BatchAborted from the pipeline propagates and ends the watch.
        """
        if not self.directory.is_dir():
            raise WatchError(self.directory, "not a directory")

        observer = self._observer_factory()
        try:
            observer.schedule(_CreatedHandler(self), str(self.directory), recursive=False)
            observer.start()
        except OSError as exc:
            raise WatchError(self.directory, str(exc)) from exc

        logger.info("Monitoring %s for new images", self.directory)
        self.ready.set()
        try:
            while not self._stop.is_set():
                if not observer.is_alive():
                    logger.warning("Watch on %s closed, stopping", self.directory)
                    break
                self.process_pending(timeout=WATCH_POLL_SECONDS)
        finally:
            # release an observer thread blocked on a full queue before joining it
            self._stop.set()
            observer.stop()
            if observer.is_alive():
                observer.join()
            logger.info("Stopped monitoring %s", self.directory)
