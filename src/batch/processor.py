# src/batch/processor.py — v2
"""Batch processor — sequential, paced, failure-isolated metadata generation.

Drives image preparation and classification for an ordered list of files,
one file at a time, and publishes progress and per-file results to
subscribers.

State machine:
    Idle --process()--> Running --all files done--> Idle
    Running --run-level exception--> Idle (counters reset, exception re-raised)
    any --reset()--> Idle (counters zeroed)

A failing file never aborts the run. ``reset()`` does not interrupt the file
currently being processed: its result is discarded when it completes and the
run stops there. A run superseded during the pause between files stops
before starting the next one.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
import uuid
from typing import Callable, Iterable, Protocol

from mediatagger.batch.models import (
    BatchProcessingStatus,
    ProcessingResult,
    ProcessingSettings,
)
from mediatagger.classification.parser import parse_metadata_response
from mediatagger.core.errors import ClassificationError, PreparationError
from mediatagger.logging.context import (
    clear_context,
    set_file_context,
    set_run_context,
    set_stage,
)
from mediatagger.preparation.base_preparer import PreparedImage

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAYLOAD_BYTES = 10 * 1024 * 1024

ProgressCallback = Callable[[BatchProcessingStatus], None]
FileCompleteCallback = Callable[[ProcessingResult], None]
Unsubscribe = Callable[[], None]


class ImagePreparationService(Protocol):
    async def prepare(self, file_path: str) -> PreparedImage: ...


class ClassifierClient(Protocol):
    async def classify(self, image: PreparedImage, settings: ProcessingSettings) -> str: ...


def describe_failure(error: BaseException) -> str:
    """Human-readable, stage-labelled message for a per-file failure."""
    message = str(error) or "Unknown error"
    if isinstance(error, PreparationError):
        return f"Image preparation failed: {message}"
    if isinstance(error, ClassificationError):
        return f"Classification failed: {message}"
    if isinstance(error, (ConnectionError, TimeoutError)):
        return f"Network error: {message}"
    return message


class BatchProcessor:
    """Processes media files one at a time and reports progress.

    Construct once at application start and share by reference. The status
    is owned by the processor: observers receive copies, never the live
    object.
    """

    def __init__(
        self,
        preparer: ImagePreparationService,
        classifier: ClassifierClient,
        max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
    ) -> None:
        self._preparer = preparer
        self._classifier = classifier
        self._max_payload_bytes = max_payload_bytes

        self._status = BatchProcessingStatus()
        # Bumped by every run start and reset; a run whose generation is
        # no longer current stops touching the status.
        self._generation = 0
        self._lock = threading.RLock()

        self._tokens = itertools.count()
        self._progress_subscribers: dict[int, ProgressCallback] = {}
        self._file_subscribers: dict[int, FileCompleteCallback] = {}

    # --- Status ---

    def get_status(self) -> BatchProcessingStatus:
        """Return a copy of the current status."""
        with self._lock:
            return self._status.model_copy()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._status.in_progress

    def update_status(self, status: BatchProcessingStatus) -> None:
        """Overwrite the status and notify subscribers.

        Escape hatch for callers seeding the displayed state (e.g. before a
        run starts). It bypasses the state machine: no run is started or
        stopped by this call.
        """
        with self._lock:
            self._status = status.model_copy()
            snapshot = self._status.model_copy()
        self._emit_progress(snapshot)

    def reset(self) -> None:
        """Force the idle zero status and notify subscribers. Idempotent."""
        with self._lock:
            snapshot = self._reset_locked()
        logger.info("Batch processor reset")
        self._emit_progress(snapshot)

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _reset_locked(self) -> BatchProcessingStatus:
        self._generation += 1
        self._status = BatchProcessingStatus()
        return self._status.model_copy()

    # --- Subscriptions ---

    def subscribe(self, callback: ProgressCallback) -> Unsubscribe:
        """Receive a status copy on every status change."""
        return self._add_subscriber(self._progress_subscribers, callback)

    def subscribe_to_file_complete(self, callback: FileCompleteCallback) -> Unsubscribe:
        """Receive each file's result, successful or not."""
        return self._add_subscriber(self._file_subscribers, callback)

    def _add_subscriber(self, registry: dict, callback: Callable) -> Unsubscribe:
        with self._lock:
            token = next(self._tokens)
            registry[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                registry.pop(token, None)

        return unsubscribe

    def _emit_progress(
        self,
        snapshot: BatchProcessingStatus,
        callback: ProgressCallback | None = None,
    ) -> None:
        if callback is not None:
            callback(snapshot.model_copy())
        with self._lock:
            subscribers = list(self._progress_subscribers.values())
        for subscriber in subscribers:
            try:
                subscriber(snapshot.model_copy())
            except Exception:
                logger.exception("Progress subscriber %r failed", subscriber)

    def _emit_file_complete(
        self,
        result: ProcessingResult,
        callback: FileCompleteCallback | None = None,
    ) -> None:
        if callback is not None:
            callback(result)
        with self._lock:
            subscribers = list(self._file_subscribers.values())
        for subscriber in subscribers:
            try:
                subscriber(result)
            except Exception:
                logger.exception("File-complete subscriber %r failed", subscriber)

    # --- Run ---

    async def process(
        self,
        files: Iterable[str],
        settings: ProcessingSettings,
        on_progress: ProgressCallback | None = None,
        on_file_complete: FileCompleteCallback | None = None,
    ) -> list[ProcessingResult]:
        """Process ``files`` in order and return one result per file.

        Per-file failures are returned as failed results. Exceptions raised
        outside the per-file pipeline (including by ``on_progress`` or
        ``on_file_complete``) reset the processor and propagate.
        """
        paths = [str(f) for f in files]

        with self._lock:
            stale = None
            if self._status.in_progress:
                stale = self._reset_locked()
            self._generation += 1
            generation = self._generation
            self._status = BatchProcessingStatus(total=len(paths), in_progress=True)
            snapshot = self._status.model_copy()

        if stale is not None:
            logger.warning("Previous run still marked in progress; reset before starting")
            self._emit_progress(stale)

        run_id = uuid.uuid4().hex[:8]
        set_run_context(run_id)
        logger.info(
            "Starting batch run %s: %d file(s), provider=%s, model=%s, interval=%.1fs",
            run_id, len(paths), settings.provider, settings.model, settings.request_interval,
        )

        results: list[ProcessingResult] = []
        try:
            self._emit_progress(snapshot, on_progress)

            for index, file_path in enumerate(paths):
                if not self._is_current(generation):
                    logger.warning(
                        "Run %s was superseded; not starting %s", run_id, file_path,
                    )
                    return results
                set_file_context(file_path)
                logger.info("Processing file %d/%d: %s", index + 1, len(paths), file_path)

                result = await self._process_file(file_path, settings)

                with self._lock:
                    if generation != self._generation:
                        logger.warning(
                            "Run %s was reset; discarding result for %s", run_id, file_path,
                        )
                        return results
                    if result.success:
                        self._status.completed += 1
                    else:
                        self._status.failed += 1
                    snapshot = self._status.model_copy()

                results.append(result)
                self._emit_file_complete(result, on_file_complete)
                self._emit_progress(snapshot, on_progress)

                if settings.request_interval > 0 and index < len(paths) - 1:
                    logger.debug("Waiting %.1fs before next file", settings.request_interval)
                    await asyncio.sleep(settings.request_interval)

            with self._lock:
                if generation != self._generation:
                    return results
                self._status.in_progress = False
                snapshot = self._status.model_copy()
            self._emit_progress(snapshot, on_progress)

        except Exception:
            logger.exception("Batch run %s aborted", run_id)
            if self._is_current(generation):
                self.reset()
            raise
        finally:
            clear_context()

        logger.info(
            "Batch run %s completed: %d succeeded, %d failed",
            run_id, snapshot.completed, snapshot.failed,
        )
        return results

    async def _process_file(
        self, file_path: str, settings: ProcessingSettings,
    ) -> ProcessingResult:
        """Prepare, classify and parse one file. Never raises."""
        try:
            set_stage("prepare")
            image = await self._preparer.prepare(file_path)
            if image is None or not image.data:
                raise PreparationError(file_path, "Image preparation returned no data")
            if image.size_bytes > self._max_payload_bytes:
                raise PreparationError(
                    file_path,
                    f"Resized image is still too large ({image.size_mb:.2f}MB). "
                    "Please try a smaller image.",
                )

            set_stage("classify")
            text = await self._classifier.classify(image, settings)
            if not text or not text.strip():
                raise ClassificationError("No response from classifier")

            set_stage("parse")
            metadata = parse_metadata_response(text)
            if not metadata.is_complete:
                logger.info(
                    "Incomplete metadata for %s (missing: %s)",
                    file_path, ", ".join(metadata.missing_fields),
                )
            return ProcessingResult.succeeded(file_path, metadata)

        except Exception as e:
            message = describe_failure(e)
            logger.warning("Failed to process %s: %s", file_path, message)
            return ProcessingResult.failed(file_path, message)
        finally:
            set_stage(None)
