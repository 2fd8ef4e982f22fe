"""Ingest orchestration for uploaded CSV files.

This module drives reader, normalizer, batcher, and bulk writer for one
file, owns the run state, and deletes the source file on every exit path.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator
import uuid

from core.config import SluiceConfig
from core.logging_config import get_logger
from core.types import Batch, IngestionRun, RawRow, RunStatus
from ingest.batcher import Batcher
from ingest.bulk_writer import BulkWriter
from ingest.input_reader import stream_raw_rows
from ingest.progress import IngestProgressTracker, ProgressObserver, records_per_second
from ingest.row_normalizer import normalize_row
from store.record_store import RecordStore

_LOGGER = get_logger(__name__)

RowSource = Callable[[Path, int], Iterator[RawRow]]


class IngestRunController:
    """Run the ingest pipeline for one file at a time per call.

    The controller holds no per-run state; each ``run`` call operates on
    the IngestionRun it is given, so concurrent runs stay independent.
    """

    def __init__(
        self,
        store: RecordStore,
        config: SluiceConfig,
        observer: ProgressObserver | None = None,
        row_source: RowSource = stream_raw_rows,
    ) -> None:
        """Create a run controller.

        Args:
            store: Destination record store.
            config: Runtime configuration.
            observer: Optional callback receiving progress observations.
            row_source: Factory producing raw rows for a source path.
        """
        self._store = store
        self._config = config
        self._observer = observer
        self._row_source = row_source

    async def run(self, ingestion_run: IngestionRun) -> IngestionRun:
        """Ingest one source file to a terminal status.

        Failures are logged and recorded on the run, never raised, since
        the caller was acknowledged before processing started.

        Args:
            ingestion_run: Fresh run state for the source file.

        Returns:
            The same run, in ``completed`` or ``failed`` status.
        """
        _LOGGER.info(
            "ingest_started",
            run_id=ingestion_run.run_id,
            source_path=str(ingestion_run.source_path),
            batch_size=self._config.batch_size,
        )
        try:
            try:
                await self._drive(ingestion_run)
            finally:
                _release_source(ingestion_run)
        except Exception as error:
            ingestion_run.finish(RunStatus.FAILED, str(error))
            _log_ingest_failure(ingestion_run, error)
        else:
            ingestion_run.finish(RunStatus.COMPLETED)
            _log_ingest_completion(ingestion_run)
        return ingestion_run

    async def _drive(self, ingestion_run: IngestionRun) -> None:
        writer = BulkWriter(
            self._store,
            self._config.write_mode,
            abort_on_error=self._config.abort_on_write_error,
            run_id=ingestion_run.run_id,
        )
        tracker = IngestProgressTracker(
            run=ingestion_run,
            log_interval=self._config.progress_interval,
            observer=self._observer,
        )

        async def write_batch(batch: Batch) -> None:
            outcome = await writer.write(batch)
            if outcome.counts_as_processed:
                tracker.record_batch(len(batch))

        batcher = Batcher(self._config.batch_size, write_batch)
        rows = self._row_source(ingestion_run.source_path, self._config.read_buffer_bytes)
        try:
            for raw_row in rows:
                ingestion_run.total_records += 1
                await batcher.append(normalize_row(raw_row))
            await batcher.flush()
        finally:
            _close_rows(rows)


async def ingest_file(
    source_path: Path,
    store: RecordStore,
    config: SluiceConfig,
    observer: ProgressObserver | None = None,
) -> IngestionRun:
    """Ingest a file in the foreground and return its finished run.

    The source file is deleted when the run ends.

    Args:
        source_path: CSV file to ingest.
        store: Destination record store.
        config: Runtime configuration.
        observer: Optional progress callback.

    Returns:
        Finished run state.
    """
    controller = IngestRunController(store, config, observer=observer)
    return await controller.run(new_ingestion_run(source_path))


def new_ingestion_run(source_path: Path) -> IngestionRun:
    """Create run state with a fresh run id."""
    return IngestionRun(run_id=uuid.uuid4().hex, source_path=source_path)


def _close_rows(rows: Iterator[RawRow]) -> None:
    """Close generator-backed row sources so file handles are released."""
    close = getattr(rows, "close", None)
    if callable(close):
        close()


def _release_source(ingestion_run: IngestionRun) -> None:
    """Delete the run's source file."""
    ingestion_run.source_path.unlink(missing_ok=True)
    _LOGGER.info(
        "source_released",
        run_id=ingestion_run.run_id,
        source_path=str(ingestion_run.source_path),
    )


def _log_ingest_completion(ingestion_run: IngestionRun) -> None:
    """Log run completion with throughput metadata."""
    elapsed_seconds = ingestion_run.elapsed_seconds
    _LOGGER.info(
        "ingest_completed",
        run_id=ingestion_run.run_id,
        total_records=ingestion_run.total_records,
        processed_records=ingestion_run.processed_records,
        elapsed_seconds=round(elapsed_seconds, 3),
        records_per_second=records_per_second(ingestion_run.processed_records, elapsed_seconds),
    )


def _log_ingest_failure(ingestion_run: IngestionRun, error: Exception) -> None:
    _LOGGER.error(
        "ingest_failed",
        run_id=ingestion_run.run_id,
        error=str(error),
        error_type=type(error).__name__,
        total_records=ingestion_run.total_records,
        processed_records=ingestion_run.processed_records,
        elapsed_seconds=round(ingestion_run.elapsed_seconds, 3),
    )
