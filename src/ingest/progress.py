"""Structured ingest progress reporting.

This module counts processed records for one run and emits a throughput
event each time the running total crosses a configured interval.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from core.logging_config import get_logger
from core.types import IngestionRun, ProgressObservation

_LOGGER = get_logger(__name__)

ProgressObserver = Callable[[ProgressObservation], None]


@dataclass
class IngestProgressTracker:
    """Track processed counts and emit periodic progress observations.

    ``processed_records`` counts attempted records, including ones the
    store skipped as duplicates.
    """

    run: IngestionRun
    log_interval: int
    observer: ProgressObserver | None = None

    def record_batch(self, batch_size: int) -> ProgressObservation | None:
        """Count one written batch and emit progress on interval crossings.

        Args:
            batch_size: Number of records in the batch.

        Returns:
            Emitted observation, or None when no interval was crossed.
        """
        previous_total = self.run.processed_records
        self.run.processed_records = previous_total + batch_size
        if not _crossed_interval(previous_total, self.run.processed_records, self.log_interval):
            return None
        observation = self._build_observation()
        _LOGGER.info(
            "ingest_progress",
            run_id=observation.run_id,
            processed_records=observation.processed_records,
            elapsed_seconds=round(observation.elapsed_seconds, 3),
            records_per_second=observation.records_per_second,
        )
        if self.observer is not None:
            self.observer(observation)
        return observation

    def _build_observation(self) -> ProgressObservation:
        elapsed_seconds = self.run.elapsed_seconds
        return ProgressObservation(
            run_id=self.run.run_id,
            processed_records=self.run.processed_records,
            elapsed_seconds=elapsed_seconds,
            records_per_second=records_per_second(self.run.processed_records, elapsed_seconds),
        )


def records_per_second(record_count: int, elapsed_seconds: float) -> int:
    """Compute a rounded throughput rate, 0 when no time has elapsed."""
    if elapsed_seconds <= 0:
        return 0
    return round(record_count / elapsed_seconds)


def _crossed_interval(previous_total: int, current_total: int, interval: int) -> bool:
    """Return true when a multiple of ``interval`` lies in (previous, current]."""
    return current_total // interval > previous_total // interval
