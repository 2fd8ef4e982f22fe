"""Best-effort bulk batch writer.

This module sends batches to the record store with unordered inserts,
tolerating duplicate-key conflicts and propagating critical failures.
"""

from __future__ import annotations

from core.errors import SluiceDuplicateKeyError, SluiceStoreError
from core.logging_config import get_logger
from core.types import Batch, BatchWriteOutcome, WriteMode
from store.record_store import RecordStore

_LOGGER = get_logger(__name__)


class BulkWriter:
    """Write batches to a record store under one write mode."""

    def __init__(
        self,
        store: RecordStore,
        write_mode: WriteMode,
        abort_on_error: bool = True,
        run_id: str | None = None,
    ) -> None:
        """Create a bulk writer.

        Args:
            store: Destination record store.
            write_mode: Durability and validation options for every insert.
            abort_on_error: Re-raise critical errors instead of skipping the batch.
            run_id: Optional run identifier for log correlation.
        """
        self._store = store
        self._write_mode = write_mode
        self._abort_on_error = abort_on_error
        self._run_id = run_id

    async def write(self, batch: Batch) -> BatchWriteOutcome:
        """Insert one batch.

        Args:
            batch: Records to insert.

        Returns:
            Outcome describing how the batch was handled.

        Raises:
            SluiceStoreError: On a non-duplicate failure when aborting on error.
        """
        try:
            await self._store.insert_unordered(batch, self._write_mode)
        except SluiceDuplicateKeyError as error:
            _LOGGER.warning(
                "batch_duplicate_keys_skipped",
                run_id=self._run_id,
                batch_size=len(batch),
                duplicate_count=error.duplicate_count,
            )
            return BatchWriteOutcome.DUPLICATES_SKIPPED
        except SluiceStoreError as error:
            _LOGGER.error(
                "batch_insert_failed",
                run_id=self._run_id,
                batch_size=len(batch),
                error=str(error),
            )
            if self._abort_on_error:
                raise
            _LOGGER.warning(
                "batch_skipped_after_error",
                run_id=self._run_id,
                batch_size=len(batch),
            )
            return BatchWriteOutcome.SKIPPED_AFTER_ERROR
        return BatchWriteOutcome.WRITTEN
