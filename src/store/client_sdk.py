"""Python SDK for ingest and record listing.

This module exposes high-level async APIs backed by a record store,
shared by the CLI and embedding applications.
"""

from __future__ import annotations

from pathlib import Path

from core.config import SluiceConfig
from core.types import IngestionRun, Record
from ingest.pipeline import ingest_file
from ingest.progress import ProgressObserver
from ingest.staging import stage_local_copy
from store.mongo_store import MongoRecordStore
from store.record_store import RecordStore


class SluiceClient:
    """Primary SDK entry point for foreground ingest workflows."""

    def __init__(self, config: SluiceConfig | None = None, store: RecordStore | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            store: Optional record store, MongoDB when omitted.
        """
        self._config = config or SluiceConfig.from_env()
        self._store = store or MongoRecordStore(self._config)
        self._indexes_ready = False

    @property
    def config(self) -> SluiceConfig:
        return self._config

    async def ingest(
        self,
        source_path: str | Path,
        observer: ProgressObserver | None = None,
    ) -> IngestionRun:
        """Ingest a local CSV file and wait for the run to finish.

        The file is staged into a private copy first, so the caller's
        file survives the run's cleanup.

        Args:
            source_path: Local CSV file path.
            observer: Optional progress callback.

        Returns:
            Finished run state.

        Raises:
            SluiceIngestError: If the file cannot be staged.
            SluiceStoreError: If the unique id index cannot be created.
        """
        await self._ensure_indexes_once()
        staged_path = stage_local_copy(Path(source_path).expanduser(), self._config.upload_dir)
        return await ingest_file(staged_path, self._store, self._config, observer=observer)

    async def sample_records(self, limit: int | None = None) -> list[Record]:
        """Return a bounded sample of stored records.

        Args:
            limit: Maximum records, config default when omitted.

        Returns:
            Stored records in no particular order.
        """
        return await self._store.sample_records(limit or self._config.list_limit)

    async def ensure_indexes(self) -> None:
        """Create store indexes required for duplicate detection."""
        await self._store.ensure_indexes()
        self._indexes_ready = True

    async def _ensure_indexes_once(self) -> None:
        if not self._indexes_ready:
            await self.ensure_indexes()

    async def close(self) -> None:
        await self._store.close()
