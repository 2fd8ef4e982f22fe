"""Record store collaborator interface.

This module defines the protocol the ingest pipeline and HTTP layer
depend on, so store backends can be swapped without touching them.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from core.types import Record, WriteMode


class RecordStore(Protocol):
    """Bulk-insert and sampling surface of a persistent record store."""

    async def insert_unordered(self, records: Sequence[Record], write_mode: WriteMode) -> None:
        """Insert records without aborting on individual conflicts.

        Raises:
            SluiceDuplicateKeyError: If only duplicate-key conflicts occurred.
            SluiceStoreError: For any other store failure.
        """
        ...

    async def sample_records(self, limit: int) -> list[Record]:
        """Return up to ``limit`` stored records in no particular order."""
        ...

    async def ensure_indexes(self) -> None:
        """Create indexes the store relies on for duplicate detection."""
        ...

    async def close(self) -> None:
        """Release store connections."""
        ...
