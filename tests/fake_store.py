"""In-memory record store double for tests."""

from __future__ import annotations

from typing import Sequence

from core.errors import SluiceDuplicateKeyError, SluiceStoreError
from core.types import Record, WriteMode


class RecordingStore:
    """Record every insert call and optionally fail selected calls.

    Args:
        failures: Map of one-based insert call number to the error raised.
    """

    def __init__(self, failures: dict[int, SluiceStoreError] | None = None) -> None:
        self.calls: list[tuple[Record, ...]] = []
        self.write_modes: list[WriteMode] = []
        self.records: list[Record] = []
        self.indexes_ensured = False
        self.closed = False
        self._failures = failures or {}

    async def insert_unordered(self, records: Sequence[Record], write_mode: WriteMode) -> None:
        self.calls.append(tuple(records))
        self.write_modes.append(write_mode)
        failure = self._failures.get(len(self.calls))
        if failure is None:
            self.records.extend(records)
            return
        if isinstance(failure, SluiceDuplicateKeyError):
            self.records.extend(records[failure.duplicate_count :])
        raise failure

    async def sample_records(self, limit: int) -> list[Record]:
        return self.records[:limit]

    async def ensure_indexes(self) -> None:
        self.indexes_ensured = True

    async def close(self) -> None:
        self.closed = True
