"""Fixed-capacity record batching.

This module groups normalized records into bounded batches and hands
each full batch to an async sink before accepting more records.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from core.errors import SluiceConfigError
from core.types import Batch, Record

BatchSink = Callable[[Batch], Awaitable[object]]


class Batcher:
    """Accumulate records and flush them in arrival order.

    The sink is awaited inline, so the caller is suspended until each
    write completes or fails. Sink calls never overlap.
    """

    def __init__(self, capacity: int, sink: BatchSink) -> None:
        """Create a batcher.

        Args:
            capacity: Maximum records per batch.
            sink: Async callable receiving each full or final batch.

        Raises:
            SluiceConfigError: If capacity is below one.
        """
        if capacity < 1:
            raise SluiceConfigError(
                f"Invalid batch capacity {capacity}: expected >= 1. "
                "Set SLUICE_BATCH_SIZE to a positive number."
            )
        self._capacity = capacity
        self._sink = sink
        self._current: list[Record] = []
        self._flushed_batches = 0

    @property
    def pending_count(self) -> int:
        """Return records buffered in the current batch."""
        return len(self._current)

    @property
    def flushed_batches(self) -> int:
        """Return number of batches handed to the sink."""
        return self._flushed_batches

    async def append(self, record: Record) -> None:
        """Add one record, flushing when the batch reaches capacity."""
        self._current.append(record)
        if len(self._current) >= self._capacity:
            await self._hand_off()

    async def flush(self) -> None:
        """Hand the final partial batch to the sink when non-empty."""
        if self._current:
            await self._hand_off()

    async def _hand_off(self) -> None:
        batch: Batch = tuple(self._current)
        self._current = []
        self._flushed_batches += 1
        await self._sink(batch)
