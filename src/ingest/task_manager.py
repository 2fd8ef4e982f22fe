"""Background scheduling for ingest runs.

This module accepts source files, acknowledges them immediately,
and executes each run on its own asyncio task.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from core.logging_config import get_logger
from core.types import IngestAcknowledgment, IngestionRun
from ingest.pipeline import IngestRunController, new_ingestion_run

_LOGGER = get_logger(__name__)


class IngestTaskManager:
    """Spawn and track in-flight ingest runs."""

    def __init__(self, controller: IngestRunController) -> None:
        self._controller = controller
        self._tasks: set[asyncio.Task[IngestionRun]] = set()

    @property
    def active_runs(self) -> int:
        """Return number of runs still executing."""
        return len(self._tasks)

    def submit(self, source_path: Path) -> IngestAcknowledgment:
        """Schedule a run for ``source_path`` and acknowledge it.

        Must be called from inside a running event loop. Ownership of the
        file passes to the run, which deletes it when finished.

        Args:
            source_path: Staged CSV file.

        Returns:
            Acknowledgment sent back before any row is processed.
        """
        ingestion_run = new_ingestion_run(source_path)
        task = asyncio.get_running_loop().create_task(
            self._controller.run(ingestion_run),
            name=f"ingest-{ingestion_run.run_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        _LOGGER.info(
            "ingest_accepted",
            run_id=ingestion_run.run_id,
            source_path=str(source_path),
            active_runs=len(self._tasks),
        )
        return IngestAcknowledgment(run_id=ingestion_run.run_id)

    async def wait_idle(self) -> None:
        """Wait until every submitted run has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
