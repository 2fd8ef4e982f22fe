"""Shared typed models.

This module defines the data models used by the ingest pipeline,
store adapters, and HTTP layer to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import time
from typing import Mapping

from core.constants import ACCEPTED_MESSAGE, DURABILITY_UNACKNOWLEDGED

RawRow = Mapping[str, str]


@dataclass(frozen=True)
class Record:
    """Normalized record persisted by the bulk writer.

    Attributes:
        id: Best-effort integer id, 0 when absent or non-numeric.
        firstname: First name, empty when absent.
        lastname: Last name, empty when absent.
        email: Primary email, empty when absent.
        email2: Secondary email, empty when absent.
        profession: Profession, empty when absent.
    """

    id: int
    firstname: str = ""
    lastname: str = ""
    email: str = ""
    email2: str = ""
    profession: str = ""


Batch = tuple[Record, ...]


@dataclass(frozen=True)
class WriteMode:
    """Store write options passed explicitly to bulk inserts.

    Attributes:
        durability: ``unacknowledged`` returns without waiting for the store,
            ``acknowledged`` waits for the primary to confirm.
        bypass_validation: Skip per-document schema validation.
    """

    durability: str = DURABILITY_UNACKNOWLEDGED
    bypass_validation: bool = True

    @property
    def acknowledged(self) -> bool:
        """Return whether writes wait for store acknowledgment."""
        return self.durability != DURABILITY_UNACKNOWLEDGED


class RunStatus(str, Enum):
    """Lifecycle status of one ingestion run."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class BatchWriteOutcome(str, Enum):
    """Result of handing one batch to the bulk writer."""

    WRITTEN = "written"
    DUPLICATES_SKIPPED = "duplicates_skipped"
    SKIPPED_AFTER_ERROR = "skipped_after_error"

    @property
    def counts_as_processed(self) -> bool:
        """Return whether the batch contributes to processed totals."""
        return self is not BatchWriteOutcome.SKIPPED_AFTER_ERROR


@dataclass
class IngestionRun:
    """Mutable state for one end-to-end file ingest.

    Owned by exactly one run controller. Never shared across uploads.
    """

    run_id: str
    source_path: Path
    total_records: int = 0
    processed_records: int = 0
    started_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    status: RunStatus = RunStatus.RUNNING
    error: str | None = None

    @property
    def elapsed_seconds(self) -> float:
        """Return seconds since start, frozen once the run finishes."""
        end_at = self.finished_at if self.finished_at is not None else time.monotonic()
        return max(0.0, end_at - self.started_at)

    def finish(self, status: RunStatus, error: str | None = None) -> None:
        """Record the terminal status and end timestamp."""
        self.status = status
        self.error = error
        self.finished_at = time.monotonic()


@dataclass(frozen=True)
class IngestAcknowledgment:
    """Immediate response for an accepted ingest run."""

    run_id: str
    status: str = "processing"
    message: str = ACCEPTED_MESSAGE

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "status": self.status, "run_id": self.run_id}


@dataclass(frozen=True)
class ProgressObservation:
    """Periodic throughput observation.

    Attributes:
        run_id: Run that produced the observation.
        processed_records: Cumulative processed count.
        elapsed_seconds: Seconds since the run started.
        records_per_second: Rounded throughput rate.
    """

    run_id: str
    processed_records: int
    elapsed_seconds: float
    records_per_second: int
