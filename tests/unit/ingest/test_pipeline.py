"""Unit tests for the ingest run controller."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

import ingest.pipeline as pipeline_module
from core.config import SluiceConfig
from core.errors import SluiceDuplicateKeyError, SluiceStoreError
from core.types import IngestionRun, ProgressObservation, RawRow, RunStatus
from ingest.input_reader import stream_raw_rows
from ingest.pipeline import IngestRunController, ingest_file, new_ingestion_run
from tests.csv_files import write_people_csv
from tests.fake_store import RecordingStore
from tests.fixture_paths import staged_fixture


class _CountingRowSource:
    """Row source that records how many rows the pipeline consumed."""

    def __init__(self) -> None:
        self.rows_read = 0

    def __call__(self, source_path: Path, buffer_bytes: int) -> Iterator[RawRow]:
        rows = stream_raw_rows(source_path, buffer_bytes)
        return self._count(rows)

    def _count(self, rows: Iterator[RawRow]) -> Iterator[RawRow]:
        for row in rows:
            self.rows_read += 1
            yield row


def _config(tmp_path: Path, **overrides: object) -> SluiceConfig:
    return SluiceConfig(upload_dir=tmp_path / "uploads", **overrides)


async def _run(
    controller: IngestRunController,
    source_path: Path,
) -> IngestionRun:
    return await controller.run(new_ingestion_run(source_path))


@pytest.mark.asyncio
async def test_run_writes_full_batches_in_input_order(tmp_path: Path) -> None:
    """Thirty rows at threshold ten should produce three ordered writes."""
    source_path = write_people_csv(tmp_path / "people.csv", 30)
    store = RecordingStore()
    controller = IngestRunController(store, _config(tmp_path, batch_size=10))

    ingestion_run = await _run(controller, source_path)

    assert [[record.id for record in call] for call in store.calls] == [
        list(range(1, 11)),
        list(range(11, 21)),
        list(range(21, 31)),
    ]
    assert ingestion_run.status is RunStatus.COMPLETED


@pytest.mark.asyncio
async def test_run_counts_every_well_formed_row(tmp_path: Path) -> None:
    """Records seen by the writer should equal the data row count."""
    source_path = write_people_csv(tmp_path / "people.csv", 47)
    store = RecordingStore()
    controller = IngestRunController(store, _config(tmp_path, batch_size=10))

    ingestion_run = await _run(controller, source_path)

    assert len(store.records) == 47 == ingestion_run.total_records == ingestion_run.processed_records


@pytest.mark.asyncio
async def test_run_defaults_missing_id_column_to_zero(tmp_path: Path) -> None:
    """Rows from a file without an id column should get id 0."""
    source_path = staged_fixture("people_without_id.csv", tmp_path)
    store = RecordingStore()

    await _run(IngestRunController(store, _config(tmp_path)), source_path)

    assert [(record.id, record.firstname) for record in store.records] == [
        (0, "Karen"),
        (0, "Donald"),
    ]


@pytest.mark.asyncio
async def test_run_continues_after_duplicate_key_conflict(tmp_path: Path) -> None:
    """A duplicate-key conflict on batch two should not stop batch three."""
    source_path = write_people_csv(tmp_path / "people.csv", 30)
    store = RecordingStore(failures={2: SluiceDuplicateKeyError("dup", duplicate_count=1)})
    controller = IngestRunController(store, _config(tmp_path, batch_size=10))

    ingestion_run = await _run(controller, source_path)

    assert len(store.calls) == 3
    assert ingestion_run.status is RunStatus.COMPLETED
    assert ingestion_run.processed_records == 30


@pytest.mark.asyncio
async def test_run_aborts_after_critical_store_error(tmp_path: Path) -> None:
    """A critical error on batch two should stop reading and writing."""
    source_path = write_people_csv(tmp_path / "people.csv", 30)
    store = RecordingStore(failures={2: SluiceStoreError("connection lost")})
    row_source = _CountingRowSource()
    controller = IngestRunController(
        store, _config(tmp_path, batch_size=10), row_source=row_source
    )

    ingestion_run = await _run(controller, source_path)

    assert len(store.calls) == 2
    assert row_source.rows_read == 20
    assert ingestion_run.status is RunStatus.FAILED
    assert ingestion_run.processed_records == 10
    assert source_path.exists() is False


@pytest.mark.asyncio
async def test_run_skips_failed_batch_when_abort_disabled(tmp_path: Path) -> None:
    """With aborting disabled, later batches should still be attempted."""
    source_path = write_people_csv(tmp_path / "people.csv", 30)
    store = RecordingStore(failures={2: SluiceStoreError("connection lost")})
    config = _config(tmp_path, batch_size=10, abort_on_write_error=False)

    ingestion_run = await _run(IngestRunController(store, config), source_path)

    assert len(store.calls) == 3
    assert ingestion_run.status is RunStatus.COMPLETED
    assert ingestion_run.processed_records == 20


@pytest.mark.asyncio
async def test_run_handles_header_only_file(tmp_path: Path) -> None:
    """A file without data rows should complete without writes."""
    source_path = staged_fixture("header_only.csv", tmp_path)
    store = RecordingStore()

    ingestion_run = await _run(IngestRunController(store, _config(tmp_path)), source_path)

    assert store.calls == []
    assert ingestion_run.status is RunStatus.COMPLETED
    assert ingestion_run.processed_records == 0
    assert source_path.exists() is False


@pytest.mark.asyncio
async def test_run_deletes_source_exactly_once(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Source cleanup should happen once on the success path."""
    source_path = write_people_csv(tmp_path / "people.csv", 5)
    released: list[str] = []
    original_release = pipeline_module._release_source

    def counting_release(ingestion_run: IngestionRun) -> None:
        released.append(ingestion_run.run_id)
        original_release(ingestion_run)

    monkeypatch.setattr(pipeline_module, "_release_source", counting_release)

    await _run(IngestRunController(RecordingStore(), _config(tmp_path)), source_path)

    assert len(released) == 1 and source_path.exists() is False


@pytest.mark.asyncio
async def test_run_fails_without_writes_for_missing_file(tmp_path: Path) -> None:
    """An unreadable source should fail before any batch is attempted."""
    store = RecordingStore()

    ingestion_run = await _run(
        IngestRunController(store, _config(tmp_path)), tmp_path / "missing.csv"
    )

    assert ingestion_run.status is RunStatus.FAILED and store.calls == []


@pytest.mark.asyncio
async def test_run_emits_progress_on_each_interval(tmp_path: Path) -> None:
    """Progress observations should follow interval crossings."""
    source_path = write_people_csv(tmp_path / "people.csv", 30)
    observed: list[ProgressObservation] = []
    config = _config(tmp_path, batch_size=10, progress_interval=20)

    await _run(
        IngestRunController(RecordingStore(), config, observer=observed.append),
        source_path,
    )

    assert [item.processed_records for item in observed] == [20]


@pytest.mark.asyncio
async def test_ingest_file_returns_finished_run(tmp_path: Path) -> None:
    """Foreground ingest should return the completed run state."""
    source_path = staged_fixture("people_messy.csv", tmp_path)
    store = RecordingStore()

    ingestion_run = await ingest_file(source_path, store, _config(tmp_path))

    assert ingestion_run.total_records == 4
    assert [record.id for record in store.records] == [1, 0, 0, 4]
