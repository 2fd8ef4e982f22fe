"""Unit tests for source file staging."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from core.errors import SluiceIngestError
from ingest.staging import stage_local_copy, stage_upload


class _AsyncBytes:
    def __init__(self, payload: bytes) -> None:
        self._buffer = io.BytesIO(payload)

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


def test_stage_local_copy_keeps_original(tmp_path: Path) -> None:
    """Staging should copy the source and leave it in place."""
    source_path = tmp_path / "people.csv"
    source_path.write_text("id\n1\n", encoding="utf-8")

    staged_path = stage_local_copy(source_path, tmp_path / "uploads")

    assert source_path.exists() and staged_path.read_text(encoding="utf-8") == "id\n1\n"


def test_stage_local_copy_raises_for_missing_source(tmp_path: Path) -> None:
    """Staging a missing file should raise and leave no partial copy."""
    upload_dir = tmp_path / "uploads"

    with pytest.raises(SluiceIngestError):
        stage_local_copy(tmp_path / "missing.csv", upload_dir)

    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_stage_upload_streams_in_chunks(tmp_path: Path) -> None:
    """Upload staging should reassemble the full body from chunks."""
    payload = b"id,firstname\n" + b"1,Ada\n" * 100

    staged_path = await stage_upload(_AsyncBytes(payload), tmp_path / "uploads", chunk_bytes=7)

    assert staged_path.read_bytes() == payload


class _DisconnectingUpload:
    def __init__(self) -> None:
        self._reads = 0

    async def read(self, size: int = -1) -> bytes:
        self._reads += 1
        if self._reads > 1:
            raise RuntimeError("client disconnected")
        return b"id,firstname\n"


@pytest.mark.asyncio
async def test_stage_upload_removes_partial_file_on_read_failure(tmp_path: Path) -> None:
    """A body that fails mid-stream should leave no staged file behind."""
    upload_dir = tmp_path / "uploads"

    with pytest.raises(RuntimeError):
        await stage_upload(_DisconnectingUpload(), upload_dir, chunk_bytes=4)

    assert list(upload_dir.iterdir()) == []
