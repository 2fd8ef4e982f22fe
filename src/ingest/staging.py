"""Source file staging.

This module copies incoming CSV data into a private temp file that an
ingest run can own and delete independently of the original source.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import tempfile
from typing import Protocol

from core.constants import UPLOAD_FILE_SUFFIX
from core.errors import SluiceIngestError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class AsyncReadable(Protocol):
    """Async byte stream, such as a Starlette ``UploadFile``."""

    async def read(self, size: int = -1) -> bytes:
        ...


async def stage_upload(upload: AsyncReadable, upload_dir: Path, chunk_bytes: int) -> Path:
    """Stream an uploaded body into a new temp file.

    Args:
        upload: Async byte stream of the uploaded file.
        upload_dir: Directory receiving staged files.
        chunk_bytes: Bytes read per chunk.

    Returns:
        Path of the staged file.

    Raises:
        SluiceIngestError: If the staged file cannot be written.
    """
    staged_path = _create_staged_path(upload_dir)
    staged = False
    try:
        with open(staged_path, "wb") as handle:
            while True:
                chunk = await upload.read(chunk_bytes)
                if not chunk:
                    break
                handle.write(chunk)
        staged = True
    except OSError as error:
        raise SluiceIngestError(
            f"Failed to stage upload at {staged_path}: {error}. "
            "Check free space and permissions of SLUICE_UPLOAD_DIR."
        ) from error
    finally:
        # Partial files never outlive a failed or cancelled upload.
        if not staged:
            staged_path.unlink(missing_ok=True)
    _log_staged(staged_path)
    return staged_path


def stage_local_copy(source_path: Path, upload_dir: Path) -> Path:
    """Copy a local file into the staging directory.

    The original file is left untouched; the run deletes only the copy.

    Raises:
        SluiceIngestError: If the source cannot be copied.
    """
    staged_path = _create_staged_path(upload_dir)
    try:
        shutil.copyfile(source_path, staged_path)
    except OSError as error:
        staged_path.unlink(missing_ok=True)
        raise SluiceIngestError(
            f"Failed to stage {source_path}: {error.strerror or error}. "
            "Provide an existing readable CSV file."
        ) from error
    _log_staged(staged_path)
    return staged_path


def _create_staged_path(upload_dir: Path) -> Path:
    """Reserve a unique staged file path."""
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        descriptor, raw_path = tempfile.mkstemp(suffix=UPLOAD_FILE_SUFFIX, dir=upload_dir)
    except OSError as error:
        raise SluiceIngestError(
            f"Failed to create staging file in {upload_dir}: {error}. "
            "Set SLUICE_UPLOAD_DIR to a writable directory."
        ) from error
    os.close(descriptor)
    return Path(raw_path)


def _log_staged(staged_path: Path) -> None:
    _LOGGER.info(
        "upload_staged",
        staged_path=str(staged_path),
        size_bytes=staged_path.stat().st_size,
    )
