"""Streaming source reader for delimited text files.

This module decodes a CSV file into lazily produced raw rows.
It keeps memory bounded by reading one line at a time through a fixed buffer.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import IO, Iterator

from core.constants import DEFAULT_READ_BUFFER_BYTES, SOURCE_ENCODING
from core.errors import SluiceIngestError
from core.types import RawRow


def stream_raw_rows(
    source_path: Path,
    buffer_bytes: int = DEFAULT_READ_BUFFER_BYTES,
) -> Iterator[RawRow]:
    """Open a CSV file and return a single-pass iterator of raw rows.

    The file is opened eagerly so that access failures surface before
    any row is consumed; decoding is deferred until iteration.

    Args:
        source_path: CSV file with a header line.
        buffer_bytes: Buffer size for sequential reads.

    Returns:
        Iterator of header-keyed rows, closed at end of file.

    Raises:
        SluiceIngestError: If the file cannot be opened.
    """
    handle = _open_source(source_path, buffer_bytes)
    return _iterate_rows(handle)


def _open_source(source_path: Path, buffer_bytes: int) -> IO[str]:
    """Open source file for buffered text reads."""
    try:
        return open(
            source_path,
            "r",
            buffering=buffer_bytes,
            encoding=SOURCE_ENCODING,
            errors="replace",
            newline="",
        )
    except OSError as error:
        raise SluiceIngestError(
            f"Failed to open source file at {source_path}: {error.strerror or error}. "
            "Upload the file again to start a new run."
        ) from error


def _iterate_rows(handle: IO[str]) -> Iterator[RawRow]:
    """Yield rows keyed by normalized header names."""
    with handle:
        reader = csv.reader(handle)
        header = _read_header(reader)
        if header is None:
            return
        while True:
            try:
                fields = next(reader)
            except StopIteration:
                return
            except csv.Error:
                continue
            if _is_blank(fields) or len(fields) != len(header):
                continue
            yield dict(zip(header, fields))


def _read_header(reader: Iterator[list[str]]) -> list[str] | None:
    """Return normalized header tokens from the first non-blank line.

    Raises:
        SluiceIngestError: If the header line cannot be decoded.
    """
    try:
        for fields in reader:
            if not _is_blank(fields):
                return [_normalize_header(token) for token in fields]
    except csv.Error as error:
        raise SluiceIngestError(
            f"Failed to decode CSV header: {error}. "
            "Ensure the first line lists comma-separated column names."
        ) from error
    return None


def _normalize_header(token: str) -> str:
    return token.strip().lower()


def _is_blank(fields: list[str]) -> bool:
    return not fields or (len(fields) == 1 and not fields[0].strip())
