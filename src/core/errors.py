"""Sluice exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class SluiceError(Exception):
    """Base exception for all Sluice failures."""


class SluiceConfigError(SluiceError):
    """Raised for invalid runtime configuration."""


class SluiceIngestError(SluiceError):
    """Raised when a source file cannot be opened for ingest."""


class SluiceStoreError(SluiceError):
    """Raised for record store failures."""


class SluiceDuplicateKeyError(SluiceStoreError):
    """Raised when a bulk insert only failed on duplicate keys.

    Attributes:
        duplicate_count: Number of records rejected as duplicates.
    """

    def __init__(self, message: str, duplicate_count: int = 0) -> None:
        super().__init__(message)
        self.duplicate_count = duplicate_count
