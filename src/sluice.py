"""Public SDK surface for Sluice.

This module provides a stable import path for library users.
It re-exports the client, application factory, and typed models.
"""

from __future__ import annotations

from api.app import create_app
from core.config import SluiceConfig
from core.types import (
    IngestAcknowledgment,
    IngestionRun,
    ProgressObservation,
    Record,
    RunStatus,
    WriteMode,
)
from ingest.pipeline import IngestRunController, ingest_file
from ingest.row_normalizer import normalize_row
from store.client_sdk import SluiceClient
from store.mongo_store import MongoRecordStore
from store.record_store import RecordStore

__all__ = [
    "IngestAcknowledgment",
    "IngestRunController",
    "IngestionRun",
    "MongoRecordStore",
    "ProgressObservation",
    "Record",
    "RecordStore",
    "RunStatus",
    "SluiceClient",
    "SluiceConfig",
    "WriteMode",
    "create_app",
    "ingest_file",
    "normalize_row",
]
