"""Core constants used across Sluice modules.

This module centralizes defaults and canonical field names.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

DEFAULT_MONGO_URI = "mongodb://localhost:27017"
DEFAULT_DATABASE_NAME = "sluice"
DEFAULT_COLLECTION_NAME = "records"
DEFAULT_BATCH_SIZE = 15000
DEFAULT_READ_BUFFER_BYTES = 64 * 1024
DEFAULT_PROGRESS_INTERVAL = 100_000
DEFAULT_LIST_LIMIT = 10
MAX_LIST_LIMIT = 1000
DEFAULT_UPLOAD_DIR = Path(tempfile.gettempdir()) / "sluice-uploads"
UPLOAD_FILE_SUFFIX = ".csv"
SOURCE_ENCODING = "utf-8-sig"

DURABILITY_UNACKNOWLEDGED = "unacknowledged"
DURABILITY_ACKNOWLEDGED = "acknowledged"
SUPPORTED_DURABILITY_MODES = (DURABILITY_UNACKNOWLEDGED, DURABILITY_ACKNOWLEDGED)

DUPLICATE_KEY_ERROR_CODE = 11000

RECORD_ID_FIELD = "id"
RECORD_TEXT_FIELDS = ("firstname", "lastname", "email", "email2", "profession")

ACCEPTED_MESSAGE = "File upload started. Processing in background..."
NO_FILE_MESSAGE = "No file uploaded"
