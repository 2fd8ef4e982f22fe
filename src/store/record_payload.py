"""Shared document serialization for Record payloads.

This module centralizes Record <-> store document mapping.
It is reused by the Mongo store and the HTTP listing endpoint.
"""

from __future__ import annotations

from dataclasses import asdict
import math
from typing import Any, Mapping

from core.constants import RECORD_ID_FIELD, RECORD_TEXT_FIELDS
from core.types import Record


def record_to_document(record: Record) -> dict[str, Any]:
    """Serialize Record into a store document.

    Args:
        record: Record instance.

    Returns:
        Dictionary keyed by record field names.
    """
    return asdict(record)


def record_from_document(document: Mapping[str, Any]) -> Record:
    """Deserialize a stored document into Record.

    Documents written outside the pipeline may lack fields or carry
    non-string values; both are coerced rather than rejected.

    Args:
        document: Stored document payload.

    Returns:
        Parsed Record.
    """
    raw_id = document.get(RECORD_ID_FIELD, 0)
    text_fields = {
        name: "" if document.get(name) is None else str(document.get(name))
        for name in RECORD_TEXT_FIELDS
    }
    return Record(id=_document_id(raw_id), **text_fields)


def _document_id(raw_id: Any) -> int:
    if isinstance(raw_id, int):
        return int(raw_id)
    if isinstance(raw_id, float) and math.isfinite(raw_id):
        return int(raw_id)
    return 0
