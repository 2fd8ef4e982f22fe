"""Unit tests for record document serialization."""

from __future__ import annotations

from core.types import Record
from store.record_payload import record_from_document, record_to_document


def test_record_to_document_uses_field_names() -> None:
    """Documents should be keyed by record field names."""
    document = record_to_document(Record(id=3, firstname="Ada"))

    assert document == {
        "id": 3,
        "firstname": "Ada",
        "lastname": "",
        "email": "",
        "email2": "",
        "profession": "",
    }


def test_record_from_document_defaults_missing_fields() -> None:
    """Documents missing fields should still produce records."""
    record = record_from_document({"lastname": "Hopper"})

    assert record == Record(id=0, lastname="Hopper")


def test_record_from_document_coerces_foreign_values() -> None:
    """Non-string values written by other tools should be stringified."""
    record = record_from_document({"id": 7.0, "profession": 42, "email": None})

    assert (record.id, record.profession, record.email) == (7, "42", "")
