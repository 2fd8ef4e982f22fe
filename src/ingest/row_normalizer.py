"""Raw row normalization.

This module maps decoded CSV rows onto typed records.
It never raises: missing or malformed values fall back to defaults.
"""

from __future__ import annotations

import math
import re

from core.constants import RECORD_ID_FIELD
from core.types import RawRow, Record

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def normalize_row(raw_row: RawRow) -> Record:
    """Build a record from one raw row.

    Args:
        raw_row: Header-keyed row values.

    Returns:
        Record with ``id`` coerced to int and string fields defaulted to "".
    """
    return Record(
        id=coerce_record_id(raw_row.get(RECORD_ID_FIELD)),
        firstname=raw_row.get("firstname") or "",
        lastname=raw_row.get("lastname") or "",
        email=raw_row.get("email") or "",
        email2=raw_row.get("email2") or "",
        profession=raw_row.get("profession") or "",
    )


def coerce_record_id(raw_value: str | None) -> int:
    """Coerce a raw id into an integer, returning 0 when unusable.

    Args:
        raw_value: Raw id text, possibly missing.

    Returns:
        Parsed integer id. Decimal and exponent forms are truncated toward zero.
    """
    text = (raw_value or "").strip()
    if _INTEGER_PATTERN.fullmatch(text):
        return int(text)
    if not _DECIMAL_PATTERN.fullmatch(text):
        return 0
    number = float(text)
    # 1e400 parses to inf
    if not math.isfinite(number):
        return 0
    return int(number)
