"""Runtime configuration model for Sluice.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from dotenv import load_dotenv

from core.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_COLLECTION_NAME,
    DEFAULT_DATABASE_NAME,
    DEFAULT_LIST_LIMIT,
    DEFAULT_MONGO_URI,
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_READ_BUFFER_BYTES,
    DEFAULT_UPLOAD_DIR,
    DURABILITY_UNACKNOWLEDGED,
    SUPPORTED_DURABILITY_MODES,
)
from core.errors import SluiceConfigError
from core.types import WriteMode

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class SluiceConfig:
    """Validated runtime configuration.

    Attributes:
        mongo_uri: Connection string for the record store.
        database_name: Database holding the records collection.
        collection_name: Collection receiving ingested records.
        batch_size: Number of records per bulk write.
        read_buffer_bytes: Buffer size for sequential source reads.
        progress_interval: Processed-record interval between progress events.
        write_durability: Store write acknowledgment mode.
        bypass_validation: Whether the store skips document validation.
        abort_on_write_error: Abort a run on the first critical write error.
        upload_dir: Staging directory for uploaded source files.
        list_limit: Default number of records returned by listings.
    """

    mongo_uri: str = DEFAULT_MONGO_URI
    database_name: str = DEFAULT_DATABASE_NAME
    collection_name: str = DEFAULT_COLLECTION_NAME
    batch_size: int = DEFAULT_BATCH_SIZE
    read_buffer_bytes: int = DEFAULT_READ_BUFFER_BYTES
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    write_durability: str = DURABILITY_UNACKNOWLEDGED
    bypass_validation: bool = True
    abort_on_write_error: bool = True
    upload_dir: Path = DEFAULT_UPLOAD_DIR
    list_limit: int = DEFAULT_LIST_LIMIT

    @classmethod
    def from_env(cls) -> "SluiceConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SluiceConfigError: If environment values are invalid.
        """
        load_dotenv()
        return cls(
            mongo_uri=os.getenv("SLUICE_MONGO_URI", DEFAULT_MONGO_URI),
            database_name=os.getenv("SLUICE_DATABASE", DEFAULT_DATABASE_NAME),
            collection_name=os.getenv("SLUICE_COLLECTION", DEFAULT_COLLECTION_NAME),
            batch_size=_parse_positive_int("SLUICE_BATCH_SIZE", DEFAULT_BATCH_SIZE),
            read_buffer_bytes=_parse_positive_int(
                "SLUICE_READ_BUFFER_BYTES", DEFAULT_READ_BUFFER_BYTES
            ),
            progress_interval=_parse_positive_int(
                "SLUICE_PROGRESS_INTERVAL", DEFAULT_PROGRESS_INTERVAL
            ),
            write_durability=_parse_durability(
                os.getenv("SLUICE_WRITE_DURABILITY", DURABILITY_UNACKNOWLEDGED)
            ),
            bypass_validation=_parse_bool("SLUICE_BYPASS_VALIDATION", True),
            abort_on_write_error=_parse_bool("SLUICE_ABORT_ON_WRITE_ERROR", True),
            upload_dir=Path(os.getenv("SLUICE_UPLOAD_DIR", str(DEFAULT_UPLOAD_DIR)))
            .expanduser()
            .resolve(),
            list_limit=_parse_positive_int("SLUICE_LIST_LIMIT", DEFAULT_LIST_LIMIT),
        )

    @property
    def write_mode(self) -> WriteMode:
        """Return the store write mode derived from this config."""
        return WriteMode(
            durability=self.write_durability,
            bypass_validation=self.bypass_validation,
        )


def _parse_positive_int(variable_name: str, default: int) -> int:
    """Parse a positive integer environment value.

    Args:
        variable_name: Environment variable to read.
        default: Value used when the variable is unset.

    Returns:
        Parsed integer value.

    Raises:
        SluiceConfigError: If value is not an integer >= 1.
    """
    raw_value = os.getenv(variable_name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = int(raw_value)
    except ValueError as error:
        raise SluiceConfigError(
            f"Invalid {variable_name} value: expected integer, got '{raw_value}'. "
            f"Set {variable_name} to a positive number."
        ) from error
    if value < 1:
        raise SluiceConfigError(
            f"Invalid {variable_name} value: expected >= 1, got {value}. "
            f"Set {variable_name} to a positive number."
        )
    return value


def _parse_bool(variable_name: str, default: bool) -> bool:
    """Parse a boolean environment flag.

    Raises:
        SluiceConfigError: If value is not a recognized boolean literal.
    """
    raw_value = os.getenv(variable_name)
    if raw_value is None or not raw_value.strip():
        return default
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SluiceConfigError(
        f"Invalid {variable_name} value: expected a boolean, got '{raw_value}'. "
        f"Use one of {_TRUE_VALUES + _FALSE_VALUES}."
    )


def _parse_durability(raw_value: str) -> str:
    """Validate the write durability mode."""
    normalized = raw_value.strip().lower()
    if normalized not in SUPPORTED_DURABILITY_MODES:
        raise SluiceConfigError(
            f"Invalid SLUICE_WRITE_DURABILITY value: '{raw_value}'. "
            f"Supported modes: {SUPPORTED_DURABILITY_MODES}."
        )
    return normalized
