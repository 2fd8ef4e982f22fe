"""MongoDB-backed record store.

This module persists ingested records with unordered bulk inserts and
translates driver failures into the Sluice store error hierarchy.
"""

from __future__ import annotations

from typing import Any, Sequence

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import BulkWriteError, DuplicateKeyError, PyMongoError
from pymongo.write_concern import WriteConcern

from core.config import SluiceConfig
from core.constants import DUPLICATE_KEY_ERROR_CODE, RECORD_ID_FIELD
from core.errors import SluiceDuplicateKeyError, SluiceStoreError
from core.logging_config import get_logger
from core.types import Record, WriteMode
from store.record_payload import record_from_document, record_to_document

_LOGGER = get_logger(__name__)


class MongoRecordStore:
    """Record store implementation over one MongoDB collection.

    The client connects lazily, so constructing a store never blocks.
    """

    def __init__(self, config: SluiceConfig, client: AsyncMongoClient | None = None) -> None:
        """Initialize store from config.

        Args:
            config: Runtime configuration.
            client: Optional pre-built client, mainly for tests.
        """
        self._client = client or AsyncMongoClient(config.mongo_uri)
        self._collection = self._client[config.database_name][config.collection_name]

    async def insert_unordered(self, records: Sequence[Record], write_mode: WriteMode) -> None:
        """Insert records, letting the server attempt every document.

        Args:
            records: Records to insert.
            write_mode: Durability and validation options.

        Raises:
            SluiceDuplicateKeyError: If every failure was a duplicate key.
            SluiceStoreError: For any other driver failure.
        """
        if not records:
            return
        collection = self._collection.with_options(
            write_concern=_write_concern_for(write_mode)
        )
        documents = [record_to_document(record) for record in records]
        try:
            await collection.insert_many(
                documents,
                ordered=False,
                bypass_document_validation=_bypass_option(write_mode),
            )
        except BulkWriteError as error:
            raise _translate_bulk_error(error, len(documents)) from error
        except DuplicateKeyError as error:
            raise SluiceDuplicateKeyError(
                f"Duplicate key while inserting batch: {error}", duplicate_count=1
            ) from error
        except PyMongoError as error:
            raise SluiceStoreError(
                f"Failed to insert batch of {len(documents)} records: {error}"
            ) from error

    async def sample_records(self, limit: int) -> list[Record]:
        """Return up to ``limit`` stored records.

        Raises:
            SluiceStoreError: If the query fails.
        """
        try:
            cursor = self._collection.find({}, {"_id": 0}).limit(limit)
            documents = await cursor.to_list(length=limit)
        except PyMongoError as error:
            raise SluiceStoreError(f"Failed to list records: {error}") from error
        return [record_from_document(document) for document in documents]

    async def ensure_indexes(self) -> None:
        """Create the unique ``id`` index used for duplicate detection.

        Raises:
            SluiceStoreError: If index creation fails, e.g. on existing duplicates.
        """
        try:
            index_name = await self._collection.create_index(
                [(RECORD_ID_FIELD, ASCENDING)], unique=True
            )
        except PyMongoError as error:
            raise SluiceStoreError(
                f"Failed to create unique index on '{RECORD_ID_FIELD}': {error}. "
                "Remove duplicate ids from the collection and retry."
            ) from error
        _LOGGER.info(
            "store_indexes_ensured",
            collection=self._collection.full_name,
            index_name=index_name,
        )

    async def close(self) -> None:
        await self._client.close()


def _write_concern_for(write_mode: WriteMode) -> WriteConcern:
    """Map write mode onto a driver write concern."""
    if write_mode.acknowledged:
        return WriteConcern(w=1)
    return WriteConcern(w=0)


def _bypass_option(write_mode: WriteMode) -> bool | None:
    """Return the validation bypass flag, omitted for unacknowledged writes.

    The driver rejects validation bypass combined with w=0.
    """
    if write_mode.bypass_validation and write_mode.acknowledged:
        return True
    return None


def _translate_bulk_error(error: BulkWriteError, batch_size: int) -> SluiceStoreError:
    """Classify a bulk write failure as duplicate-only or critical."""
    details: dict[str, Any] = error.details or {}
    write_errors = details.get("writeErrors", [])
    concern_errors = details.get("writeConcernErrors", [])
    duplicate_count = sum(
        1 for item in write_errors if item.get("code") == DUPLICATE_KEY_ERROR_CODE
    )
    if write_errors and duplicate_count == len(write_errors) and not concern_errors:
        return SluiceDuplicateKeyError(
            f"{duplicate_count} of {batch_size} records already exist",
            duplicate_count=duplicate_count,
        )
    first_message = write_errors[0].get("errmsg") if write_errors else str(error)
    return SluiceStoreError(
        f"Bulk insert failed for {len(write_errors)} of {batch_size} records: {first_message}"
    )
