"""FastAPI application definition.

This module creates and configures the FastAPI application instance,
wiring the record store, ingest task manager, and route registration.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from api.routes import router
from core.config import SluiceConfig
from core.logging_config import get_logger
from ingest.pipeline import IngestRunController
from ingest.task_manager import IngestTaskManager
from store.mongo_store import MongoRecordStore
from store.record_store import RecordStore

_LOGGER = get_logger(__name__)


def create_app(config: SluiceConfig | None = None, store: RecordStore | None = None) -> FastAPI:
    """Build the HTTP application.

    Args:
        config: Optional runtime configuration, read from env when omitted.
        store: Optional record store, MongoDB when omitted.

    Returns:
        Configured FastAPI application.
    """
    resolved_config = config or SluiceConfig.from_env()
    resolved_store = store or MongoRecordStore(resolved_config)
    task_manager = IngestTaskManager(IngestRunController(resolved_store, resolved_config))

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await resolved_store.ensure_indexes()
        yield
        _LOGGER.info("shutdown_waiting_for_runs", active_runs=task_manager.active_runs)
        await task_manager.wait_idle()
        await resolved_store.close()

    app = FastAPI(
        title="Sluice",
        description="Background bulk ingestion of CSV uploads into a record store",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = resolved_config
    app.state.store = resolved_store
    app.state.task_manager = task_manager
    app.include_router(router)
    return app
