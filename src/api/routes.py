"""API route definitions.

This module defines the HTTP endpoints of the ingest service:
- POST /upload - Stage a CSV upload and ingest it in the background
- GET /records - Return a bounded sample of stored records
- GET /ping - Health check
"""

from __future__ import annotations

from fastapi import APIRouter, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from core.constants import MAX_LIST_LIMIT, NO_FILE_MESSAGE
from core.errors import SluiceIngestError, SluiceStoreError
from core.logging_config import get_logger
from ingest.staging import stage_upload
from store.record_payload import record_to_document

_LOGGER = get_logger(__name__)

router = APIRouter()


@router.post("/upload", status_code=202)
async def upload(request: Request, file: UploadFile | None = File(None)) -> JSONResponse:
    """Accept a CSV file and process it in the background.

    The response is sent before any row is read and is never revised.
    """
    if file is None or not file.filename:
        return JSONResponse(status_code=400, content={"message": NO_FILE_MESSAGE})
    config = request.app.state.config
    try:
        staged_path = await stage_upload(file, config.upload_dir, config.read_buffer_bytes)
    except SluiceIngestError as error:
        _LOGGER.error("upload_staging_failed", filename=file.filename, error=str(error))
        return JSONResponse(status_code=500, content={"message": str(error)})
    finally:
        await file.close()
    acknowledgment = request.app.state.task_manager.submit(staged_path)
    _LOGGER.info("upload_accepted", filename=file.filename, run_id=acknowledgment.run_id)
    return JSONResponse(status_code=202, content=acknowledgment.to_dict())


@router.get("/records")
async def list_records(
    request: Request,
    limit: int | None = Query(None, ge=1, le=MAX_LIST_LIMIT),
) -> JSONResponse:
    """Return an arbitrary bounded sample of stored records."""
    sample_size = limit or request.app.state.config.list_limit
    try:
        records = await request.app.state.store.sample_records(sample_size)
    except SluiceStoreError as error:
        return JSONResponse(status_code=500, content={"message": str(error)})
    return JSONResponse(
        status_code=200,
        content=[record_to_document(record) for record in records],
    )


@router.get("/ping")
async def ping() -> dict[str, str]:
    """Health check endpoint."""
    return {"message": "pong"}
