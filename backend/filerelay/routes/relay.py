"""
FileRelay — Relay Route Handler
================================

What:  Handles POST /process-file.
Why:   The service's only functional endpoint.
How:   Parses the JSON body, hands the fileUrl to RelayService, and shapes
       the success response for the active mode. Errors are not caught
       here: they propagate to the handlers registered in main.py.

Responses:
    200 direct mode   → extraction JSON as returned by the service
    200 storage mode  → {"message": "File processed and stored successfully", "url": ...}
    400 / 413 / 500 / 502 / 504 → see filerelay.exceptions
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from filerelay.schemas.relay import ErrorResponse, RelayRequest, StoredFileResponse
from filerelay.services.relay_service import RelayService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Relay"])


def get_relay_service(request: Request) -> RelayService:
    """Pipeline built by create_app() for this application instance."""
    return request.app.state.relay_service


@router.post(
    "/process-file",
    response_model=None,
    responses={
        200: {"description": "Extraction JSON (direct mode) or stored artifact URL (storage mode)"},
        400: {"description": "Missing or malformed fileUrl", "model": ErrorResponse},
        413: {"description": "File too large", "model": ErrorResponse},
        500: {"description": "Configuration or internal error", "model": ErrorResponse},
        502: {"description": "Source, extraction or storage service failed", "model": ErrorResponse},
        504: {"description": "Download or extraction timed out", "model": ErrorResponse},
    },
    summary="Extract structured content from a remote document",
)
async def process_file(
    payload: Optional[RelayRequest] = None,
    relay_service: RelayService = Depends(get_relay_service),
) -> JSONResponse:
    """
    Download the document at `fileUrl`, send it for extraction, and return
    the result (or, in storage mode, where the result was stored).
    """
    file_url = payload.file_url if payload else None
    outcome = await relay_service.process(file_url)

    if outcome.artifact is None:
        return JSONResponse(content=outcome.result)

    body = StoredFileResponse(url=outcome.artifact.public_url)
    return JSONResponse(content=body.model_dump())
