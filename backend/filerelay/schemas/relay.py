"""
FileRelay — Pydantic Request/Response Schemas
==============================================

What:  Pydantic models defining the public API contract.
Why:   Request parsing, response serialization, and OpenAPI docs.

Note on RelayRequest:
    `fileUrl` is typed loosely on purpose. Missing, empty, non-string and
    malformed values must produce the two specific 400 messages from
    `services.validation`, not FastAPI's generic 422 field errors.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class RelayRequest(BaseModel):
    """
    What:  Body of POST /process-file.
    Example: {"fileUrl": "https://example.com/doc.pdf"}
    """

    file_url: Optional[Any] = Field(
        default=None,
        alias="fileUrl",
        description="Absolute http(s) URL of the document to process",
    )

    model_config = {"populate_by_name": True}


class StoredFileResponse(BaseModel):
    """
    What:  Storage-mode success body.
    Who:   Returned by POST /process-file when RELAY_MODE=storage.
    """

    message: str = Field(default="File processed and stored successfully")
    url: str = Field(description="Public URL of the stored extraction JSON")


class ErrorResponse(BaseModel):
    """
    What:  Error body shape shared by every failure response.

    Fields:
        error:   Short error label, e.g. "Request timeout"
        message: Extra description (filesystem and unclassified errors)
        details: Downstream body or message (502 responses)
    """

    error: str = Field(description="Error label")
    message: Optional[str] = Field(default=None, description="Additional description")
    details: Optional[Any] = Field(default=None, description="Downstream error details")


class HealthResponse(BaseModel):
    """
    What:  Health check response.
    Who:   GET /health, for container probes and load balancers.
    """

    status: str = Field(description="ok or misconfigured")
    version: str = Field(description="Application version")
    mode: str = Field(description="Relay mode: direct or storage")
    uptime_seconds: float = Field(description="Seconds since service started")
