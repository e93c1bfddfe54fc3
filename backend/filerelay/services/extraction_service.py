"""
FileRelay — Extraction Service Client
======================================

What:  Forwards the staged file to the document-extraction API.
Why:   This is the one call that does real work; everything else in the
       pipeline prepares for it or stores its result.
How:   Reads the temp file with aiofiles, sends it as multipart form data
       (field `files`) with the API key header, returns the parsed JSON.

Timeouts:
    `forward_timeout` (default 30s) is deliberately much longer than the
    download timeout: extraction is CPU-heavy on the remote side. The request
    body is not size-capped here; the download cap already bounded it.

Failure translation:
    413 from the service   → PayloadTooLargeError   (413)
    other non-2xx          → UpstreamServiceError   (502, service body as details)
    non-JSON 2xx body      → UpstreamServiceError   (502)
    timeout                → ExtractionTimeoutError (504)
    transport failure      → UpstreamServiceError   (502)
    temp file unreadable   → FilesystemError        (500)
"""

import logging
import mimetypes
import time
from pathlib import Path
from typing import Any, Optional

import aiofiles
import httpx

from filerelay.config import Settings
from filerelay.exceptions import (
    ExtractionTimeoutError,
    FilesystemError,
    PayloadTooLargeError,
    UpstreamServiceError,
)

logger = logging.getLogger(__name__)

FORM_FIELD = "files"


class ExtractionService:
    """Client for the configured extraction endpoint."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.settings = settings
        self.client = client

    def _headers(self) -> dict:
        return {
            "Accept": "application/json",
            self.settings.extraction_api_key_header: self.settings.extraction_api_key or "",
        }

    async def extract(self, file_path, filename: Optional[str] = None) -> Any:
        """
        Send the file at `file_path` for extraction.

        Args:
            file_path: Staged temp file.
            filename:  Name to upload under; defaults to the temp file name.

        Returns:
            The service's JSON body, parsed but otherwise untouched.
        """
        path = Path(file_path)
        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except OSError as e:
            logger.error("Failed to read staged file %s: %s", path, str(e))
            raise FilesystemError(context={"path": str(path), "os_error": str(e)})

        upload_name = filename or path.name
        content_type = mimetypes.guess_type(upload_name)[0] or "application/octet-stream"

        start_time = time.perf_counter()
        try:
            response = await self.client.post(
                self.settings.extraction_api_url,
                files={FORM_FIELD: (upload_name, content, content_type)},
                headers=self._headers(),
                timeout=self.settings.forward_timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("Extraction timed out after %.0fs", self.settings.forward_timeout)
            raise ExtractionTimeoutError(
                timeout=self.settings.forward_timeout,
                context={"error": type(e).__name__},
            )
        except httpx.HTTPError as e:
            logger.warning("Extraction request failed: %s", str(e))
            raise UpstreamServiceError(
                details=str(e) or type(e).__name__,
                context={"stage": "extraction"},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code == 413:
            raise PayloadTooLargeError(context={"upstream_status": 413, "size": len(content)})

        if response.is_error:
            logger.warning(
                "Extraction service returned %d after %.0fms",
                response.status_code,
                duration_ms,
            )
            raise UpstreamServiceError(
                details=_response_details(response),
                status_code=response.status_code,
                context={"stage": "extraction"},
            )

        try:
            result = response.json()
        except ValueError:
            raise UpstreamServiceError(
                details="Extraction service returned a non-JSON response",
                status_code=response.status_code,
                context={"stage": "extraction", "body": response.text[:500]},
            )

        logger.info(
            "Extraction of %s completed in %.0fms (%d bytes in, %d bytes out)",
            upload_name,
            duration_ms,
            len(content),
            len(response.content),
        )
        return result


def _response_details(response: httpx.Response) -> Any:
    """Downstream error body: parsed JSON when possible, else text."""
    try:
        return response.json()
    except ValueError:
        return response.text or response.reason_phrase
