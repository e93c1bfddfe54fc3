"""
FileRelay — Relay Service (Pipeline Orchestrator)
==================================================

What:  Runs one relay request end to end.
Why:   Keeps the pipeline in one place, independent of HTTP concerns.
How:   Composes the validation helpers, FetchService, FileService,
       ExtractionService and (storage mode) StorageService.

Pipeline (POST /process-file):
    ┌──────────┐   ┌─────────┐   ┌─────────┐   ┌─────────────┐   ┌───────────┐
    │ Validate │──▶│  Fetch  │──▶│  Stage  │──▶│   Extract   │──▶│  Publish  │
    │ URL/conf │   │ (httpx) │   │ (temp)  │   │ (multipart) │   │ (S3, opt) │
    └──────────┘   └─────────┘   └─────────┘   └─────────────┘   └───────────┘
                                      └──────── released on every exit ───┘

    Any stage may raise a FileRelayError subclass; it propagates unchanged
    to the exception handlers in main.py, which answer exactly once. The
    temp file is owned by the `staged()` block and deleted before the
    exception leaves this service.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from filerelay.config import Settings
from filerelay.exceptions import FileRelayError, UnclassifiedError
from filerelay.services.extraction_service import ExtractionService
from filerelay.services.fetch_service import FetchService
from filerelay.services.file_service import FileService
from filerelay.services.storage_service import StorageService, StoredArtifact
from filerelay.services.validation import ensure_configured, validate_file_url

logger = logging.getLogger(__name__)


@dataclass
class RelayOutcome:
    """Extraction result and, in storage mode, where it was stored."""

    result: Any
    artifact: Optional[StoredArtifact] = None


class RelayService:
    """
    Stateless orchestrator; one instance serves all requests.

    Requests share nothing but the scratch directory and the bucket, and
    both are written under generated names.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: FetchService,
        files: FileService,
        extractor: ExtractionService,
        storage: Optional[StorageService] = None,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.files = files
        self.extractor = extractor
        self.storage = storage

    async def process(self, file_url: Any) -> RelayOutcome:
        """
        Validate → fetch → stage → extract → (publish).

        Raises:
            ClientInputError, ConfigurationError (before any I/O), then any of
            DownloadTimeoutError, PayloadTooLargeError, FilesystemError,
            UpstreamServiceError, ExtractionTimeoutError.
        """
        url = validate_file_url(file_url)
        ensure_configured(self.settings)

        try:
            fetched = await self.fetcher.fetch(url)

            async with self.files.staged(fetched.content, fetched.filename) as temp_path:
                result = await self.extractor.extract(temp_path, filename=fetched.filename)

                if not self.settings.storage_enabled:
                    return RelayOutcome(result=result)

                artifact = await self.storage.publish(result)
                return RelayOutcome(result=result, artifact=artifact)

        except FileRelayError:
            raise
        except Exception as e:
            logger.error("Unexpected error relaying file: %s", str(e), exc_info=True)
            raise UnclassifiedError(
                message=str(e) or type(e).__name__,
                context={"error_type": type(e).__name__},
            ) from e


def build_relay_service(
    settings: Settings,
    client: httpx.AsyncClient,
    s3_client: Optional[Any] = None,
) -> RelayService:
    """Wire the pipeline services for `settings` around a shared HTTP client."""
    return RelayService(
        settings=settings,
        fetcher=FetchService(settings, client),
        files=FileService(settings),
        extractor=ExtractionService(settings, client),
        storage=StorageService(settings, s3_client=s3_client) if settings.storage_enabled else None,
    )
