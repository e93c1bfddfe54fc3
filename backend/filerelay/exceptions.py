"""
FileRelay — Custom Exception Hierarchy
=======================================

What:  Defines the closed set of failures a relay request can end in.
Why:   Each pipeline stage raises a typed error and never decides an HTTP
       status itself. One table below maps error type → status code, and one
       handler in main.py turns the error into the JSON response.
How:   Each exception carries a message and optional context dict, plus a
       `body()` with the exact JSON returned to the caller.

Exception Hierarchy:
    FileRelayError (base)
    ├── ClientInputError           → 400 Bad Request
    ├── ConfigurationError         → 500 Internal Server Error
    ├── RequestTimeoutError        → 504 Gateway Timeout
    │   ├── DownloadTimeoutError
    │   └── ExtractionTimeoutError
    ├── PayloadTooLargeError       → 413 Payload Too Large
    ├── FilesystemError            → 500 Internal Server Error
    ├── UpstreamServiceError       → 502 Bad Gateway
    └── UnclassifiedError          → 500 Internal Server Error

    RelayService wraps any other exception in UnclassifiedError. Failures
    while deleting the temp file are logged only and never raised.
"""

from typing import Any, Dict, Optional, Type


class FileRelayError(Exception):
    """
    Base exception for all FileRelay application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def body(self) -> Dict[str, Any]:
        """JSON body sent to the caller."""
        return {"error": "Internal server error", "message": self.message}


class ClientInputError(FileRelayError):
    """
    Raised when the request body does not carry a usable `fileUrl`.

    HTTP: 400 Bad Request. Never retried, never logged as a server fault.
    """

    def __init__(
        self,
        message: str = "fileUrl is required",
        field: Optional[str] = "fileUrl",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field

    def body(self) -> Dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(FileRelayError):
    """
    Raised when settings required by the active relay mode are absent.

    HTTP: 500. Indicates a deployment problem, not a per-request condition;
    the missing variable names go to the log, not to the caller.
    """

    def __init__(
        self,
        missing: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["missing"] = list(missing or [])
        super().__init__(message="API configuration is missing", context=ctx)
        self.missing = ctx["missing"]

    def body(self) -> Dict[str, Any]:
        return {"error": self.message}


class RequestTimeoutError(FileRelayError):
    """
    Raised when a network stage exceeds its time budget.

    HTTP: 504 Gateway Timeout.
    """

    def __init__(
        self,
        message: str = "Request timeout",
        timeout: Optional[float] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if timeout is not None:
            ctx["timeout"] = timeout
        super().__init__(message=message, context=ctx)
        self.timeout = timeout

    def body(self) -> Dict[str, Any]:
        return {"error": "Request timeout"}


class DownloadTimeoutError(RequestTimeoutError):
    """The source URL did not deliver its content within `download_timeout`."""


class ExtractionTimeoutError(RequestTimeoutError):
    """The extraction service did not answer within `forward_timeout`."""


class PayloadTooLargeError(FileRelayError):
    """
    Raised when content exceeds the size bound.

    When:  The download is larger than `max_download_size`, or the extraction
           service rejects the upload with 413.
    HTTP:  413 Payload Too Large
    """

    def __init__(
        self,
        message: str = "File too large",
        limit: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if limit is not None:
            ctx["limit"] = limit
        super().__init__(message=message, context=ctx)
        self.limit = limit

    def body(self) -> Dict[str, Any]:
        return {"error": "File too large"}


class FilesystemError(FileRelayError):
    """
    Raised when the temp file cannot be created or read.

    When:  Disk full, permission denied, scratch directory missing.
    HTTP:  500 Internal Server Error. The OS error and path are kept in
           `context` for the log; the caller only sees a generic message.
    """

    def __init__(
        self,
        message: str = "Failed to create or access temporary file",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamServiceError(FileRelayError):
    """
    Raised when a downstream dependency fails.

    What:    Non-2xx response or transport failure from the source URL, the
             extraction service, or the object store.
    HTTP:    502 Bad Gateway
    details: The downstream body when one was received, otherwise the
             failure message. Returned to the caller as-is.
    """

    def __init__(
        self,
        message: str = "External service error",
        details: Any = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["upstream_status"] = status_code
        super().__init__(message=message, context=ctx)
        self.details = details if details is not None else message
        self.status_code = status_code

    def body(self) -> Dict[str, Any]:
        return {"error": "External service error", "details": self.details}


class UnclassifiedError(FileRelayError):
    """
    Wraps any exception a pipeline stage did not translate itself.

    HTTP: 500, with the original exception's message.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ── Status Mapping ────────────────────────────────────────────────────────
# The only place an error type is tied to an HTTP status.
ERROR_STATUS_CODES: Dict[Type[FileRelayError], int] = {
    ClientInputError: 400,
    ConfigurationError: 500,
    RequestTimeoutError: 504,
    PayloadTooLargeError: 413,
    FilesystemError: 500,
    UpstreamServiceError: 502,
    UnclassifiedError: 500,
    FileRelayError: 500,
}


def status_code_for(exc: FileRelayError) -> int:
    """Resolve the status for `exc`, walking its class hierarchy."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500
