"""
FileRelay — Request Validation
===============================

What:  Early rejection of requests that cannot be served.
Why:   Both checks run before any network or disk activity, so a bad request
       never creates a temp file or touches a downstream service.
How:   `validate_file_url` → 400 class errors; `ensure_configured` → 500.
       The URL is checked first, so a malformed request is reported as the
       client's fault even on a misconfigured server.
"""

import logging
from typing import Any

import httpx

from filerelay.config import Settings
from filerelay.exceptions import ClientInputError, ConfigurationError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = {"http", "https"}


def validate_file_url(value: Any) -> str:
    """
    Confirm `value` is an absolute http(s) URL.

    Returns:
        The URL as a string.

    Raises:
        ClientInputError("fileUrl is required") for a missing or falsy value,
        ClientInputError("Invalid fileUrl format") for anything unparseable,
        relative, or using a scheme we cannot download from.
    """
    if not value:
        raise ClientInputError(message="fileUrl is required")

    if not isinstance(value, str):
        raise ClientInputError(
            message="Invalid fileUrl format",
            context={"type": type(value).__name__},
        )

    try:
        url = httpx.URL(value.strip())
    except (httpx.InvalidURL, ValueError, TypeError):
        raise ClientInputError(message="Invalid fileUrl format")

    if url.scheme not in ALLOWED_SCHEMES or not url.host:
        raise ClientInputError(
            message="Invalid fileUrl format",
            context={"scheme": url.scheme},
        )

    return str(url)


def ensure_configured(settings: Settings) -> None:
    """Raise ConfigurationError when the active relay mode is missing settings."""
    missing = settings.missing_settings()
    if missing:
        logger.error("Relay request rejected, missing configuration: %s", ", ".join(missing))
        raise ConfigurationError(missing=missing)
