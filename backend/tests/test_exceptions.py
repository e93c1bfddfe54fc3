"""
FileRelay — Error Taxonomy Tests
=================================

What we test:
    ✅ Every error type maps to its HTTP status through the single table
    ✅ Subclasses resolve through the hierarchy
    ✅ Response bodies match the public API contract
"""

import pytest

from filerelay.exceptions import (
    ClientInputError,
    ConfigurationError,
    DownloadTimeoutError,
    ExtractionTimeoutError,
    FileRelayError,
    FilesystemError,
    PayloadTooLargeError,
    UnclassifiedError,
    UpstreamServiceError,
    status_code_for,
)


@pytest.mark.parametrize(
    "exc, status",
    [
        (ClientInputError(), 400),
        (ConfigurationError(missing=["EXTRACTION_API_KEY"]), 500),
        (DownloadTimeoutError(timeout=5), 504),
        (ExtractionTimeoutError(timeout=30), 504),
        (PayloadTooLargeError(), 413),
        (FilesystemError(), 500),
        (UpstreamServiceError(details="boom"), 502),
        (UnclassifiedError(message="boom"), 500),
        (FileRelayError(), 500),
    ],
)
def test_status_codes(exc, status):
    assert status_code_for(exc) == status


def test_client_input_body():
    assert ClientInputError(message="Invalid fileUrl format").body() == {"error": "Invalid fileUrl format"}


def test_configuration_body_hides_missing_names():
    exc = ConfigurationError(missing=["S3_BUCKET"])
    assert exc.body() == {"error": "API configuration is missing"}
    assert exc.context["missing"] == ["S3_BUCKET"]


def test_timeout_body():
    assert DownloadTimeoutError(timeout=5).body() == {"error": "Request timeout"}


def test_payload_too_large_body():
    assert PayloadTooLargeError(limit=10).body() == {"error": "File too large"}


def test_filesystem_body():
    assert FilesystemError(context={"path": "/tmp/x"}).body() == {
        "error": "Internal server error",
        "message": "Failed to create or access temporary file",
    }


def test_upstream_body_carries_details():
    exc = UpstreamServiceError(details={"detail": "bad file"}, status_code=422)
    assert exc.body() == {"error": "External service error", "details": {"detail": "bad file"}}
    assert exc.context["upstream_status"] == 422


def test_upstream_details_default_to_message():
    assert UpstreamServiceError(message="connection refused").body()["details"] == "connection refused"


def test_unclassified_body_carries_message():
    assert UnclassifiedError(message="kaboom").body() == {
        "error": "Internal server error",
        "message": "kaboom",
    }
