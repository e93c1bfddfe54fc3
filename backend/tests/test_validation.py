"""
FileRelay — Request Validation Tests
=====================================

What we test:
    ✅ Missing or falsy fileUrl → "fileUrl is required"
    ✅ Malformed, relative, non-http and non-string values → "Invalid fileUrl format"
    ✅ Configuration check reports missing settings
"""

import pytest

from filerelay.exceptions import ClientInputError, ConfigurationError
from filerelay.services.validation import ensure_configured, validate_file_url


@pytest.mark.parametrize("value", [None, "", 0, False, [], {}])
def test_missing_file_url(value):
    with pytest.raises(ClientInputError, match="fileUrl is required"):
        validate_file_url(value)


@pytest.mark.parametrize(
    "value",
    [
        "not a url",
        "/relative/doc.pdf",
        "example.com/doc.pdf",
        "ftp://example.com/doc.pdf",
        "https://",
        123,
        ["https://example.com/doc.pdf"],
    ],
)
def test_invalid_file_url(value):
    with pytest.raises(ClientInputError, match="Invalid fileUrl format"):
        validate_file_url(value)


@pytest.mark.parametrize(
    "value",
    [
        "https://example.com/doc.pdf",
        "http://example.com/files/report.docx?token=abc",
        "https://cdn.example.com:8443/a/b/c.png",
    ],
)
def test_valid_file_url(value):
    assert validate_file_url(value).startswith("http")


def test_ensure_configured_passes(make_settings):
    ensure_configured(make_settings())


def test_ensure_configured_raises_with_missing_names(make_settings):
    with pytest.raises(ConfigurationError) as exc_info:
        ensure_configured(make_settings(extraction_api_key=None))
    assert exc_info.value.missing == ["EXTRACTION_API_KEY"]
