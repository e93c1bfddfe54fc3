"""
FileRelay — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Every test needs the same fake world: a source server, an extraction
       service, an object store, and a scratch directory it can inspect.
How:   Outbound HTTP goes through `httpx.MockTransport(FakeUpstream)`; the
       object store is a MagicMock S3 client; the app is driven through
       httpx's ASGITransport without running a server.

Fixtures:
    scratch_dir:   Fresh temp directory used as TEMP_DIR
    make_settings: Settings factory with a complete direct-mode configuration
    upstream:      FakeUpstream recording every outbound request
    mock_s3:       MagicMock standing in for the boto3 S3 client
    relay_client:  Builder for an AsyncClient bound to a fresh app
"""

import os
from typing import Any, Callable, List
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Before any filerelay import: main.py builds a module-level app from the environment
os.environ["LOG_LEVEL"] = "WARNING"

from filerelay.config import Settings  # noqa: E402
from filerelay.main import create_app  # noqa: E402


SOURCE_URL = "https://example.com/doc.pdf"
EXTRACTION_URL = "https://extract.example.com/general/v0/general"
EXTRACTION_HOST = "extract.example.com"
PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"
EXTRACTION_RESULT = {"elements": [{"text": "hello"}]}

STORAGE_SETTINGS = {
    "relay_mode": "storage",
    "s3_endpoint_url": "https://s3.example.com",
    "s3_access_key_id": "test-access-key",
    "s3_secret_access_key": "test-secret-key",
    "s3_bucket": "artifacts",
    "public_base_url": "https://cdn.example.com",
}


class FakeUpstream:
    """
    Callable handler for httpx.MockTransport.

    Requests to EXTRACTION_HOST are answered by `extraction`, everything else
    by `source`. Both are callables taking the request; tests replace them to
    simulate failures.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.source: Callable[[httpx.Request], Any] = lambda request: httpx.Response(
            200, content=PDF_BYTES, headers={"Content-Type": "application/pdf"}
        )
        self.extraction: Callable[[httpx.Request], Any] = lambda request: httpx.Response(
            200, json=EXTRACTION_RESULT
        )

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        handler = self.extraction if request.url.host == EXTRACTION_HOST else self.source
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def extraction_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == EXTRACTION_HOST]


@pytest.fixture
def scratch_dir(tmp_path):
    """Empty scratch directory; tests assert it is empty again afterwards."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def make_settings(scratch_dir):
    """
    Settings factory.

    Usage:
        settings = make_settings(relay_mode="storage", **STORAGE_SETTINGS)
        settings = make_settings(extraction_api_key=None)  # misconfigured
    """

    def _make(**overrides) -> Settings:
        values = {
            "extraction_api_url": EXTRACTION_URL,
            "extraction_api_key": "test-key",
            "temp_dir": str(scratch_dir),
            "log_level": "WARNING",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def mock_s3():
    """S3 client double; `put_object` succeeds unless a test says otherwise."""
    client = MagicMock()
    client.put_object.return_value = {"ETag": '"abc123"'}
    return client


@pytest_asyncio.fixture
async def relay_client(make_settings, upstream, mock_s3):
    """
    Builder for an HTTP client talking to a freshly created app.

    Usage:
        client = await relay_client(relay_mode="storage", **STORAGE_SETTINGS)
        response = await client.post("/process-file", json={"fileUrl": SOURCE_URL})
    """
    created = []

    async def _build(**overrides) -> AsyncClient:
        settings = make_settings(**overrides)
        app = create_app(settings, transport=httpx.MockTransport(upstream), s3_client=mock_s3)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        created.append((client, app))
        return client

    yield _build

    for client, app in created:
        await client.aclose()
        await app.state.http_client.aclose()
