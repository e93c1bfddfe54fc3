"""
FileRelay — Source Download Service
====================================

What:  Downloads the file behind `fileUrl` into memory.
Why:   A hostile or misbehaving source must not be able to exhaust memory or
       hang the request, so the download runs under two independent caps.
How:   Streams the body through the shared httpx client, counting bytes as
       they arrive, inside a wall-clock budget.

Caps:
    1. Time:  `download_timeout` seconds for the whole download, not per read
    2. Size:  `max_download_size` bytes. A declared Content-Length over the
              cap aborts before the body is read; otherwise the stream is
              abandoned as soon as the running total crosses it.

Failure translation:
    timeout            → DownloadTimeoutError   (504)
    over the size cap  → PayloadTooLargeError   (413)
    413 from origin    → PayloadTooLargeError   (413)
    non-2xx from origin→ UpstreamServiceError   (502, origin body as details,
                                                 truncated to the size cap)
    transport failure  → UpstreamServiceError   (502, error message as details)
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

import httpx

from filerelay.config import Settings
from filerelay.exceptions import (
    DownloadTimeoutError,
    PayloadTooLargeError,
    UpstreamServiceError,
)

logger = logging.getLogger(__name__)

FALLBACK_FILENAME = "download"


@dataclass(frozen=True)
class FetchedFile:
    """Bytes downloaded from the source and the name to stage them under."""

    content: bytes
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


def filename_from_url(url: str) -> str:
    """
    Base name of the URL path, ignoring query string and fragment.

    Example: https://example.com/files/doc.pdf?sig=abc → "doc.pdf"
    """
    path = unquote(urlsplit(url).path)
    name = PurePosixPath(path).name.replace("\x00", "")
    return name or FALLBACK_FILENAME


class FetchService:
    """Bounded downloader over a shared `httpx.AsyncClient`."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.client = client
        self.timeout = settings.download_timeout
        self.max_size = settings.max_download_size

    async def fetch(self, url: str) -> FetchedFile:
        """
        Download `url` and return its bytes and base name.

        Raises:
            DownloadTimeoutError, PayloadTooLargeError, UpstreamServiceError
        """
        start_time = time.perf_counter()
        try:
            content = await asyncio.wait_for(self._download(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning("Download timed out after %.1fs: %s", self.timeout, _safe_url(url))
            raise DownloadTimeoutError(
                timeout=self.timeout,
                context={"url": _safe_url(url), "error": type(e).__name__},
            )
        except httpx.HTTPError as e:
            logger.warning("Download failed for %s: %s", _safe_url(url), str(e))
            raise UpstreamServiceError(
                details=str(e) or type(e).__name__,
                context={"url": _safe_url(url), "stage": "download"},
            )

        fetched = FetchedFile(content=content, filename=filename_from_url(url))
        logger.info(
            "Downloaded %s (%d bytes) in %.0fms",
            fetched.filename,
            fetched.size,
            (time.perf_counter() - start_time) * 1000,
        )
        return fetched

    async def _download(self, url: str) -> bytes:
        async with self.client.stream("GET", url, timeout=self.timeout) as response:
            if response.status_code == 413:
                raise PayloadTooLargeError(
                    limit=self.max_size,
                    context={"url": _safe_url(url), "stage": "download"},
                )

            if response.is_error:
                # Error bodies are echoed as details, so they stay under the cap too
                body = await self._read_capped(response, truncate=True)
                raise UpstreamServiceError(
                    details=body.decode("utf-8", errors="replace") or response.reason_phrase,
                    status_code=response.status_code,
                    context={"url": _safe_url(url), "stage": "download"},
                )

            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > self.max_size:
                raise PayloadTooLargeError(
                    limit=self.max_size,
                    context={"declared_size": int(declared)},
                )

            return await self._read_capped(response)

    async def _read_capped(self, response: httpx.Response, truncate: bool = False) -> bytes:
        """
        Read the body, never holding more than `max_size` bytes.

        Over the cap: PayloadTooLargeError, or with `truncate` the first
        `max_size` bytes.
        """
        buffer = bytearray()
        async for chunk in response.aiter_bytes():
            buffer.extend(chunk)
            if len(buffer) > self.max_size:
                if truncate:
                    return bytes(buffer[: self.max_size])
                raise PayloadTooLargeError(
                    limit=self.max_size,
                    context={"received": len(buffer)},
                )
        return bytes(buffer)


def _safe_url(url: str) -> str:
    """URL without query string, for logs (signed URLs carry credentials there)."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}"
