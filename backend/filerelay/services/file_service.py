"""
FileRelay — Temp File Service
==============================

What:  Stages downloaded bytes in the scratch directory and removes them again.
Why:   The extraction service receives the file as a multipart upload read
       from disk, and exactly one temp file may exist per in-flight request.
How:   `staged()` is an async context manager. It writes the file, yields its
       path, and deletes it on every exit path: normal return, classified
       error, or unclassified error.

Naming:
    <temp_dir>/<millisecond-timestamp>-<original-basename>
    e.g. /tmp/1700000000000-doc.pdf

    The timestamp comes from `clock.timestamp_ms()`, which never repeats
    inside one process. Two processes sharing a scratch directory can still
    collide in the same millisecond on the same name; that risk is accepted.

Ownership:
    The request that staged a file is the only one that deletes it. There is
    no startup sweep: files left behind by a killed process stay until the
    OS cleans its temp directory.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles

from filerelay.config import Settings
from filerelay.exceptions import FilesystemError
from filerelay.services.clock import timestamp_ms

logger = logging.getLogger(__name__)


class FileService:
    """Creates and removes per-request temp files."""

    def __init__(self, settings: Optional[Settings] = None, temp_dir: Optional[str] = None):
        """
        Args:
            settings: Source of `temp_dir` when no override is given.
            temp_dir: Override the scratch directory (used in tests).
        """
        root = temp_dir or (settings.temp_dir if settings else None)
        if not root:
            raise ValueError("FileService needs settings or temp_dir")
        self.temp_dir = Path(root)

    def temp_path_for(self, filename: str) -> Path:
        """Unique path inside the scratch directory for `filename`."""
        return self.temp_dir / f"{timestamp_ms()}-{filename}"

    async def stage(self, content: bytes, filename: str) -> Path:
        """
        Write `content` to a fresh temp file.

        Returns: Absolute path of the written file.
        Raises:  FilesystemError if the file cannot be created or written.
        """
        path = self.temp_path_for(filename)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to stage temp file at %s: %s", path, str(e))
            # A partial write may have left the file behind
            await self.cleanup_file(path)
            raise FilesystemError(context={"path": str(path), "os_error": str(e)})

        logger.debug("Staged %s (%d bytes)", path.name, len(content))
        return path

    async def cleanup_file(self, file_path) -> None:
        """
        Remove a temp file.

        Missing files are not an error. Any other failure is logged and
        swallowed: the response for the request is already decided and must
        not change because the scratch file could not be removed.
        """
        path = Path(file_path)
        try:
            os.remove(path)
            logger.debug("Cleaned up temp file: %s", path.name)
        except FileNotFoundError:
            logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.error("Error cleaning up temp file %s: %s", path, str(e))

    @asynccontextmanager
    async def staged(self, content: bytes, filename: str) -> AsyncIterator[Path]:
        """
        Stage `content` for the duration of the `async with` block.

        Usage:
            async with file_service.staged(fetched.content, fetched.filename) as path:
                result = await extraction.extract(path)
        """
        path = await self.stage(content, filename)
        try:
            yield path
        finally:
            await self.cleanup_file(path)
