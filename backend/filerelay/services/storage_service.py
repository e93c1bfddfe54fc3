"""
FileRelay — Artifact Storage Service
=====================================

What:  Uploads extraction results to an S3-compatible bucket (storage mode).
Why:   Callers in storage mode get a stable public URL instead of a large
       JSON body.
How:   Serializes the result, writes it under `<timestamp>-converted.json`
       with `put_object`, and joins the key onto `public_base_url`.

Scope:
    One write per successful request. No reads, deletes, listing, retries,
    or read-back verification; the object's lifecycle belongs to the bucket.

Blocking I/O:
    boto3 is synchronous. Client creation and `put_object` run in Starlette's
    threadpool so the event loop keeps serving other requests during the upload.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from filerelay.config import Settings
from filerelay.exceptions import UpstreamServiceError
from filerelay.services.clock import timestamp_ms

logger = logging.getLogger(__name__)

KEY_SUFFIX = "-converted.json"
CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class StoredArtifact:
    key: str
    bucket: str
    public_url: str


class StorageService:
    """Publishes JSON documents to the configured bucket."""

    def __init__(self, settings: Settings, s3_client: Optional[Any] = None):
        """
        Args:
            settings:  Bucket, credentials, endpoint and public base URL.
            s3_client: Pre-built client (tests). Otherwise one is created on
                       first use, after the request has passed the
                       configuration check.
        """
        self.settings = settings
        self._s3 = s3_client

    @property
    def s3(self):
        if self._s3 is None:
            self._s3 = boto3.client(
                "s3",
                endpoint_url=self.settings.s3_endpoint_url,
                aws_access_key_id=self.settings.s3_access_key_id,
                aws_secret_access_key=self.settings.s3_secret_access_key,
                region_name=self.settings.s3_region,
            )
        return self._s3

    @staticmethod
    def new_key() -> str:
        return f"{timestamp_ms()}{KEY_SUFFIX}"

    def public_url_for(self, key: str) -> str:
        return f"{(self.settings.public_base_url or '').rstrip('/')}/{key}"

    def _put_object(self, **kwargs) -> Any:
        """Runs in the threadpool: client construction and the upload both block."""
        return self.s3.put_object(**kwargs)

    async def publish(self, result: Any) -> StoredArtifact:
        """
        Store `result` as JSON and return where it can be fetched.

        Raises:
            UpstreamServiceError if the object store rejects the write or
            cannot be reached.
        """
        body = json.dumps(result).encode("utf-8")
        key = self.new_key()
        bucket = self.settings.s3_bucket

        try:
            await run_in_threadpool(
                self._put_object,
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=CONTENT_TYPE,
            )
        except ClientError as e:
            error = e.response.get("Error", {})
            logger.error(
                "Object store rejected upload (bucket=%s key=%s): %s",
                bucket,
                key,
                error.get("Message") or str(e),
            )
            raise UpstreamServiceError(
                details=error.get("Message") or str(e),
                status_code=e.response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
                context={"stage": "storage", "bucket": bucket, "key": key, "code": error.get("Code")},
            )
        except BotoCoreError as e:
            logger.error("Object store unreachable (bucket=%s key=%s): %s", bucket, key, str(e))
            raise UpstreamServiceError(
                details=str(e),
                context={"stage": "storage", "bucket": bucket, "key": key},
            )

        artifact = StoredArtifact(key=key, bucket=bucket, public_url=self.public_url_for(key))
        logger.info("Stored extraction result (bucket=%s key=%s, %d bytes)", bucket, key, len(body))
        return artifact
