"""
Photo upload sidecar.

Stateless pass-through to an S3-compatible object store: the file gets a
timestamp-qualified key, is written with `put_object`, and the caller gets
back a public URL plus the key. No retries; a failed upload surfaces once.
"""
from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from wishboard.core.config import Settings
from wishboard.core.errors import InvalidUploadError, UploadFailedError, UploadNotConfiguredError

logger = logging.getLogger(__name__)

_EXT_RE = re.compile(r"^[a-z0-9]{1,10}$")


@dataclass
class StoredUpload:
    url: str
    pathname: str


def file_extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return "bin"
    ext = filename.rsplit(".", 1)[1].lower()
    return ext if _EXT_RE.match(ext) else "bin"


class ObjectStoreUploader:

    def __init__(
        self,
        bucket: str,
        prefix: str = "memories",
        public_base_url: str = "",
        region: str = "us-east-1",
        endpoint_url: str = "",
        max_bytes: int = 10 * 1024 * 1024,
        client: Any = None,
    ):
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.public_base_url = public_base_url.rstrip("/")
        self.region = region
        self.endpoint_url = endpoint_url.rstrip("/")
        self.max_bytes = max_bytes
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStoreUploader":
        return cls(
            bucket=settings.UPLOAD_BUCKET,
            prefix=settings.UPLOAD_PREFIX,
            public_base_url=settings.UPLOAD_PUBLIC_BASE_URL,
            region=settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            max_bytes=settings.UPLOAD_MAX_BYTES,
        )

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url or None,
            )
        return self._client

    def build_key(self, filename: Optional[str], now_ms: Optional[int] = None) -> str:
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        name = f"{stamp}-{uuid.uuid4().hex[:8]}.{file_extension(filename)}"
        return f"{self.prefix}/{name}" if self.prefix else name

    def public_url(self, key: str) -> str:
        quoted = quote(key)
        if self.public_base_url:
            return f"{self.public_base_url}/{quoted}"
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/{quoted}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quoted}"

    def upload(
        self,
        data: bytes,
        filename: Optional[str],
        content_type: Optional[str] = None,
    ) -> StoredUpload:
        if not self.bucket:
            raise UploadNotConfiguredError()
        if not data:
            raise InvalidUploadError("Uploaded file is empty.")
        if len(data) > self.max_bytes:
            raise InvalidUploadError(
                f"File exceeds maximum size of {self.max_bytes} bytes.",
                details={"max_bytes": self.max_bytes, "received": len(data)},
            )

        key = self.build_key(filename)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Upload of %s to bucket %s failed: %s", key, self.bucket, exc)
            raise UploadFailedError(message=str(exc), key=key) from exc

        logger.info("Stored upload %s (%d bytes)", key, len(data))
        return StoredUpload(url=self.public_url(key), pathname=key)
