"""
services/storage_service.py
---------------------------
S3-compatible object storage for vendor documents.

boto3 is synchronous, so every call runs in a worker thread to keep the
event loop free. Objects are written under "<vendor_id>/<uuid>-<filename>".
"""

import asyncio
import re
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lexcorp.core.config import settings
from lexcorp.core.exceptions import UpstreamServiceError
from lexcorp.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str) -> str:
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "document"


def document_key(vendor_id: str, document_id: str, filename: str) -> str:
    return f"{vendor_id}/{document_id}-{safe_filename(filename)}"


class ObjectStorage:

    def __init__(
        self,
        bucket: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_url: Optional[str] = None,
    ) -> None:
        self.bucket = bucket or settings.STORAGE_BUCKET
        self._endpoint_url = endpoint_url or settings.STORAGE_ENDPOINT_URL or None
        self._public_url = (public_url or settings.STORAGE_PUBLIC_URL).rstrip("/")
        self._client = boto3.client(
            "s3",
            endpoint_url=self._endpoint_url,
            region_name=settings.STORAGE_REGION,
        )

    def public_url(self, key: str) -> str:
        if self._public_url:
            return f"{self._public_url}/{key}"
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{settings.STORAGE_REGION}.amazonaws.com/{key}"

    async def upload(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store `data` under `key` and return its public URL."""
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Storage upload failed", key=key, error=str(exc))
            raise UpstreamServiceError("Document upload failed") from exc
        logger.info("Storage object uploaded", key=key, size=len(data))
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Storage delete failed", key=key, error=str(exc))
            raise UpstreamServiceError("Document removal failed") from exc
        logger.info("Storage object deleted", key=key)
