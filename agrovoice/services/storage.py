"""S3 storage for narration audio artifacts."""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from agrovoice.application.interfaces import ArtifactStoreInterface
from agrovoice.config.settings import settings
from agrovoice.pipelines.errors import ConfigurationError, StorageError
from agrovoice.services.aws import create_boto3_client

logger = logging.getLogger(__name__)


class S3ArtifactStore(ArtifactStoreInterface):
    """Upload public objects to S3 and hand back their canonical URL.

    The URL is always derived from ``public_host``, the bucket and the object
    key. Presigned or response-embedded links are never returned since they
    expire.
    """

    def __init__(
        self,
        client: Any,
        *,
        bucket: str | None,
        public_host: str,
    ) -> None:
        self._client = client
        self._bucket = (bucket or "").strip()
        self._public_host = public_host.strip().rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self._bucket)

    def public_url(self, object_path: str) -> str:
        return f"https://{self._public_host}/{self._bucket}/{object_path.lstrip('/')}"

    async def upload(
        self,
        object_path: str,
        data: bytes,
        *,
        content_type: str,
    ) -> str:
        if not self._bucket:
            raise ConfigurationError("S3 bucket name is not configured.")
        if not data:
            raise StorageError("Audio payload for upload was empty.")

        key = object_path.lstrip("/")
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                ACL="public-read",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("S3 upload failed key=%s", key)
            raise StorageError(f"Failed to upload object {key}: {exc}") from exc

        url = self.public_url(key)
        logger.info("Uploaded %s bytes to %s", len(data), url)
        return url


def get_artifact_store() -> S3ArtifactStore:
    """Return the default artifact store instance."""

    return _DEFAULT_STORE


_DEFAULT_STORE = S3ArtifactStore(
    create_boto3_client("s3", region_name=settings.s3.region),
    bucket=settings.s3.bucket_name,
    public_host=settings.s3.public_host,
)


__all__ = ["S3ArtifactStore", "get_artifact_store"]
