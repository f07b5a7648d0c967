"""S3-backed blob store."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from zoompay_kernel.exceptions import StoreUnavailableError
from zoompay_kernel.logging_config import get_logger

logger = get_logger("storage.s3")


def make_s3_client(
    region: str | None = None,
    endpoint_url: str | None = None,
):
    kwargs: dict[str, Any] = {}
    if region:
        kwargs["region_name"] = region
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return boto3.client("s3", **kwargs)


class S3BlobStore:
    """
    Blob store over one S3 bucket.

    Objects are private; the URL recorded on a document is the stable
    ``s3://bucket/key`` form.  ``presigned_url`` turns one into a
    time-limited download link for display.
    """

    def __init__(
        self,
        bucket: str,
        client=None,
        prefix: str = "",
        region: str | None = None,
        endpoint_url: str | None = None,
    ):
        if not bucket:
            raise ValueError("bucket is required")
        self._bucket = bucket
        self._prefix = prefix.strip("/")
        self._client = client or make_s3_client(region, endpoint_url)

    def _key(self, path: str) -> str:
        path = path.lstrip("/")
        return f"{self._prefix}/{path}" if self._prefix else path

    def _key_from_url(self, url: str) -> str:
        parsed = urlparse(url)
        if parsed.scheme != "s3" or parsed.netloc != self._bucket:
            raise ValueError(f"Not an object of bucket {self._bucket!r}: {url!r}")
        return parsed.path.lstrip("/")

    def put(self, content: bytes, path: str, content_type: str | None = None) -> str:
        key = self._key(path)
        params: dict[str, Any] = {"Bucket": self._bucket, "Key": key, "Body": content}
        if content_type:
            params["ContentType"] = content_type
        try:
            self._client.put_object(**params)
        except (ClientError, BotoCoreError) as exc:
            logger.error(
                "blob_write_failed",
                extra={"bucket": self._bucket, "key": key, "error": str(exc)},
            )
            raise StoreUnavailableError("blob", "put", str(exc)) from exc
        logger.info(
            "blob_stored",
            extra={"bucket": self._bucket, "key": key, "size": len(content)},
        )
        return f"s3://{self._bucket}/{key}"

    def get(self, url: str) -> bytes:
        key = self._key_from_url(url)
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as exc:
            raise StoreUnavailableError("blob", "get", str(exc)) from exc

    def presigned_url(self, url: str, expires_in: int = 900) -> str:
        key = self._key_from_url(url)
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreUnavailableError("blob", "presign", str(exc)) from exc
