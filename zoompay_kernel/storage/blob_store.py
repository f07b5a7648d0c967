"""
Blob storage for uploaded documents (``zoompay_kernel.storage.blob_store``).

Receipt images, voucher documents and payment proofs are written once and
referenced from records by URL.  ``BlobStore`` is the protocol the lifecycle
engine depends on; ``LocalBlobStore`` keeps blobs on the filesystem and
``zoompay_kernel.storage.s3.S3BlobStore`` in an S3 bucket.

Paths follow ``{category}/{timestamp_ms}-{token}.{ext}`` so that two uploads
never collide.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

from zoompay_kernel.exceptions import StoreUnavailableError
from zoompay_kernel.logging_config import get_logger

logger = get_logger("storage.blob_store")

_TOKEN_SAFE_RE = re.compile(r"[^A-Za-z0-9_-]+")


class BlobCategory(str, Enum):
    RECEIPTS = "receipts"
    VOUCHERS = "vouchers"
    PAYMENT_PROOFS = "payment_proofs"


def build_blob_path(
    category: BlobCategory | str, millis: int, token: str, extension: str
) -> str:
    """``receipts/1718000000000-a1b2c3d4.jpg`` style object path."""
    category = BlobCategory(category).value
    safe_token = _TOKEN_SAFE_RE.sub("_", token.strip()) or "blob"
    ext = extension.lstrip(".").lower() or "bin"
    return f"{category}/{millis}-{safe_token}.{ext}"


class BlobStore(Protocol):
    def put(self, content: bytes, path: str, content_type: str | None = None) -> str:
        """Store ``content`` at ``path`` and return its download URL."""
        ...

    def get(self, url: str) -> bytes:
        """Read back the blob a previous ``put`` returned ``url`` for."""
        ...


class LocalBlobStore:
    """
    Filesystem blob store rooted at a directory.

    URLs are ``file://`` URIs.  ``get`` refuses URLs that resolve outside
    the root.
    """

    def __init__(self, root: str | os.PathLike[str]):
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if self._root != target and self._root not in target.parents:
            raise ValueError(f"Blob path escapes the store root: {path!r}")
        return target

    def put(self, content: bytes, path: str, content_type: str | None = None) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            logger.error(
                "blob_write_failed", extra={"path": path, "error": str(exc)}
            )
            raise StoreUnavailableError("blob", "put", str(exc)) from exc
        logger.info(
            "blob_stored",
            extra={"path": path, "size": len(content), "content_type": content_type},
        )
        return target.as_uri()

    def get(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme != "file":
            raise ValueError(f"Not a local blob URL: {url!r}")
        target = Path(unquote(parsed.path)).resolve()
        if self._root not in target.parents:
            raise ValueError(f"Blob URL outside the store root: {url!r}")
        try:
            return target.read_bytes()
        except OSError as exc:
            raise StoreUnavailableError("blob", "get", str(exc)) from exc
