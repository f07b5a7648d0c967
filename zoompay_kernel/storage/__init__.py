"""Blob storage adapters."""

from zoompay_kernel.storage.blob_store import (
    BlobCategory,
    BlobStore,
    LocalBlobStore,
    build_blob_path,
)

__all__ = ["BlobCategory", "BlobStore", "LocalBlobStore", "build_blob_path"]
