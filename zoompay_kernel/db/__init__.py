"""Database layer - engine, base classes, types and the document store."""

from zoompay_kernel.db.base import UUID, Base, TrackedBase, UTCDateTime, UUIDString
from zoompay_kernel.db.document_store import (
    DocumentStore,
    Filter,
    OrderBy,
    SqlDocumentStore,
)
from zoompay_kernel.db.engine import create_tables, get_engine, get_session

__all__ = [
    "get_engine",
    "get_session",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UTCDateTime",
    "UUID",
    "DocumentStore",
    "Filter",
    "OrderBy",
    "SqlDocumentStore",
]
