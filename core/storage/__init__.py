"""Persistence: record repositories and uploaded-file storage."""

from .blob_store import LocalBlobStore
from .repositories import Store, build_memory_store, build_postgres_store, ensure_tables

__all__ = [
    "LocalBlobStore",
    "Store",
    "build_memory_store",
    "build_postgres_store",
    "ensure_tables",
]
