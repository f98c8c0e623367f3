"""Durable blob storage backends."""

from frugal.storage.base import BlobStore, StorageResult, create_blob_store

__all__ = ["BlobStore", "StorageResult", "create_blob_store"]
