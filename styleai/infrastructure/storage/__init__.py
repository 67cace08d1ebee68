"""
Object storage integration for clothing photos.

Supports R2 (Cloudflare) and S3 (AWS) via S3-compatible API.
Includes mock mode for local development without credentials.
"""

from .client import (
    MockStorageClient,
    PhotoStorage,
    R2StorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

__all__ = [
    "MockStorageClient",
    "PhotoStorage",
    "R2StorageClient",
    "StorageConfig",
    "StorageError",
    "create_storage_client",
]
