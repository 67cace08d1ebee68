"""
Object storage client for clothing photos.

Supports Cloudflare R2 (S3-compatible) with mock mode for local development.
Photos live under a per-user prefix ({user_id}/{uuid}{ext}) so one user's
objects are never addressable through another user's rows.

Mock mode stores photos in memory, enabling API testing without
provisioning actual object storage.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """Configuration for R2/S3-compatible storage."""
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: str
    region: str = "auto"  # R2 uses 'auto' for region


def build_photo_path(user_id: str, filename: str) -> str:
    """Storage key for a user's photo."""
    return f"{user_id}/{filename}"


class PhotoStorage(Protocol):
    """
    Protocol for photo storage operations.

    Using a protocol means tests can provide mocks and we can
    swap storage backends without changing dependent code.
    """

    async def upload_photo(
        self,
        photo_data: bytes,
        user_id: str,
        filename: str,
        content_type: str,
    ) -> str:
        """Upload photo and return storage path."""
        ...

    async def delete_photos(self, storage_paths: list[str]) -> int:
        """Delete photos by storage path. Returns count deleted."""
        ...

    async def get_presigned_url(
        self,
        storage_path: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Generate temporary download URL."""
        ...


class R2StorageClient:
    """
    Cloudflare R2 object storage client.

    Uses boto3 because R2 is S3-compatible. All methods are async to match
    the Protocol even though boto3 is synchronous.
    """

    def __init__(self, config: StorageConfig) -> None:
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for R2 storage. Install with: pip install boto3"
            )

        self._config = config

        # R2 requires v4 signatures and path-style addressing
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized R2 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    async def upload_photo(
        self,
        photo_data: bytes,
        user_id: str,
        filename: str,
        content_type: str,
    ) -> str:
        """
        Upload a photo to R2 storage.

        Never overwrites: filenames are fresh UUIDs chosen by the caller.
        """
        storage_path = build_photo_path(user_id, filename)

        try:
            self._s3_client.put_object(
                Bucket=self._config.bucket_name,
                Key=storage_path,
                Body=photo_data,
                ContentType=content_type,
                Metadata={
                    'user-id': user_id,
                }
            )

            logger.debug(
                "Uploaded photo",
                extra={
                    "user_id": user_id,
                    "storage_path": storage_path,
                    "size_bytes": len(photo_data),
                }
            )

            return storage_path

        except Exception as e:
            logger.error(
                "Failed to upload photo",
                extra={"user_id": user_id, "storage_path": storage_path, "error": str(e)}
            )
            raise StorageError(f"Upload failed: {e}")

    async def delete_photos(self, storage_paths: list[str]) -> int:
        """Delete photos in one batch request. Returns count deleted."""
        if not storage_paths:
            return 0

        try:
            self._s3_client.delete_objects(
                Bucket=self._config.bucket_name,
                Delete={'Objects': [{'Key': path} for path in storage_paths]}
            )

            logger.info("Deleted photos", extra={"count": len(storage_paths)})

            return len(storage_paths)

        except Exception as e:
            logger.error(
                "Failed to delete photos",
                extra={"storage_paths": storage_paths, "error": str(e)}
            )
            raise StorageError(f"Delete failed: {e}")

    async def get_presigned_url(
        self,
        storage_path: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """
        Generate a temporary download URL.

        The bucket is private; clients only ever see photos through these.
        """
        try:
            return self._s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': storage_path,
                },
                ExpiresIn=expiry_seconds,
            )

        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"storage_path": storage_path, "error": str(e)}
            )
            raise StorageError(f"Presigned URL generation failed: {e}")


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development.

    Photos are stored in a dictionary and "URLs" are mock URIs.
    Not suitable for production, but perfect for development and testing.
    """

    def __init__(self) -> None:
        self._photos: dict[str, bytes] = {}
        self._content_types: dict[str, str] = {}
        logger.info("Initialized mock storage client (in-memory)")

    async def upload_photo(
        self,
        photo_data: bytes,
        user_id: str,
        filename: str,
        content_type: str,
    ) -> str:
        storage_path = build_photo_path(user_id, filename)
        if storage_path in self._photos:
            raise StorageError(f"Object already exists: {storage_path}")

        self._photos[storage_path] = photo_data
        self._content_types[storage_path] = content_type

        logger.debug(
            "Stored photo in mock storage",
            extra={"storage_path": storage_path, "size_bytes": len(photo_data)}
        )

        return storage_path

    async def delete_photos(self, storage_paths: list[str]) -> int:
        deleted = 0
        for path in storage_paths:
            if self._photos.pop(path, None) is not None:
                self._content_types.pop(path, None)
                deleted += 1
        return deleted

    async def get_presigned_url(
        self,
        storage_path: str,
        expiry_seconds: int = 3600,
    ) -> str:
        if storage_path not in self._photos:
            raise StorageError(f"Photo not found: {storage_path}")

        return f"mock://storage/{storage_path}?expires_in={expiry_seconds}"

    def has_photo(self, storage_path: str) -> bool:
        """Test helper: whether a photo is currently stored."""
        return storage_path in self._photos


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> PhotoStorage:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        PhotoStorage implementation (R2 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return R2StorageClient(config)
