"""Storage service for Google Cloud Storage operations.

GCS is the object-store half of the backend: photos and avatars are written
to the photos bucket by path and referenced from records by public URL. A
second, optional bucket holds the DuckDB file between container restarts.
"""

from datetime import datetime
from pathlib import Path

from google.cloud import storage  # type: ignore[attr-defined]
from google.cloud.exceptions import GoogleCloudError

from ..config import get_config
from ..error_handling import StorageError
from ..logging_config import get_logger

logger = get_logger(__name__)

DATABASE_OBJECT_PATH = "databases/family.db"

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


def guess_content_type(filename: str) -> str:
    """
    Determine content type from filename.

    Args:
        filename: File name

    Returns:
        str: MIME content type, ``application/octet-stream`` when unknown
    """
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


def sanitize_object_path(path: str) -> str:
    """
    Normalise a caller-supplied object path.

    Leading slashes and ``.``/``..`` segments are dropped so callers cannot
    escape their prefix.

    Raises:
        StorageError: If nothing usable remains
    """
    parts = [part for part in path.replace("\\", "/").split("/") if part not in ("", ".", "..")]
    if not parts:
        raise StorageError(f"Invalid object path: {path!r}", code="invalid_object_path")
    return "/".join(parts)


class StorageService:
    """Service for Google Cloud Storage operations."""

    def __init__(
        self,
        bucket_name: str | None = None,
        project_id: str | None = None,
        database_bucket_name: str | None = None,
    ) -> None:
        """
        Initialize the storage service.

        Args:
            bucket_name: Photos bucket (defaults to GCS_PHOTOS_BUCKET)
            project_id: GCP project ID (defaults to GOOGLE_CLOUD_PROJECT)
            database_bucket_name: Database backup bucket (defaults to GCS_DATABASE_BUCKET, optional)

        Raises:
            StorageError: If required configuration is missing or the client cannot be created
        """
        config = get_config()
        self.photos_bucket_name = bucket_name or config.get("GCS_PHOTOS_BUCKET")
        self.project_id = project_id or config.get("GOOGLE_CLOUD_PROJECT")
        self.database_bucket_name = database_bucket_name or config.get("GCS_DATABASE_BUCKET")
        self.cache_control = config.get("GCS_CACHE_CONTROL", "public, max-age=3600")

        if not self.photos_bucket_name:
            raise StorageError("GCS_PHOTOS_BUCKET environment variable is required", code="storage_not_configured")
        if not self.project_id:
            raise StorageError("GOOGLE_CLOUD_PROJECT environment variable is required", code="storage_not_configured")

        try:
            self.client = storage.Client(project=self.project_id)
            self.photos_bucket = self.client.bucket(self.photos_bucket_name)
            self.database_bucket = (
                self.client.bucket(self.database_bucket_name) if self.database_bucket_name else None
            )
        except Exception as e:
            raise StorageError(f"Failed to initialize GCS client: {e}", cause=e) from e

        logger.info(
            "storage_service_initialized",
            photos_bucket=self.photos_bucket_name,
            database_bucket=self.database_bucket_name,
            project_id=self.project_id,
        )

    def upload_file(self, path: str, file_data: bytes, content_type: str | None = None) -> dict:
        """
        Store raw bytes at ``path`` in the photos bucket.

        Args:
            path: Object path inside the bucket (e.g. ``photos/<uuid>.jpg``)
            file_data: Raw file contents
            content_type: MIME type, guessed from the path when omitted

        Returns:
            dict: ``path``, ``public_url``, ``file_size`` and ``content_type``

        Raises:
            StorageError: If the upload fails
        """
        gcs_path = sanitize_object_path(path)
        content_type = content_type or guess_content_type(gcs_path)

        try:
            blob = self.photos_bucket.blob(gcs_path)
            blob.metadata = {
                "uploaded_at": datetime.now().isoformat(),
                "file_size": str(len(file_data)),
            }
            blob.cache_control = self.cache_control
            blob.upload_from_string(file_data, content_type=content_type)

            logger.info("file_uploaded", path=gcs_path, file_size=len(file_data), content_type=content_type)

            return {
                "path": gcs_path,
                "public_url": self.get_public_url(gcs_path),
                "file_size": len(file_data),
                "content_type": content_type,
            }

        except GoogleCloudError as e:
            raise StorageError(f"Failed to upload '{gcs_path}': {e}", cause=e) from e
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Unexpected error uploading '{gcs_path}': {e}", cause=e) from e

    def get_public_url(self, path: str) -> str:
        """
        Resolve the public URL for an object in the photos bucket.

        The bucket is expected to grant public read, so the URL does not expire.
        """
        blob = self.photos_bucket.blob(sanitize_object_path(path))
        public_url: str = blob.public_url
        return public_url

    def check_bucket_exists(self) -> bool:
        """Check whether the photos bucket is reachable."""
        try:
            exists: bool = self.photos_bucket.exists()
            return exists
        except GoogleCloudError as e:
            logger.error("bucket_check_failed", bucket=self.photos_bucket_name, error=str(e))
            return False

    def has_database_backup(self) -> bool:
        """Whether a database bucket is configured."""
        return self.database_bucket is not None

    def upload_database_file(self, file_data: bytes) -> dict[str, str]:
        """
        Copy the DuckDB file to the database bucket.

        Raises:
            StorageError: If no database bucket is configured or the upload fails
        """
        if self.database_bucket is None:
            raise StorageError("Database bucket not configured", code="database_bucket_missing")

        try:
            blob = self.database_bucket.blob(DATABASE_OBJECT_PATH)
            blob.metadata = {"upload_timestamp": datetime.now().isoformat(), "file_type": "database"}
            blob.upload_from_string(file_data, content_type="application/octet-stream")

            logger.info(
                "database_file_uploaded",
                gcs_path=DATABASE_OBJECT_PATH,
                bucket=self.database_bucket_name,
                file_size=len(file_data),
            )
            return {
                "gcs_path": DATABASE_OBJECT_PATH,
                "bucket": str(self.database_bucket_name),
                "file_size": str(len(file_data)),
            }

        except GoogleCloudError as e:
            logger.error("database_upload_failed", error=str(e))
            raise StorageError(f"Failed to upload database file: {e}", cause=e) from e

    def download_database_file(self) -> bytes | None:
        """
        Fetch the DuckDB file from the database bucket.

        Returns:
            bytes: Database file data, or None if no backup exists yet

        Raises:
            StorageError: If no database bucket is configured or the download fails
        """
        if self.database_bucket is None:
            raise StorageError("Database bucket not configured", code="database_bucket_missing")

        try:
            blob = self.database_bucket.blob(DATABASE_OBJECT_PATH)
            if not blob.exists():
                logger.info("database_backup_not_found", gcs_path=DATABASE_OBJECT_PATH)
                return None

            file_data: bytes = blob.download_as_bytes()
            logger.info("database_file_downloaded", gcs_path=DATABASE_OBJECT_PATH, file_size=len(file_data))
            return file_data

        except GoogleCloudError as e:
            logger.error("database_download_failed", error=str(e))
            raise StorageError(f"Failed to download database file: {e}", cause=e) from e


_storage_service: StorageService | None = None


def get_storage_service() -> StorageService:
    """
    Get the global storage service instance.

    Returns:
        StorageService: Global storage service instance
    """
    global _storage_service

    if _storage_service is None:
        _storage_service = StorageService()

    return _storage_service
