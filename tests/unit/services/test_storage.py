"""
Unit tests for storage service.
"""

from unittest.mock import MagicMock, patch

import pytest
from google.cloud.exceptions import GoogleCloudError

from familyhub.error_handling import StorageError
from familyhub.services.storage import (
    DATABASE_OBJECT_PATH,
    StorageService,
    guess_content_type,
    sanitize_object_path,
)


@pytest.fixture
def mock_client():
    with patch("familyhub.services.storage.storage.Client") as mock_client_class:
        client = MagicMock()
        mock_client_class.return_value = client
        yield client


@pytest.mark.unit
class TestHelpers:
    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("photo.JPG", "image/jpeg"),
            ("photo.png", "image/png"),
            ("photo.heic", "image/heic"),
            ("notes.txt", "application/octet-stream"),
            ("noextension", "application/octet-stream"),
        ],
    )
    def test_guess_content_type(self, filename, expected):
        assert guess_content_type(filename) == expected

    def test_sanitize_object_path(self):
        assert sanitize_object_path("/photos//a.jpg") == "photos/a.jpg"
        assert sanitize_object_path("photos/../../etc/passwd") == "photos/etc/passwd"
        assert sanitize_object_path("avatars\\me.png") == "avatars/me.png"

    def test_sanitize_rejects_empty_path(self):
        with pytest.raises(StorageError):
            sanitize_object_path("/../")


@pytest.mark.unit
class TestStorageService:
    def test_init_success(self, mock_client):
        service = StorageService()

        assert service.photos_bucket_name == "test-photos-bucket"
        assert service.database_bucket_name == "test-database-bucket"
        assert service.project_id == "test-project"
        assert service.has_database_backup()

    def test_init_missing_bucket_name(self, monkeypatch, mock_client):
        monkeypatch.delenv("GCS_PHOTOS_BUCKET")

        with pytest.raises(StorageError, match="GCS_PHOTOS_BUCKET environment variable is required"):
            StorageService()

    def test_init_without_database_bucket(self, monkeypatch, mock_client):
        monkeypatch.delenv("GCS_DATABASE_BUCKET")

        service = StorageService()

        assert not service.has_database_backup()
        with pytest.raises(StorageError):
            service.upload_database_file(b"data")

    def test_init_client_error(self):
        with patch("familyhub.services.storage.storage.Client", side_effect=Exception("no credentials")):
            with pytest.raises(StorageError, match="Failed to initialize GCS client"):
                StorageService()

    def test_upload_file(self, mock_client):
        blob = MagicMock()
        blob.public_url = "https://storage.googleapis.com/test-photos-bucket/photos/a.png"
        mock_client.bucket.return_value.blob.return_value = blob
        service = StorageService()

        result = service.upload_file("/photos/a.png", b"data")

        blob.upload_from_string.assert_called_once_with(b"data", content_type="image/png")
        assert result["path"] == "photos/a.png"
        assert result["public_url"] == blob.public_url
        assert result["file_size"] == 4

    def test_upload_file_error(self, mock_client):
        blob = MagicMock()
        blob.upload_from_string.side_effect = GoogleCloudError("quota exceeded")
        mock_client.bucket.return_value.blob.return_value = blob
        service = StorageService()

        with pytest.raises(StorageError, match="Failed to upload"):
            service.upload_file("photos/a.png", b"data", "image/png")

    def test_database_round_trip_paths(self, mock_client):
        blob = MagicMock()
        blob.exists.return_value = True
        blob.download_as_bytes.return_value = b"db"
        mock_client.bucket.return_value.blob.return_value = blob
        service = StorageService()

        service.upload_database_file(b"db")
        assert service.download_database_file() == b"db"

        mock_client.bucket.return_value.blob.assert_any_call(DATABASE_OBJECT_PATH)

    def test_download_without_backup(self, mock_client):
        blob = MagicMock()
        blob.exists.return_value = False
        mock_client.bucket.return_value.blob.return_value = blob

        assert StorageService().download_database_file() is None
