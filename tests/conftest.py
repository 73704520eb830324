"""
Pytest configuration and fixtures for familyhub tests.
"""

import base64
import json
import tempfile
import time
from collections.abc import Generator
from datetime import date, datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from familyhub.config import get_config
from familyhub.models.family import EventType, FamilyEvent, FamilyMember, FamilyPhoto, PhotoCategory, new_id
from familyhub.services.auth import UserInfo

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class SessionState(dict):
    """Dictionary with attribute access, standing in for ``st.session_state``."""

    def __getattr__(self, key: str) -> Any:
        try:
            return self[key]
        except KeyError as e:
            raise AttributeError(key) from e

    def __setattr__(self, key: str, value: Any) -> None:
        self[key] = value

    def __delattr__(self, key: str) -> None:
        del self[key]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_image_data() -> bytes:
    """Provide sample image data for testing."""
    return PNG_BYTES


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Set up test environment variables."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("GCS_PHOTOS_BUCKET", "test-photos-bucket")
    monkeypatch.setenv("GCS_DATABASE_BUCKET", "test-database-bucket")
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
    monkeypatch.setenv("FAMILYHUB_DATABASE_BACKUP", "false")
    get_config().clear_cache()
    yield
    get_config().clear_cache()


@pytest.fixture
def session_state() -> Generator[SessionState, None, None]:
    """Replace ``st.session_state`` with an empty in-memory state."""
    state = SessionState()
    with patch("streamlit.session_state", state):
        yield state


@pytest.fixture
def mock_notifier() -> MagicMock:
    """Notifier that records notifications instead of showing toasts."""
    return MagicMock()


class TestDataFactory:
    """Factory class for creating test data objects."""

    @staticmethod
    def create_user_info(
        user_id: str = "test-user-123",
        email: str = "test@example.com",
        name: str | None = "Test User",
    ) -> UserInfo:
        return UserInfo(user_id=user_id, email=email, name=name)

    @staticmethod
    def create_jwt_payload(
        user_id: str = "test-user-123",
        email: str = "test@example.com",
        name: str | None = "Test User",
        iss: str = "https://cloud.google.com/iap",
    ) -> dict:
        """Create a JWT payload as Cloud IAP would send it."""
        current_time = int(time.time())
        payload = {
            "sub": user_id,
            "email": email,
            "iss": iss,
            "aud": "/projects/123456789/global/backendServices/test-service",
            "iat": current_time,
            "exp": current_time + 3600,
        }
        if name is not None:
            payload["name"] = name
        return payload

    @staticmethod
    def create_valid_jwt_token(payload: dict | None = None) -> str:
        """Create a structurally valid JWT with a dummy signature."""
        if payload is None:
            payload = TestDataFactory.create_jwt_payload()

        header = {"alg": "ES256", "typ": "JWT"}
        header_b64 = base64.urlsafe_b64encode(json.dumps(header).encode()).decode().rstrip("=")
        payload_b64 = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip("=")
        signature_b64 = base64.urlsafe_b64encode(b"test-signature").decode().rstrip("=")
        return f"{header_b64}.{payload_b64}.{signature_b64}"

    @staticmethod
    def create_iap_headers(**kwargs: Any) -> dict[str, str]:
        payload = TestDataFactory.create_jwt_payload(**kwargs)
        return {"X-Goog-IAP-JWT-Assertion": TestDataFactory.create_valid_jwt_token(payload)}

    @staticmethod
    def create_member(name: str = "Rose Miller", **kwargs: Any) -> FamilyMember:
        return FamilyMember(id=kwargs.pop("id", new_id()), name=name, **kwargs)

    @staticmethod
    def create_photo(title: str = "Beach Day", **kwargs: Any) -> FamilyPhoto:
        return FamilyPhoto(
            id=kwargs.pop("id", new_id()),
            title=title,
            image_url=kwargs.pop("image_url", f"https://storage.googleapis.com/test-photos-bucket/photos/{title}.jpg"),
            **kwargs,
        )

    @staticmethod
    def create_event(title: str = "Summer Reunion", event_date: datetime | None = None, **kwargs: Any) -> FamilyEvent:
        return FamilyEvent(
            id=kwargs.pop("id", new_id()),
            title=title,
            event_date=event_date or datetime(2024, 7, 4, 12, 0),
            event_type=kwargs.pop("event_type", EventType.OTHER),
            **kwargs,
        )

    @staticmethod
    def create_category(name: str = "Holidays", **kwargs: Any) -> PhotoCategory:
        return PhotoCategory(id=kwargs.pop("id", new_id()), name=name, **kwargs)

    @staticmethod
    def member_values(name: str = "Rose Miller", **overrides: Any) -> dict[str, Any]:
        """Insert values for a member record."""
        values = {
            "name": name,
            "relationship": "Grandmother",
            "birthday": date(1950, 3, 4),
            "bio": "Keeper of the family recipes.",
            "fun_facts": ["Bakes bread every Sunday"],
        }
        values.update(overrides)
        return values


@pytest.fixture
def test_data_factory() -> TestDataFactory:
    """Provide TestDataFactory instance for tests."""
    return TestDataFactory()
