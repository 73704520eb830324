"""
Unit tests for error classification.
"""

import pytest

from familyhub.error_handling import (
    AuthenticationError,
    DatabaseError,
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    FamilyHubError,
    NotFoundError,
    StorageError,
    ValidationError,
    handle_error,
)
from familyhub.ui.handlers.lightbox import PhotoNotInViewError


@pytest.mark.unit
class TestFamilyHubError:
    def test_categorized_defaults(self):
        error = StorageError("bucket gone")

        assert error.category == ErrorCategory.STORAGE
        assert error.severity == ErrorSeverity.HIGH
        assert error.code == "storage_error"
        assert error.retry_suggested
        assert error.user_message == "Photo storage is unavailable."

    def test_custom_user_message_and_code(self):
        error = ValidationError("bad", code="title_missing", user_message="Please add a title.")

        info = error.get_error_info()

        assert info.code == "title_missing"
        assert info.user_message == "Please add a title."
        assert info.to_dict()["category"] == "validation"

    def test_photo_not_in_view_is_validation(self):
        error = PhotoNotInViewError("gone")

        assert error.category == ErrorCategory.VALIDATION
        assert error.code == "photo_not_in_view"


@pytest.mark.unit
class TestErrorHandler:
    @pytest.mark.parametrize(
        "message,category",
        [
            ("JWT token expired", ErrorCategory.AUTHENTICATION),
            ("Permission denied for bucket", ErrorCategory.AUTHORIZATION),
            ("Record does not exist", ErrorCategory.NOT_FOUND),
            ("DuckDB catalog error", ErrorCategory.DATABASE),
            ("GCS blob missing metadata", ErrorCategory.STORAGE),
            ("Connection reset by peer", ErrorCategory.NETWORK),
            ("something odd", ErrorCategory.UNKNOWN),
        ],
    )
    def test_classification(self, message, category):
        info = ErrorHandler().handle_error(RuntimeError(message))

        assert info.category == category

    def test_system_errors_are_not_recoverable(self):
        info = ErrorHandler().handle_error(MemoryError("out of memory"))

        assert info.category == ErrorCategory.SYSTEM
        assert not info.recoverable

    def test_known_errors_pass_through(self):
        error = NotFoundError("member m1", code="member_not_found")

        assert handle_error(error).code == "member_not_found"

    def test_statistics(self):
        handler = ErrorHandler()
        handler.handle_error(DatabaseError("a"))
        handler.handle_error(DatabaseError("b"))
        handler.handle_error(AuthenticationError("c"))

        assert handler.get_error_statistics() == {"database_error": 2, "auth_failed": 1}

        handler.reset_statistics()
        assert handler.get_error_statistics() == {}

    def test_base_error_default_message(self):
        assert FamilyHubError("boom").user_message == "Something unexpected went wrong."
