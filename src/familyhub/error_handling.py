"""
Error types and classification for familyhub.

Services raise the :class:`FamilyHubError` subclasses below. Anything that
reaches the UI, ours or not, goes through :func:`handle_error`, which maps
it to an :class:`ErrorInfo` with a message fit to show a family member.
"""

from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from familyhub.logging_config import get_logger, log_error, log_security_event

logger = get_logger(__name__)


class ErrorCategory(Enum):
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    UPLOAD = "upload"
    DATABASE = "database"
    STORAGE = "storage"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


USER_MESSAGES = {
    ErrorCategory.AUTHENTICATION: "Authentication failed. Please sign in again.",
    ErrorCategory.AUTHORIZATION: "You are not allowed to perform this action.",
    ErrorCategory.UPLOAD: "The file could not be uploaded.",
    ErrorCategory.DATABASE: "Family records could not be read or saved.",
    ErrorCategory.STORAGE: "Photo storage is unavailable.",
    ErrorCategory.VALIDATION: "Some of the information entered is not valid.",
    ErrorCategory.NOT_FOUND: "The requested item could not be found.",
    ErrorCategory.NETWORK: "A network error occurred.",
    ErrorCategory.SYSTEM: "A system error occurred.",
    ErrorCategory.UNKNOWN: "Something unexpected went wrong.",
}


@dataclass(frozen=True)
class ErrorInfo:
    """What the UI needs to know about a failure."""

    category: ErrorCategory
    severity: ErrorSeverity
    code: str
    message: str
    user_message: str
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    recoverable: bool = True
    retry_suggested: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.update(
            category=self.category.value,
            severity=self.severity.value,
            timestamp=self.timestamp.isoformat(),
        )
        return data


class FamilyHubError(Exception):
    """
    Base class of application errors.

    Subclasses fix the category, severity and default code; instances are
    logged as soon as they are created.
    """

    category = ErrorCategory.UNKNOWN
    severity = ErrorSeverity.MEDIUM
    default_code = "unknown_error"
    retry_suggested = False
    recoverable = True

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.user_message = user_message or USER_MESSAGES[self.category]
        self.details = dict(details or {})
        self.cause = cause
        self.timestamp = datetime.now()
        self._log()

    def _log(self) -> None:
        context: dict[str, Any] = {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            **self.details,
        }
        if self.cause is not None:
            context["cause"] = repr(self.cause)
        log_error(self, context)
        if self.category in (ErrorCategory.AUTHENTICATION, ErrorCategory.AUTHORIZATION):
            log_security_event(self.category.value, code=self.code)

    def get_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            category=self.category,
            severity=self.severity,
            code=self.code,
            message=str(self),
            user_message=self.user_message,
            details=self.details,
            timestamp=self.timestamp,
            recoverable=self.recoverable,
            retry_suggested=self.retry_suggested,
        )


class AuthenticationError(FamilyHubError):
    category = ErrorCategory.AUTHENTICATION
    severity = ErrorSeverity.HIGH
    default_code = "auth_failed"
    retry_suggested = True


class AuthorizationError(FamilyHubError):
    category = ErrorCategory.AUTHORIZATION
    severity = ErrorSeverity.HIGH
    default_code = "access_denied"


class UploadError(FamilyHubError):
    category = ErrorCategory.UPLOAD
    default_code = "upload_failed"
    retry_suggested = True


class DatabaseError(FamilyHubError):
    """The DuckDB record store rejected a read or write."""

    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.HIGH
    default_code = "database_error"
    retry_suggested = True


class StorageError(FamilyHubError):
    """A GCS object operation failed."""

    category = ErrorCategory.STORAGE
    severity = ErrorSeverity.HIGH
    default_code = "storage_error"
    retry_suggested = True


class ValidationError(FamilyHubError):
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.LOW
    default_code = "validation_failed"


class NotFoundError(FamilyHubError):
    """A record requested by id does not exist."""

    category = ErrorCategory.NOT_FOUND
    severity = ErrorSeverity.LOW
    default_code = "not_found"


class NetworkError(FamilyHubError):
    category = ErrorCategory.NETWORK
    default_code = "network_error"
    retry_suggested = True


class SystemFailure(FamilyHubError):
    """The process itself is in trouble (memory, OS)."""

    category = ErrorCategory.SYSTEM
    severity = ErrorSeverity.CRITICAL
    default_code = "system_error"
    recoverable = False


# Checked in order against the lowercased message; first match wins.
CLASSIFICATION_RULES: list[tuple[tuple[str, ...], type[FamilyHubError]]] = [
    (("authentication", "unauthorized", "login", "jwt", "token"), AuthenticationError),
    (("permission", "access denied", "forbidden", "not allowed"), AuthorizationError),
    (("upload", "file size", "too large"), UploadError),
    (("not found", "does not exist"), NotFoundError),
    (("database", "duckdb", "sql", "query", "catalog"), DatabaseError),
    (("storage", "gcs", "bucket", "blob"), StorageError),
    (("validation", "invalid", "required", "missing"), ValidationError),
    (("network", "connection", "timeout", "unreachable"), NetworkError),
]

SYSTEM_EXCEPTIONS = (SystemError, MemoryError, OSError)


def classify_error(error: Exception, context: dict[str, Any] | None = None) -> FamilyHubError:
    """Wrap a foreign exception in the matching application error."""
    details = {"original_type": type(error).__name__, **(context or {})}
    lowered = str(error).lower()
    for keywords, error_class in CLASSIFICATION_RULES:
        if any(keyword in lowered for keyword in keywords):
            return error_class(str(error), details=details, cause=error)
    if isinstance(error, SYSTEM_EXCEPTIONS):
        return SystemFailure(str(error), details=details, cause=error)
    return FamilyHubError(str(error), details=details, cause=error)


class ErrorHandler:
    """Turns exceptions into ErrorInfo and counts them by code."""

    def __init__(self) -> None:
        self.error_counts: Counter[str] = Counter()

    def handle_error(self, error: Exception, context: dict[str, Any] | None = None) -> ErrorInfo:
        """
        Classify an exception.

        Args:
            error: Exception caught at a UI boundary
            context: Extra fields logged with it, e.g. ``{"operation": "create_memory"}``

        Returns:
            ErrorInfo: Category, severity and user-facing message
        """
        if not isinstance(error, FamilyHubError):
            error = classify_error(error, context)
        info = error.get_error_info()

        self.error_counts[info.code] += 1
        if self.error_counts[info.code] % 10 == 0:
            logger.warning("frequent_error_detected", error_code=info.code, count=self.error_counts[info.code])
        return info

    def get_error_statistics(self) -> dict[str, int]:
        return dict(self.error_counts)

    def reset_statistics(self) -> None:
        self.error_counts.clear()


error_handler = ErrorHandler()


def handle_error(error: Exception, context: dict[str, Any] | None = None) -> ErrorInfo:
    return error_handler.handle_error(error, context)
