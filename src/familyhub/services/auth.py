"""Authentication service for familyhub.

In production the app sits behind Cloud IAP, which forwards a signed JWT in
the ``X-Goog-IAP-JWT-Assertion`` header. The only policy the app enforces is
"a user is signed in"; every signed-in family member sees everything.
"""

import base64
import binascii
import html
import json
import os
from dataclasses import dataclass
from typing import Any

from ..config import get_config
from ..error_handling import AuthenticationError
from ..logging_config import get_logger, log_security_event, log_user_action

logger = get_logger(__name__)

IAP_ASSERTION_HEADER = "X-Goog-IAP-JWT-Assertion"

DEFAULT_DEV_EMAIL = "dev@example.com"
DEFAULT_DEV_USER_ID = "dev-user-123"


@dataclass
class UserInfo:
    """A signed-in family member."""

    user_id: str
    email: str
    name: str | None = None
    picture: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]


def find_header(headers: dict[str, str], name: str) -> str | None:
    """Case-insensitive header lookup; proxies may lowercase header names."""
    wanted = name.lower()
    return next((value for key, value in headers.items() if key.lower() == wanted), None)


def decode_assertion_claims(token: str) -> dict[str, Any]:
    """
    Read the claims of an IAP assertion.

    IAP has already verified the signature before the request reaches the
    container, so only the payload segment is decoded.

    Raises:
        ValueError: If the token is not a three-part JWT with a JSON payload
    """
    segments = token.split(".")
    if len(segments) != 3:
        raise ValueError("Invalid JWT token format")
    payload = segments[1] + "=" * (-len(segments[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload))
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Failed to decode JWT payload: {e}") from e
    if not isinstance(claims, dict):
        raise ValueError("JWT payload is not an object")
    return claims


def user_from_claims(claims: dict[str, Any]) -> UserInfo:
    """
    Build a user from IAP claims, escaping everything that ends up in HTML.

    Raises:
        ValueError: If ``email`` or ``sub`` is missing
    """
    email, subject = claims.get("email"), claims.get("sub")
    if not email:
        raise ValueError("Email not found in JWT payload")
    if not subject:
        raise ValueError("Subject (user ID) not found in JWT payload")

    # IAP prefixes identities with the issuer, e.g. "accounts.google.com:rose@example.com".
    email = str(email).rsplit(":", 1)[-1]
    name, picture = claims.get("name"), claims.get("picture")
    return UserInfo(
        user_id=html.escape(str(subject)),
        email=html.escape(email),
        name=html.escape(str(name)) if name else None,
        picture=str(picture) if picture else None,
    )


class CloudIAPAuthService:
    """Tracks the signed-in user of one browser session."""

    IAP_HEADER_NAME = IAP_ASSERTION_HEADER

    def __init__(self) -> None:
        self._current_user: UserInfo | None = None
        self._development_mode = get_config().is_development()
        if self._development_mode:
            logger.info("development_auth_mode_enabled")

    @property
    def development_mode(self) -> bool:
        return self._development_mode

    def get_development_user(self) -> UserInfo:
        """Default identity for the development sign-in form (DEV_USER_* variables)."""
        email = os.getenv("DEV_USER_EMAIL", DEFAULT_DEV_EMAIL)
        if "@" not in email:
            logger.warning("invalid_dev_user_email", email=email)
            email = DEFAULT_DEV_EMAIL
        user_id = os.getenv("DEV_USER_ID", DEFAULT_DEV_USER_ID).strip() or DEFAULT_DEV_USER_ID
        name = os.getenv("DEV_USER_NAME", "Development User").strip()
        return UserInfo(user_id=user_id, email=email, name=name or None)

    def parse_iap_header(self, headers: dict[str, str]) -> UserInfo | None:
        """Extract the user from the IAP assertion header, or None if it is absent or malformed."""
        token = find_header(headers, self.IAP_HEADER_NAME)
        if not token:
            log_security_event("missing_iap_header", headers_present=sorted(headers))
            return None
        try:
            user_info = user_from_claims(decode_assertion_claims(token))
        except ValueError as e:
            log_security_event("authentication_failure", error=str(e))
            return None
        log_user_action(user_info.user_id, "authentication_success", email=user_info.email)
        return user_info

    def authenticate_request(self, headers: dict[str, str]) -> UserInfo | None:
        """
        Replace the current user with the one named by the request headers.

        A request without a valid assertion signs the session out.
        """
        self._current_user = self.parse_iap_header(headers)
        if self._current_user:
            logger.info("request_authenticated", user_id=self._current_user.user_id)
        return self._current_user

    def get_current_user(self) -> UserInfo | None:
        return self._current_user

    def is_authenticated(self) -> bool:
        return self._current_user is not None

    def set_current_user(self, user_info: UserInfo | None) -> None:
        """Sign a user in directly (development sign-in)."""
        self._current_user = user_info
        if user_info:
            log_user_action(user_info.user_id, "user_set", email=user_info.email)

    def clear_authentication(self) -> None:
        previous = self._current_user
        self._current_user = None
        log_user_action(previous.user_id if previous else "unknown", "authentication_cleared")

    def ensure_authenticated(self) -> UserInfo:
        """
        Raises:
            AuthenticationError: If no user is signed in
        """
        if self._current_user is None:
            raise AuthenticationError("User is not authenticated", code="user_not_authenticated")
        return self._current_user
