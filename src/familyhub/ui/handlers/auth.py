"""Authentication handlers for familyhub."""

import streamlit as st

from ...error_handling import AuthenticationError
from ...logging_config import get_logger
from ...services.auth import CloudIAPAuthService, UserInfo
from ..components.common import render_error_message
from ..dev_auth import render_dev_auth_ui, setup_dev_auth_middleware

logger = get_logger(__name__)


def get_session_auth_service() -> CloudIAPAuthService:
    """Authentication service of the current browser session."""
    if "auth_service" not in st.session_state:
        st.session_state.auth_service = CloudIAPAuthService()
    auth_service: CloudIAPAuthService = st.session_state.auth_service
    return auth_service


def _store_user(user_info: UserInfo | None, error: str | None = None) -> None:
    st.session_state.authenticated = user_info is not None
    st.session_state.user_id = user_info.user_id if user_info else None
    st.session_state.user_email = user_info.email if user_info else None
    st.session_state.user_name = user_info.display_name if user_info else None
    st.session_state.auth_error = error


def authenticate_user() -> bool:
    """
    Authenticate the user with Cloud IAP headers, or the sidebar login in development.

    Returns:
        bool: True if a user is signed in
    """
    try:
        auth_service = get_session_auth_service()

        if auth_service.development_mode:
            setup_dev_auth_middleware()
            dev_user = render_dev_auth_ui(auth_service)
            _store_user(dev_user)
            return dev_user is not None

        headers: dict[str, str] = {}
        if hasattr(st, "context") and hasattr(st.context, "headers"):
            headers = dict(st.context.headers)

        if auth_service.authenticate_request(headers):
            user_info = auth_service.ensure_authenticated()
            _store_user(user_info)
            return True

        _store_user(None, "Cloud IAP authentication required")
        logger.warning("authentication_failed", reason="no_valid_iap_header")
        return False

    except AuthenticationError as e:
        _store_user(None, e.user_message)
        return False
    except Exception as e:
        _store_user(None, f"Authentication error: {e}")
        logger.error("authentication_error", error=str(e))
        return False


def require_authentication() -> bool:
    """
    Guard a page behind sign-in.

    Returns:
        bool: True if the page may render
    """
    if st.session_state.get("authenticated"):
        return True

    render_error_message(
        error_type="Sign-in required",
        message="Please sign in to see the family pages.",
        details=st.session_state.get("auth_error"),
    )
    return False
