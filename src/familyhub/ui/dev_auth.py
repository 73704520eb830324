"""
Development sign-in for local runs without Cloud IAP.
"""

import streamlit as st

from ..logging_config import get_logger
from ..services.auth import CloudIAPAuthService, UserInfo

logger = get_logger(__name__)


def render_dev_auth_ui(auth_service: CloudIAPAuthService) -> UserInfo | None:
    """
    Render the sidebar sign-in form used in development.

    Returns:
        UserInfo: The signed-in user, or None until the form is submitted
    """
    if not auth_service.development_mode:
        return None

    st.sidebar.markdown("---")
    st.sidebar.markdown("### 🔧 Development mode")

    current_user = auth_service.get_current_user()
    if current_user:
        st.sidebar.success(f"Signed in as {current_user.email}")
        if st.sidebar.button("Sign out", key="dev_sign_out"):
            auth_service.clear_authentication()
            st.rerun()
        return current_user

    default_user = auth_service.get_development_user()
    with st.sidebar.form("dev_auth_form"):
        email = st.text_input("Email", value=default_user.email)
        name = st.text_input("Name", value=default_user.name or "")
        user_id = st.text_input("User ID", value=default_user.user_id)
        submitted = st.form_submit_button("Sign in")

    if submitted:
        if email and "@" in email and user_id.strip():
            dev_user = UserInfo(user_id=user_id.strip(), email=email.strip(), name=name.strip() or None)
            auth_service.set_current_user(dev_user)
            logger.info("development_login", user_id=dev_user.user_id, email=dev_user.email)
            st.rerun()
        else:
            st.sidebar.error("Enter an email address and a user ID")

    return None


def setup_dev_auth_middleware() -> None:
    """Show a development-mode badge in the page corner."""
    st.markdown(
        """
    <div style="
        position: fixed;
        top: 0;
        right: 0;
        background-color: #ff6b6b;
        color: white;
        padding: 5px 10px;
        font-size: 12px;
        z-index: 999;
        border-radius: 0 0 0 5px;
    ">
        🔧 DEV MODE
    </div>
    """,
        unsafe_allow_html=True,
    )
    logger.debug("development_auth_middleware_setup")
