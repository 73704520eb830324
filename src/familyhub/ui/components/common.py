"""Reusable UI components for familyhub."""

import html
from datetime import date, datetime

import streamlit as st

from ... import __version__
from ...logging_config import get_logger
from ...models.family import FamilyMember
from ..handlers.navigation import navigate_to

logger = get_logger(__name__)

NAVIGATION = {
    "🏠 Home": "home",
    "👪 Members": "members",
    "📅 Events": "events",
    "🖼️ Photos": "photos",
}

# Detail pages highlight their list page in the sidebar.
PARENT_PAGES = {"member_profile": "members", "event_detail": "events"}


def render_empty_state(
    title: str,
    description: str,
    icon: str = "📭",
    action_text: str | None = None,
    action_page: str | None = None,
) -> None:
    """
    Render an empty state message with optional action button.

    Args:
        title: Main title for the empty state
        description: Description text
        icon: Emoji icon to display
        action_text: Text for action button (optional)
        action_page: Page to navigate to when action button is clicked (optional)
    """
    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        st.markdown(
            f"""
        <div style='text-align: center; padding: 2rem 0;'>
            <div style='font-size: 4rem; margin-bottom: 1rem;'>{icon}</div>
            <h3 style='color: #666; margin-bottom: 1rem;'>{html.escape(title)}</h3>
            <p style='color: #888; margin-bottom: 2rem;'>{html.escape(description)}</p>
        </div>
        """,
            unsafe_allow_html=True,
        )

        if action_text and action_page:
            if st.button(action_text, use_container_width=True, type="primary", key=f"empty_{action_page}"):
                navigate_to(action_page)


def render_error_message(error_type: str, message: str, details: str | None = None) -> None:
    """
    Render a standardized error message.

    Args:
        error_type: Type of error (e.g., "Sign-in required")
        message: Main error message
        details: Additional error details (optional)
    """
    st.error(f"**{error_type}:** {message}")

    if details:
        with st.expander("🔍 Details"):
            st.code(details)


def render_info_card(title: str, content: str, icon: str = "ℹ️") -> None:
    st.markdown(
        f"""
    <div style='
        border: 1px solid #e0e0e0;
        border-radius: 8px;
        padding: 1rem;
        margin: 1rem 0;
        background-color: #f8f9fa;
    '>
        <h4 style='margin: 0 0 0.5rem 0; color: #333;'>
            {icon} {html.escape(title)}
        </h4>
        <p style='margin: 0; color: #666;'>
            {html.escape(content)}
        </p>
    </div>
    """,
        unsafe_allow_html=True,
    )


def format_date(value: date | datetime | None, with_time: bool = False) -> str:
    """
    Format a date for display, e.g. ``March 4, 2024``.

    Args:
        value: Date or datetime, may be None
        with_time: Append the time of day for datetimes

    Returns:
        str: Formatted date, or an empty string for None
    """
    if value is None:
        return ""
    text = f"{value:%B} {value.day}, {value.year}"
    if with_time and isinstance(value, datetime) and (value.hour or value.minute):
        text += f" · {value:%H:%M}"
    return text


def render_avatar(member: FamilyMember, size: int = 96) -> None:
    """Render a member's avatar, or their initials when there is none."""
    if member.avatar_url:
        st.image(member.avatar_url, width=size)
        return
    st.markdown(
        f"""
    <div style='
        width: {size}px; height: {size}px; border-radius: 50%;
        background-color: #e8eef7; color: #456;
        display: flex; align-items: center; justify-content: center;
        font-size: {size // 3}px; font-weight: 600;
    '>{html.escape(member.initials)}</div>
    """,
        unsafe_allow_html=True,
    )


def render_header() -> None:
    """Render the application header."""
    st.markdown("# 👪 Family Hub")
    st.divider()


def render_sidebar() -> None:
    """Render the sidebar navigation and the signed-in user."""
    with st.sidebar:
        st.markdown("### 👪 Family Hub")
        st.divider()

        st.subheader("Navigation")
        current_page = st.session_state.get("current_page", "home")
        highlighted = PARENT_PAGES.get(current_page, current_page)

        for label, page_key in NAVIGATION.items():
            if st.button(
                label,
                key=f"nav_{page_key}",
                use_container_width=True,
                type="primary" if page_key == highlighted else "secondary",
            ):
                navigate_to(page_key)

        st.divider()

        if st.session_state.get("authenticated"):
            name = st.session_state.get("user_name") or ""
            email = st.session_state.get("user_email") or ""
            st.markdown(f"👤 {html.escape(name)}")
            st.caption(email)
        else:
            st.subheader("🔐 Sign in")
            st.info("Sign in to see the family pages")
            if st.session_state.get("auth_error"):
                st.error(st.session_state.auth_error)


def render_footer() -> None:
    st.divider()
    st.markdown(
        f"""
    <div style='text-align: center; color: #666; font-size: 0.8em;'>
        <strong>Family Hub v{__version__}</strong>
    </div>
    """,
        unsafe_allow_html=True,
    )
