"""
Main Streamlit application for familyhub.

This is the entry point for the family photo, event and member-profile app.
"""

import streamlit as st

from familyhub.config import get_debug_mode
from familyhub.logging_config import bind_session_context, configure_structured_logging, get_logger
from familyhub.ui.components.common import render_footer, render_header, render_sidebar
from familyhub.ui.components.error_display import error_context, get_error_display_manager
from familyhub.ui.components.notifications import get_notifier
from familyhub.ui.handlers.auth import authenticate_user
from familyhub.ui.handlers.navigation import current_route, init_navigation, navigate_to
from familyhub.ui.pages.event_detail import render_event_detail_page
from familyhub.ui.pages.events import render_events_page
from familyhub.ui.pages.home import render_home_page
from familyhub.ui.pages.member_profile import render_member_profile_page
from familyhub.ui.pages.members import render_members_page
from familyhub.ui.pages.photos import render_photos_page

configure_structured_logging()
logger = get_logger(__name__)
error_display = get_error_display_manager()

PAGE_RENDERERS = {
    "home": render_home_page,
    "members": render_members_page,
    "member_profile": render_member_profile_page,
    "events": render_events_page,
    "event_detail": render_event_detail_page,
    "photos": render_photos_page,
}


def initialize_session_state() -> None:
    """Initialize session state variables."""
    defaults = {
        "authenticated": False,
        "user_id": None,
        "user_email": None,
        "user_name": None,
        "auth_error": None,
        "debug_mode": get_debug_mode(),
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value
    init_navigation()


def render_main_content() -> None:
    """Render the page the session is routed to."""
    route = current_route()
    with error_context(show_details=st.session_state.debug_mode):
        PAGE_RENDERERS[route.page]()


def main() -> None:
    """Main application entry point."""
    try:
        st.set_page_config(
            page_title="Family Hub",
            page_icon="👪",
            layout="wide",
            initial_sidebar_state="expanded",
            menu_items={
                "Get Help": None,
                "Report a bug": None,
                "About": "Family Hub - photos, events and memories of our family",
            },
        )

        initialize_session_state()
        notifier = get_notifier()
        # Messages queued right before a rerun are shown here.
        notifier.flush()

        with error_context():
            authenticate_user()

        bind_session_context(user_id=st.session_state.user_id, page=st.session_state.current_page)
        logger.debug(
            "session_initialized",
            authenticated=st.session_state.authenticated,
            current_page=st.session_state.current_page,
        )

        render_header()
        render_sidebar()

        with st.container():
            render_main_content()

        render_footer()

        if st.session_state.debug_mode:
            with st.expander("Debug Info"):
                st.write("Session State:", st.session_state)

        notifier.flush()

    except Exception as e:
        logger.error("critical_application_error", error=str(e))
        error_display.display_exception(e, context={"operation": "main_application"}, show_details=True)
        get_notifier().flush()

        if st.button("🔄 Back to home", type="primary"):
            navigate_to("home")


if __name__ == "__main__":
    main()
