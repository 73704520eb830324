"""
Session-state routing between pages.

A route is a page name plus an optional entity id. Detail pages may also
receive the entity itself as a navigation payload so they can render
without fetching it again.
"""

from dataclasses import dataclass
from typing import Any

import streamlit as st

from ...logging_config import get_logger
from . import tabs
from .forms import release_page_forms

logger = get_logger(__name__)

PAGES = ["home", "members", "member_profile", "events", "event_detail", "photos"]
DEFAULT_PAGE = "home"


@dataclass(frozen=True)
class Route:
    page: str
    entity_id: str | None = None


def init_navigation() -> None:
    if "current_page" not in st.session_state:
        st.session_state.current_page = DEFAULT_PAGE
    if "route_entity_id" not in st.session_state:
        st.session_state.route_entity_id = None


def current_route() -> Route:
    init_navigation()
    page = st.session_state.current_page
    if page not in PAGES:
        logger.warning("unknown_page_requested", page=page)
        page = DEFAULT_PAGE
    return Route(page=page, entity_id=st.session_state.route_entity_id)


def set_route(page: str, entity_id: str | None = None, payload: Any = None) -> Route:
    """
    Point the session at a page without rerunning.

    Raises:
        ValueError: If the page is unknown
    """
    if page not in PAGES:
        raise ValueError(f"Unknown page: {page}")
    previous = current_route()
    if previous.page != page and previous.page in tabs.PAGE_TABS:
        tabs.unmount(previous.page)
    if (previous.page, previous.entity_id) != (page, entity_id):
        release_page_forms(st.session_state, previous.page)

    st.session_state.current_page = page
    st.session_state.route_entity_id = entity_id
    st.session_state.route_payload = payload
    logger.info("page_navigation", from_page=previous.page, to_page=page, entity_id=entity_id)
    return Route(page=page, entity_id=entity_id)


def navigate_to(page: str, entity_id: str | None = None, payload: Any = None) -> None:
    """Switch page and rerun the script."""
    set_route(page, entity_id, payload)
    st.rerun()


def take_payload(entity_id: str | None) -> Any:
    """
    Return the navigation payload if it belongs to ``entity_id``.

    The payload is consumed so later reruns read fresh data.
    """
    payload = st.session_state.pop("route_payload", None)
    if payload is None or getattr(payload, "id", None) != entity_id:
        return None
    return payload
