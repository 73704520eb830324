"""
Tab selection for the member and event detail pages.

Each detail page keeps one :class:`TabState` in the session. It is reset to
the page's default tab whenever the page is mounted for a different entity
or unmounted by navigation, and never persisted anywhere else.
"""

from dataclasses import dataclass
from enum import Enum

import streamlit as st

from ...logging_config import get_logger

logger = get_logger(__name__)


class MemberTab(str, Enum):
    ABOUT = "about"
    PHOTOS = "photos"
    MEMORIES = "memories"


class EventTab(str, Enum):
    DETAILS = "details"
    PHOTOS = "photos"


PAGE_TABS: dict[str, type[Enum]] = {
    "member_profile": MemberTab,
    "event_detail": EventTab,
}

TAB_LABELS = {
    MemberTab.ABOUT: "About",
    MemberTab.PHOTOS: "Photos",
    MemberTab.MEMORIES: "Memories",
    EventTab.DETAILS: "Details",
    EventTab.PHOTOS: "Photos",
}


def default_tab(page: str) -> Enum:
    """First tab of a page's vocabulary."""
    try:
        return next(iter(PAGE_TABS[page]))
    except KeyError as e:
        raise ValueError(f"Unknown tabbed page: {page}") from e


@dataclass
class TabState:
    page: str
    entity_id: str
    tab: Enum

    def select(self, tab: Enum | str) -> None:
        """
        Switch tab.

        Raises:
            ValueError: If the tab does not belong to this page
        """
        self.tab = PAGE_TABS[self.page](tab)


def _session_key(page: str) -> str:
    return f"tabs_{page}"


def mount(page: str, entity_id: str) -> TabState:
    """
    Get the tab state for a page showing ``entity_id``.

    The state survives reruns of the same page but starts over on the
    default tab when a different entity is shown.
    """
    key = _session_key(page)
    state = st.session_state.get(key)
    if not isinstance(state, TabState) or state.entity_id != entity_id:
        state = TabState(page=page, entity_id=entity_id, tab=default_tab(page))
        st.session_state[key] = state
        logger.debug("tab_state_mounted", page=page, entity_id=entity_id)
    return state


def unmount(page: str) -> None:
    """Forget a page's tab state so the next mount starts on the default tab."""
    st.session_state.pop(_session_key(page), None)


def select_tab(page: str, tab: Enum | str) -> TabState | None:
    """Select a tab on a mounted page; returns None if the page is not mounted."""
    state = st.session_state.get(_session_key(page))
    if not isinstance(state, TabState):
        return None
    state.select(tab)
    return state
