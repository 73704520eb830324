"""Event detail page."""

import streamlit as st

from ...logging_config import get_logger
from ...models.family import FamilyEvent
from ...services.family_data import get_family_data_service
from ..components.common import format_date
from ..components.error_display import render_fetch_error
from ..components.gallery import render_photo_gallery
from ..components.notifications import failure, get_notifier
from ..handlers import tabs
from ..handlers.auth import require_authentication
from ..handlers.navigation import current_route, navigate_to, take_payload
from .events import event_icon

logger = get_logger(__name__)

PAGE = "event_detail"


def load_event(event_id: str | None) -> FamilyEvent | None:
    """
    Resolve the routed event, preferring the navigation payload.

    Leaves the page for the event list when the event cannot be found.
    """
    payload = take_payload(event_id)
    if isinstance(payload, FamilyEvent):
        return payload

    result = get_family_data_service().get_family_event_by_id(event_id) if event_id else None
    if result is not None and result.data is not None:
        return result.data

    if result is not None and result.failed:
        get_notifier().notify(failure("Could not load event", "The family records are unavailable right now."))
    else:
        logger.warning("event_not_found", event_id=event_id)
        get_notifier().notify(failure("Event not found", "It may have been removed."))
    navigate_to("events")
    return None


def render_event_detail_page() -> None:
    if not require_authentication():
        return

    route = current_route()
    event = load_event(route.entity_id)
    if event is None:
        return

    if st.button("← Back to events"):
        navigate_to("events")

    st.markdown(f"### {event_icon(event)} {event.title}")
    st.caption(format_date(event.event_date, with_time=True))

    state = tabs.mount(PAGE, event.id)
    selected = st.radio(
        "Section",
        list(tabs.EventTab),
        index=list(tabs.EventTab).index(state.tab),
        format_func=lambda tab: tabs.TAB_LABELS[tab],
        horizontal=True,
        label_visibility="collapsed",
        key=f"event_tab_{event.id}",
    )
    if selected != state.tab:
        tabs.select_tab(PAGE, selected)

    if state.tab == tabs.EventTab.DETAILS:
        render_event_details(event)
    else:
        result = get_family_data_service().get_photos_for_event(event.id)
        if not render_fetch_error("event photos", result):
            render_photo_gallery(result.data, scope=f"event_{event.id}", show_filters=False)


def render_event_details(event: FamilyEvent) -> None:
    if event.location:
        st.markdown(f"📍 **Location:** {event.location}")
    if event.event_type:
        st.markdown(f"🏷️ **Type:** {event.event_type.value.title()}")
    if event.is_recurring:
        st.markdown(f"🔁 **Repeats:** {event.recurrence_pattern or 'yes'}")
    if event.description:
        st.write(event.description)
    if event.attendees:
        st.markdown("**Attending**")
        st.write(", ".join(event.attendees))
