"""Family events page."""

from collections.abc import Sequence

import streamlit as st

from ...models.family import EventType, FamilyEvent
from ...services.family_data import get_family_data_service
from ...utils.filters import partition_events
from ..components.common import format_date, render_empty_state
from ..components.error_display import render_fetch_error
from ..handlers.auth import require_authentication
from ..handlers.navigation import navigate_to

EVENT_TYPE_ICONS = {
    EventType.BIRTHDAY: "🎂",
    EventType.HOLIDAY: "🎄",
    EventType.VACATION: "🏖️",
    EventType.MILESTONE: "🏆",
    EventType.OTHER: "📌",
}


def event_icon(event: FamilyEvent) -> str:
    return EVENT_TYPE_ICONS.get(event.event_type or EventType.OTHER, "📌")


def render_event_card(event: FamilyEvent, key_prefix: str) -> None:
    with st.container(border=True):
        st.markdown(f"**{event_icon(event)} {event.title}**")
        st.caption(format_date(event.event_date, with_time=True))
        if event.location:
            st.caption(f"📍 {event.location}")
        if event.attendees:
            st.caption(f"👥 {len(event.attendees)} attending")
        if st.button("Details", key=f"{key_prefix}_{event.id}"):
            navigate_to("event_detail", event.id, payload=event)


def render_event_section(title: str, events: Sequence[FamilyEvent], key_prefix: str, empty_text: str) -> None:
    st.markdown(f"#### {title}")
    if not events:
        st.caption(empty_text)
        return
    for event in events:
        render_event_card(event, key_prefix)


def render_events_page() -> None:
    """Render upcoming and past events."""
    if not require_authentication():
        return

    st.markdown("### 📅 Family events")

    result = get_family_data_service().get_family_events()
    if render_fetch_error("events", result):
        return
    if not result.data:
        render_empty_state(title="No events yet", description="Family events will show up here.", icon="📅")
        return

    upcoming, past = partition_events(result.data)
    col1, col2 = st.columns(2)
    with col1:
        render_event_section("Upcoming", upcoming, "upcoming", "Nothing planned yet.")
    with col2:
        render_event_section("Past", past, "past", "No past events.")
