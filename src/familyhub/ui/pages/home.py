"""Home page for familyhub."""

import streamlit as st

from ...services.family_data import get_family_data_service
from ...utils.filters import partition_events
from ..components.common import format_date, render_empty_state, render_info_card
from ..components.gallery import render_photo_gallery
from ..handlers.navigation import navigate_to

RECENT_PHOTO_COUNT = 6
RECENT_POST_COUNT = 3


def render_home_page() -> None:
    """Render the welcome page, with family highlights once signed in."""
    if not st.session_state.get("authenticated"):
        render_empty_state(
            title="Welcome to our family chronicle",
            description="A private space for our photos, events and memories. Sign in to continue.",
            icon="🔐",
        )
        render_info_card(
            "What's inside",
            "Family profiles, a shared photo gallery, upcoming events and the memories we keep of each other.",
            "🏡",
        )
        return

    st.markdown("### Welcome to our family")
    st.write("Explore the family, relive favourite moments and see what is coming up next.")

    service = get_family_data_service()
    members = service.get_family_members()
    photos = service.get_family_photos()
    events = service.get_family_events()

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("👪 Family members", len(members.data) if members.ok else "–")
    with col2:
        st.metric("📷 Shared photos", len(photos.data) if photos.ok else "–")
    with col3:
        st.metric("📅 Events", len(events.data) if events.ok else "–")

    st.divider()
    upcoming, _ = partition_events(events.data)
    st.markdown("#### Coming up")
    if upcoming:
        for event in upcoming[:3]:
            if st.button(
                f"{event.title} · {format_date(event.event_date, with_time=True)}",
                key=f"home_event_{event.id}",
                use_container_width=True,
            ):
                navigate_to("event_detail", event.id, payload=event)
    elif events.failed:
        st.caption("Events are unavailable right now.")
    else:
        st.caption("Nothing planned yet.")

    st.divider()
    st.markdown("#### Recent photos")
    featured = [photo for photo in photos.data if photo.featured] or photos.data
    if featured:
        render_photo_gallery(featured[:RECENT_PHOTO_COUNT], scope="home", show_filters=False)
    elif photos.failed:
        st.caption("Photos are unavailable right now.")
    else:
        st.caption("No photos yet.")

    posts = service.get_family_posts()
    if posts.data:
        st.divider()
        st.markdown("#### Family news")
        for post in posts.data[:RECENT_POST_COUNT]:
            with st.container(border=True):
                badge = "🎉 " if post.is_milestone else ""
                st.markdown(f"**{badge}{post.title}**")
                st.caption(format_date(post.post_date))
                st.write(post.content)

    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        if st.button("👪 Meet the family", use_container_width=True, type="primary"):
            navigate_to("members")
    with col2:
        if st.button("🖼️ View all photos", use_container_width=True):
            navigate_to("photos")
