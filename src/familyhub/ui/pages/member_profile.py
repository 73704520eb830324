"""Member profile page."""

import streamlit as st

from ...logging_config import get_logger
from ...models.family import FamilyMember
from ...services.family_data import FamilyDataService, get_family_data_service
from ..components.common import format_date, render_avatar
from ..components.error_display import render_fetch_error
from ..components.forms import (
    render_avatar_upload_form,
    render_member_edit_form,
    render_memory_delete_button,
    render_memory_form,
)
from ..components.gallery import render_photo_gallery
from ..components.notifications import failure, get_notifier
from ..handlers import tabs
from ..handlers.auth import require_authentication
from ..handlers.navigation import current_route, navigate_to, take_payload

logger = get_logger(__name__)

PAGE = "member_profile"


def load_member(service: FamilyDataService, member_id: str | None) -> FamilyMember | None:
    """
    Resolve the routed member, preferring the navigation payload.

    Leaves the page for the member list when the member cannot be found.
    """
    payload = take_payload(member_id)
    if isinstance(payload, FamilyMember):
        return payload

    result = service.get_family_member_by_id(member_id) if member_id else None
    if result is not None and result.data is not None:
        return result.data

    if result is not None and result.failed:
        get_notifier().notify(failure("Could not load profile", "The family records are unavailable right now."))
    else:
        logger.warning("member_not_found", member_id=member_id)
        get_notifier().notify(failure("Member not found", "They may have been removed."))
    navigate_to("members")
    return None


def render_member_profile_page() -> None:
    if not require_authentication():
        return

    service = get_family_data_service()
    member = load_member(service, current_route().entity_id)
    if member is None:
        return

    if st.button("← Back to family"):
        navigate_to("members")

    render_profile_header(service, member)

    state = tabs.mount(PAGE, member.id)
    selected = st.radio(
        "Section",
        list(tabs.MemberTab),
        index=list(tabs.MemberTab).index(state.tab),
        format_func=lambda tab: tabs.TAB_LABELS[tab],
        horizontal=True,
        label_visibility="collapsed",
        key=f"member_tab_{member.id}",
    )
    if selected != state.tab:
        tabs.select_tab(PAGE, selected)

    if state.tab == tabs.MemberTab.ABOUT:
        render_about_tab(member)
    elif state.tab == tabs.MemberTab.PHOTOS:
        result = service.get_photos_for_member(member.id)
        if not render_fetch_error("photos", result):
            render_photo_gallery(result.data, scope=f"member_{member.id}", show_filters=False)
    else:
        render_memories_tab(service, member)


def render_profile_header(service: FamilyDataService, member: FamilyMember) -> None:
    notifier = get_notifier()
    col1, col2 = st.columns([1, 3])
    with col1:
        render_avatar(member, size=128)
        with st.expander("Change picture"):
            render_avatar_upload_form(
                service,
                notifier,
                member,
                on_success=lambda url: logger.info("avatar_changed", member_id=member.id, avatar_url=url),
            )
    with col2:
        st.markdown(f"## {member.name}")
        subtitle = member.relationship or ""
        if member.nickname:
            subtitle = f'{subtitle} · "{member.nickname}"' if subtitle else f'"{member.nickname}"'
        if subtitle:
            st.caption(subtitle)

        editing_key = f"editing_member_{member.id}"
        if st.session_state.get(editing_key):
            render_member_edit_form(service, notifier, member)
            if st.button("Cancel", key=f"cancel_edit_{member.id}"):
                st.session_state.pop(editing_key, None)
                st.session_state.pop(f"member_edit_form_{member.id}", None)
                st.rerun()
        elif st.button("✏️ Edit profile", key=f"edit_{member.id}"):
            st.session_state[editing_key] = True
            st.rerun()


def render_about_tab(member: FamilyMember) -> None:
    if member.birthday:
        st.markdown(f"🎂 **Birthday:** {format_date(member.birthday)}")
    if member.bio:
        st.write(member.bio)
    else:
        st.caption("No bio yet.")
    if member.fun_facts:
        st.markdown("**Fun facts**")
        for fact in member.fun_facts:
            st.markdown(f"- {fact}")


def render_memories_tab(service: FamilyDataService, member: FamilyMember) -> None:
    notifier = get_notifier()
    with st.expander("➕ Add a memory"):
        render_memory_form(service, notifier, member.id)

    result = service.get_memories_for_member(member.id)
    if render_fetch_error("memories", result):
        return
    if not result.data:
        st.caption(f"No memories of {member.name} yet.")
        return

    for memory in result.data:
        with st.container(border=True):
            star = "⭐ " if memory.is_favorite else ""
            st.markdown(f"**{star}{memory.title}**")
            meta = [part for part in (format_date(memory.memory_date), memory.location) if part]
            if meta:
                st.caption(" · ".join(meta))
            st.write(memory.content)

            editing_key = f"editing_memory_{memory.id}"
            if st.session_state.get(editing_key):
                render_memory_form(service, notifier, member.id, memory)
                if st.button("Cancel", key=f"cancel_memory_{memory.id}"):
                    st.session_state.pop(editing_key, None)
                    st.session_state.pop(f"memory_form_{memory.id}", None)
                    st.rerun()
            else:
                col1, col2 = st.columns(2)
                with col1:
                    if st.button("✏️ Edit", key=f"edit_memory_{memory.id}"):
                        st.session_state[editing_key] = True
                        st.rerun()
                with col2:
                    render_memory_delete_button(service, notifier, memory)
