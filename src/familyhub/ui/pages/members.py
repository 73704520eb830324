"""Family members page."""

import streamlit as st

from ...services.family_data import get_family_data_service
from ..components.common import render_avatar, render_empty_state
from ..components.error_display import render_fetch_error
from ..handlers.auth import require_authentication
from ..handlers.navigation import navigate_to

COLS_PER_ROW = 3


def render_members_page() -> None:
    """Render the grid of family member cards."""
    if not require_authentication():
        return

    st.markdown("### 👪 Our family")

    result = get_family_data_service().get_family_members()
    if render_fetch_error("family members", result):
        return
    if not result.data:
        render_empty_state(
            title="No family members yet",
            description="Members added with the command line tools will appear here.",
            icon="👪",
        )
        return

    members = result.data
    for i in range(0, len(members), COLS_PER_ROW):
        cols = st.columns(COLS_PER_ROW)
        for member, col in zip(members[i : i + COLS_PER_ROW], cols, strict=False):
            with col, st.container(border=True):
                render_avatar(member, size=72)
                st.markdown(f"**{member.name}**")
                if member.relationship:
                    st.caption(member.relationship)
                if member.bio:
                    st.write(member.bio if len(member.bio) <= 120 else member.bio[:117] + "...")
                if st.button("View profile", key=f"member_{member.id}", use_container_width=True):
                    navigate_to("member_profile", member.id, payload=member)
