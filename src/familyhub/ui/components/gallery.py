"""Gallery components for familyhub."""

import html
from collections.abc import Sequence

import streamlit as st
import streamlit.components.v1 as components

from ...logging_config import get_logger
from ...models.family import FamilyPhoto, PhotoCategory
from ...utils.filters import ALL_CATEGORIES, count_photos_by_category, filter_photos, paginate
from ..handlers.lightbox import (
    ARROW_LEFT,
    ARROW_RIGHT,
    ESCAPE,
    apply_lightbox_key,
    build_key_forwarder,
    dispatch_pressed,
    get_key_registry,
    get_lightbox_state,
    lightbox_button_keys,
    open_lightbox,
)
from .common import format_date

logger = get_logger(__name__)

COLS_PER_ROW = 3
PAGE_SIZE = 24


def render_gallery_filters(
    photos: Sequence[FamilyPhoto], categories: Sequence[PhotoCategory], scope: str
) -> tuple[str, str]:
    """
    Render the search box and category selector.

    Returns:
        tuple: (query, category id or ``ALL_CATEGORIES``)
    """
    counts = count_photos_by_category(photos)
    names = {category.id: category.name for category in categories}
    options = [ALL_CATEGORIES] + [category.id for category in categories]

    def label(option: str) -> str:
        name = "All photos" if option == ALL_CATEGORIES else names.get(option, option)
        return f"{name} ({counts.get(option, 0)})"

    col1, col2 = st.columns([2, 1])
    with col1:
        query = st.text_input(
            "Search photos", key=f"{scope}_query", placeholder="Search by title, location or description"
        )
    with col2:
        category = st.selectbox("Category", options, format_func=label, key=f"{scope}_category")
    return query, category or ALL_CATEGORIES


def render_photo_gallery(
    photos: Sequence[FamilyPhoto],
    scope: str,
    categories: Sequence[PhotoCategory] = (),
    show_filters: bool = True,
) -> list[FamilyPhoto]:
    """
    Render a filterable, paginated photo grid with a lightbox.

    Args:
        photos: All photos of the gallery, in display order
        scope: Unique name of this gallery on the page (session keys derive from it)
        categories: Categories offered by the filter
        show_filters: Whether to render the search and category controls

    Returns:
        list[FamilyPhoto]: The photos currently displayed after filtering
    """
    query, category = ("", ALL_CATEGORIES)
    if show_filters:
        query, category = render_gallery_filters(photos, categories, scope)

    displayed = filter_photos(photos, query, category)
    if not displayed:
        st.info("No photos match your search." if photos else "No photos yet.")
        return displayed

    pages_key = f"{scope}_pages"
    pages = st.session_state.get(pages_key, 1)
    visible, has_more = paginate(displayed, 0, PAGE_SIZE * pages)

    st.caption(f"Showing {len(visible)} of {len(displayed)} photos")
    render_photo_grid(visible, displayed, scope)

    if has_more and st.button("Show more", key=f"{scope}_more", use_container_width=True):
        st.session_state[pages_key] = pages + 1
        st.rerun()

    return displayed


def render_photo_grid(visible: Sequence[FamilyPhoto], displayed: Sequence[FamilyPhoto], scope: str) -> None:
    """
    Render photos in a grid.

    Args:
        visible: Photos on the current page
        displayed: The full filtered list the lightbox navigates
        scope: Gallery scope
    """
    for i in range(0, len(visible), COLS_PER_ROW):
        cols = st.columns(COLS_PER_ROW)
        for j, col in enumerate(cols):
            if i + j >= len(visible):
                continue
            with col:
                render_photo_thumbnail(visible[i + j], displayed, scope)


def render_photo_thumbnail(photo: FamilyPhoto, displayed: Sequence[FamilyPhoto], scope: str) -> None:
    try:
        st.image(photo.image_url, caption=photo.title, use_container_width=True)
        if photo.taken_date:
            st.caption(f"📅 {format_date(photo.taken_date)}")

        if st.button("🔍 View", key=f"{scope}_view_{photo.id}", use_container_width=True):
            if open_lightbox(scope, displayed, photo.id):
                show_lightbox(scope, list(displayed))
            else:
                st.warning("That photo is no longer in the gallery.")

    except Exception as e:
        logger.error("render_thumbnail_error", photo_id=photo.id, error=str(e))
        st.error("❌ Could not show this photo")
        st.caption(photo.title)


def render_photo_details(photo: FamilyPhoto) -> None:
    """Render a photo's metadata below the image."""
    st.markdown(f"### {html.escape(photo.title)}")
    if photo.category:
        st.caption(f"🏷️ {photo.category.name}")
    if photo.description:
        st.write(photo.description)

    details = []
    if photo.taken_date:
        details.append(f"📅 {format_date(photo.taken_date)}")
    if photo.location:
        details.append(f"📍 {photo.location}")
    if details:
        st.caption(" · ".join(details))
    if photo.people:
        st.caption("👥 " + ", ".join(photo.people))


@st.dialog("Photo", width="large")
def show_lightbox(scope: str, photos: list[FamilyPhoto]) -> None:
    """
    Lightbox dialog over the displayed photos.

    The navigation buttons go through the session's key registry, bound only
    while the dialog body renders. Escape and the arrow keys are forwarded
    to the buttons by a script that lives as long as the dialog.
    """
    registry = get_key_registry()

    def handle_key(key: str) -> None:
        apply_lightbox_key(scope, photos, key)

    with registry.bound(handle_key):
        state = get_lightbox_state(scope)
        photo = state.current_photo(photos)
        if photo is None:
            st.info("This photo is no longer available.")
            return

        st.image(photo.image_url, use_container_width=True)
        render_photo_details(photo)

        buttons = lightbox_button_keys(scope)
        col1, col2, col3 = st.columns([1, 2, 1])
        with col1:
            previous_clicked = st.button("◀ Previous", key=buttons[ARROW_LEFT], disabled=len(photos) < 2)
        with col2:
            st.markdown(
                f"<div style='text-align: center;'>{state.position_label(photos)}</div>",
                unsafe_allow_html=True,
            )
        with col3:
            next_clicked = st.button("Next ▶", key=buttons[ARROW_RIGHT], disabled=len(photos) < 2)
        close_clicked = st.button("Close", key=buttons[ESCAPE], use_container_width=True)
        components.html(build_key_forwarder(buttons), height=0)

        pressed = dispatch_pressed(
            registry, {ARROW_LEFT: previous_clicked, ARROW_RIGHT: next_clicked, ESCAPE: close_clicked}
        )
        if pressed == ESCAPE:
            st.rerun()
        elif pressed is not None:
            st.rerun(scope="fragment")
