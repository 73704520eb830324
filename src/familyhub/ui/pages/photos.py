"""Photo gallery page."""

import streamlit as st

from ...logging_config import get_logger
from ...services.family_data import get_family_data_service
from ..components.error_display import render_fetch_error
from ..components.forms import PHOTO_UPLOAD_FORM_KEY, PHOTO_UPLOAD_PREFIX, discard_form, render_photo_upload_form
from ..components.gallery import render_photo_gallery
from ..components.notifications import get_notifier
from ..handlers.auth import require_authentication

logger = get_logger(__name__)


def render_photos_page() -> None:
    """Render the family gallery with search, category filter and upload."""
    if not require_authentication():
        return

    service = get_family_data_service()
    photos = service.get_family_photos()
    categories = service.get_photo_categories()

    col1, col2 = st.columns([3, 1])
    with col1:
        st.markdown("### 🖼️ Family photos")
    with col2:
        show_upload = st.toggle("📤 Upload", key="photos_show_upload")

    if show_upload:
        members = service.get_family_members()
        with st.container(border=True):
            render_photo_upload_form(
                service,
                get_notifier(),
                members.data,
                categories.data,
                on_success=lambda photo: logger.info("gallery_photo_added", photo_id=photo.id),
            )
    else:
        discard_form(PHOTO_UPLOAD_FORM_KEY, PHOTO_UPLOAD_PREFIX)

    if render_fetch_error("photos", photos):
        return
    if categories.failed:
        st.caption("Categories are unavailable; showing all photos.")

    render_photo_gallery(photos.data, scope="photos", categories=categories.data)
