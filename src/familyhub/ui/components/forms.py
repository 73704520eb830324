"""Streamlit widgets for the upload and edit forms.

Form objects live in session state so their field values and in-flight
flag survive reruns; the widgets below read from and write back to them.
"""

from collections.abc import Callable, Sequence
from datetime import date
from typing import Any, TypeVar

import streamlit as st

from ...logging_config import get_logger
from ...models.family import FamilyMember, FamilyMemory, PhotoCategory
from ...services.family_data import FamilyDataService
from ...utils.filters import ALL_CATEGORIES
from ..handlers.forms import (
    AvatarUploadForm,
    MemberEditForm,
    MemoryForm,
    PeopleTagger,
    PhotoUploadForm,
    SelectedFile,
    delete_memory_action,
)
from .notifications import Notifier

logger = get_logger(__name__)

F = TypeVar("F")

EARLIEST_DATE = date(1900, 1, 1)
IMAGE_TYPES = ["jpg", "jpeg", "png", "gif", "webp", "heic", "heif"]
PHOTO_UPLOAD_FORM_KEY = "photo_upload_form"
PHOTO_UPLOAD_PREFIX = "photo_upload_"


def session_form(key: str, factory: Callable[[], F]) -> F:
    """Get the form stored under ``key``, creating it on first use."""
    if key not in st.session_state:
        st.session_state[key] = factory()
    form: F = st.session_state[key]
    return form


def discard_form(key: str, widget_prefix: str | None = None) -> None:
    """Drop a form and, optionally, the widget values that belong to it. A selected file is released."""
    form = st.session_state.pop(key, None)
    if isinstance(form, (PhotoUploadForm, AvatarUploadForm)):
        form.clear_file()
    if widget_prefix:
        for widget_key in [k for k in st.session_state.keys() if str(k).startswith(widget_prefix)]:
            del st.session_state[widget_key]


def render_preview(preview_url: str | None, width: int = 240) -> None:
    if preview_url:
        st.markdown(
            f"<img src='{preview_url}' style='max-width: {width}px; border-radius: 8px;'/>",
            unsafe_allow_html=True,
        )


def _sync_file(form: PhotoUploadForm | AvatarUploadForm, uploaded: Any) -> None:
    if uploaded is None:
        if form.selected_file is not None:
            form.clear_file()
        return
    file = SelectedFile.from_upload(uploaded)
    if form.selected_file == file:
        return
    if not form.select_file(file):
        st.error("Please choose an image file.")


def render_people_tagger(people: PeopleTagger, prefix: str) -> None:
    """Pick known members and add anyone else by name."""
    known_names = people.known_names
    chosen = st.multiselect(
        "People in this photo",
        known_names,
        default=[name for name in people.selected if name in known_names],
        key=f"{prefix}people",
    )
    for name in known_names:
        if (name in chosen) != people.is_selected(name):
            people.toggle(name)

    col1, col2 = st.columns([3, 1])
    with col1:
        other = st.text_input("Someone else", key=f"{prefix}other_person", placeholder="Add a name")
    with col2:
        st.write("")
        if st.button("Add", key=f"{prefix}add_person") and people.add(other):
            st.rerun()

    extras = [name for name in people.selected if name not in known_names]
    for name in extras:
        if st.button(f"✕ {name}", key=f"{prefix}remove_{name}"):
            people.remove(name)
            st.rerun()


def render_photo_upload_form(
    service: FamilyDataService,
    notifier: Notifier,
    members: Sequence[FamilyMember],
    categories: Sequence[PhotoCategory],
    on_success: Callable[[Any], None] | None = None,
) -> None:
    """Render the photo upload form."""
    prefix = PHOTO_UPLOAD_PREFIX
    form = session_form(PHOTO_UPLOAD_FORM_KEY, lambda: PhotoUploadForm(people=PeopleTagger(members)))
    form.people.known_members = list(members)

    uploaded = st.file_uploader("Photo", type=IMAGE_TYPES, key=f"{prefix}file")
    had_title = bool(form.title)
    _sync_file(form, uploaded)
    if form.title and not had_title:
        st.session_state[f"{prefix}title"] = form.title
    render_preview(form.preview_url)

    form.title = st.text_input("Title", key=f"{prefix}title")
    form.description = st.text_area("Description", key=f"{prefix}description")
    col1, col2 = st.columns(2)
    with col1:
        form.location = st.text_input("Location", key=f"{prefix}location")
    with col2:
        form.taken_date = st.date_input(
            "Date taken", value=None, min_value=EARLIEST_DATE, key=f"{prefix}taken_date"
        )

    names = {category.id: category.name for category in categories}
    form.category_id = st.selectbox(
        "Category",
        [ALL_CATEGORIES] + list(names),
        format_func=lambda option: "No category" if option == ALL_CATEGORIES else names[option],
        key=f"{prefix}category",
    )
    form.featured = st.checkbox("Featured photo", key=f"{prefix}featured")
    render_people_tagger(form.people, prefix)

    if st.button(
        "📤 Upload photo",
        type="primary",
        use_container_width=True,
        disabled=form.is_submitting or form.selected_file is None,
        key=f"{prefix}submit",
    ):
        with st.spinner("Uploading..."):
            uploaded_ok = form.submit(service, notifier, on_success)
        if uploaded_ok:
            discard_form(PHOTO_UPLOAD_FORM_KEY, prefix)
            st.rerun()


def render_avatar_upload_form(
    service: FamilyDataService,
    notifier: Notifier,
    member: FamilyMember,
    on_success: Callable[[Any], None] | None = None,
) -> None:
    """Render the profile picture upload for one member."""
    prefix = f"avatar_upload_{member.id}_"
    form_key = f"avatar_upload_form_{member.id}"
    form = session_form(form_key, lambda: AvatarUploadForm(member_id=member.id))

    uploaded = st.file_uploader("New profile picture", type=IMAGE_TYPES, key=f"{prefix}file")
    _sync_file(form, uploaded)
    render_preview(form.preview_url, width=160)

    if st.button(
        "Save picture",
        disabled=form.is_submitting or form.selected_file is None,
        key=f"{prefix}submit",
    ):
        with st.spinner("Uploading..."):
            saved = form.submit(service, notifier, on_success)
        if saved:
            discard_form(form_key, prefix)
            st.rerun()


def render_member_edit_form(
    service: FamilyDataService,
    notifier: Notifier,
    member: FamilyMember,
    on_success: Callable[[Any], None] | None = None,
) -> None:
    """Render the profile edit form for one member."""
    prefix = f"member_edit_{member.id}_"
    form_key = f"member_edit_form_{member.id}"
    form = session_form(form_key, lambda: MemberEditForm.from_member(member))

    with st.form(f"{prefix}form"):
        form.name = st.text_input("Name", value=form.name, key=f"{prefix}name")
        col1, col2 = st.columns(2)
        with col1:
            form.relationship = st.text_input("Relationship", value=form.relationship, key=f"{prefix}relationship")
        with col2:
            form.nickname = st.text_input("Nickname", value=form.nickname, key=f"{prefix}nickname")
        form.birthday = st.date_input(
            "Birthday", value=form.birthday, min_value=EARLIEST_DATE, key=f"{prefix}birthday"
        )
        form.bio = st.text_area("Bio", value=form.bio, key=f"{prefix}bio")
        form.fun_facts_text = st.text_area(
            "Fun facts (one per line)", value=form.fun_facts_text, key=f"{prefix}fun_facts"
        )
        submitted = st.form_submit_button("Save profile", type="primary", disabled=form.is_submitting)

    if submitted and form.submit(service, notifier, on_success):
        discard_form(form_key, prefix)
        st.session_state.pop(f"editing_member_{member.id}", None)
        st.rerun()


def render_memory_form(
    service: FamilyDataService,
    notifier: Notifier,
    member_id: str,
    memory: FamilyMemory | None = None,
    on_success: Callable[[Any], None] | None = None,
) -> None:
    """Render the add-memory form, or the edit form for ``memory``."""
    form_key = f"memory_form_{memory.id}" if memory else f"memory_form_new_{member_id}"
    prefix = f"{form_key}_"
    form = session_form(form_key, lambda: MemoryForm.for_memory(memory) if memory else MemoryForm(member_id=member_id))

    with st.form(f"{prefix}form"):
        form.title = st.text_input("Title", value=form.title, key=f"{prefix}title")
        form.content = st.text_area("Story", value=form.content, key=f"{prefix}content")
        col1, col2 = st.columns(2)
        with col1:
            form.memory_date = st.date_input(
                "Date", value=form.memory_date, min_value=EARLIEST_DATE, key=f"{prefix}date"
            )
        with col2:
            form.location = st.text_input("Location", value=form.location, key=f"{prefix}location")
        form.is_favorite = st.checkbox("Favorite", value=form.is_favorite, key=f"{prefix}favorite")
        label = "Save memory" if form.is_editing else "Add memory"
        submitted = st.form_submit_button(label, type="primary", disabled=form.is_submitting)

    if submitted and form.submit(service, notifier, on_success):
        discard_form(form_key, prefix)
        if memory:
            st.session_state.pop(f"editing_memory_{memory.id}", None)
        st.rerun()


def render_memory_delete_button(service: FamilyDataService, notifier: Notifier, memory: FamilyMemory) -> None:
    if st.button("🗑️ Delete", key=f"delete_memory_{memory.id}"):
        if delete_memory_action(service, notifier, memory.id):
            st.rerun()
