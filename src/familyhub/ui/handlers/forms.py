"""
Upload and edit form flows.

Forms hold their own field values and an in-flight flag. ``submit`` hands
the values to the data service and reports the outcome through a notifier:
on success the caller's callback runs and the form closes, on failure the
form stays open with its input preserved. The in-flight flag is always
cleared, and a second submit while one is running is refused.
"""

import base64
from collections.abc import Callable, Iterable, MutableMapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Protocol

from ...error_handling import handle_error
from ...logging_config import get_logger
from ...models.family import FamilyMember, FamilyMemory
from ...services.family_data import FamilyDataService
from ...services.storage import guess_content_type
from ...utils.filters import ALL_CATEGORIES
from ..components.notifications import Notifier, failure, success

logger = get_logger(__name__)


class UploadedFileLike(Protocol):
    """The parts of Streamlit's ``UploadedFile`` the forms rely on."""

    name: str
    type: str | None

    def getvalue(self) -> bytes: ...


@dataclass(frozen=True)
class SelectedFile:
    name: str
    content_type: str
    data: bytes

    @classmethod
    def from_upload(cls, uploaded: UploadedFileLike) -> "SelectedFile":
        return cls(
            name=uploaded.name,
            content_type=uploaded.type or guess_content_type(uploaded.name),
            data=uploaded.getvalue(),
        )

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    @property
    def stem(self) -> str:
        return Path(self.name).stem


def build_preview(file: SelectedFile) -> str:
    """Inline ``data:`` URL for showing the selected file before upload."""
    encoded = base64.b64encode(file.data).decode("ascii")
    return f"data:{file.content_type};base64,{encoded}"


def parse_fun_facts(text: str) -> list[str]:
    """One fun fact per non-blank line."""
    return [line.strip() for line in text.splitlines() if line.strip()]


class PeopleTagger:
    """
    Names of the people in a photo.

    Names are kept in the order they were added and compared by exact
    string match. Known members can be toggled; anyone else is added as
    free text.
    """

    def __init__(self, known_members: Sequence[FamilyMember] = (), selected: Iterable[str] = ()) -> None:
        self.known_members = list(known_members)
        self._selected: list[str] = []
        for name in selected:
            self.add(name)

    @property
    def selected(self) -> list[str]:
        return list(self._selected)

    @property
    def known_names(self) -> list[str]:
        return [member.name for member in self.known_members]

    def is_selected(self, name: str) -> bool:
        return name in self._selected

    def add(self, name: str) -> bool:
        """
        Add a name; blanks and duplicates are ignored.

        Returns:
            bool: True if the name was added
        """
        name = name.strip()
        if not name or name in self._selected:
            return False
        self._selected.append(name)
        return True

    def remove(self, name: str) -> bool:
        if name not in self._selected:
            return False
        self._selected.remove(name)
        return True

    def toggle(self, name: str) -> bool:
        """Flip a name's selection; returns whether it is selected afterwards."""
        if self.is_selected(name):
            self.remove(name)
            return False
        return self.add(name)

    def clear(self) -> None:
        self._selected.clear()

    def member_ids(self) -> list[str]:
        """Ids of the known members among the selected names."""
        by_name: dict[str, str] = {}
        for member in self.known_members:
            by_name.setdefault(member.name, member.id)
        return [by_name[name] for name in self._selected if name in by_name]


@dataclass
class _FormFlow:
    is_submitting: bool = field(default=False, init=False)
    is_open: bool = field(default=True, init=False)

    def _run(
        self,
        operation: str,
        write: Callable[[], Any],
        notifier: Notifier,
        on_success: Callable[[Any], None] | None,
        success_title: str,
        failure_title: str,
        callback_value: Callable[[Any], Any] = lambda result: result,
    ) -> bool:
        if self.is_submitting:
            logger.warning("form_submission_in_flight", operation=operation)
            return False

        self.is_submitting = True
        try:
            try:
                result = write()
            except Exception as e:
                error_info = handle_error(e, {"operation": operation})
                notifier.notify(failure(failure_title, error_info.user_message))
                return False
            if result is None or result is False:
                notifier.notify(failure(failure_title, "Please try again."))
                return False

            # The write succeeded; callback errors are logged and the form stays closed.
            self.is_open = False
            notifier.notify(success(success_title))
            if on_success is not None:
                try:
                    on_success(callback_value(result))
                except Exception as e:
                    handle_error(e, {"operation": f"{operation}_callback"})
            return True
        finally:
            self.is_submitting = False


@dataclass
class _FileFormFlow(_FormFlow):
    selected_file: SelectedFile | None = field(default=None, init=False)
    preview_url: str | None = field(default=None, init=False)

    def select_file(self, file: SelectedFile) -> bool:
        """
        Select a file, replacing any previous selection and its preview.

        Returns:
            bool: False if the file is not an image
        """
        if not file.is_image:
            logger.warning("non_image_file_rejected", filename=file.name, content_type=file.content_type)
            return False
        self.selected_file = file
        self.preview_url = build_preview(file)
        return True

    def clear_file(self) -> None:
        self.selected_file = None
        self.preview_url = None

    def _require_file(self, notifier: Notifier) -> SelectedFile | None:
        if self.selected_file is None:
            notifier.notify(failure("No photo selected", "Choose an image file first."))
        return self.selected_file


@dataclass
class PhotoUploadForm(_FileFormFlow):
    title: str = ""
    description: str = ""
    location: str = ""
    taken_date: date | None = None
    category_id: str | None = None
    featured: bool = False
    people: PeopleTagger = field(default_factory=PeopleTagger)

    def select_file(self, file: SelectedFile) -> bool:
        selected = super().select_file(file)
        if selected and not self.title.strip():
            self.title = file.stem
        return selected

    def metadata(self) -> dict[str, Any]:
        """Photo record values for the metadata insert."""
        category_id = None if self.category_id in (None, "", ALL_CATEGORIES) else self.category_id
        title = self.title.strip() or (self.selected_file.stem if self.selected_file else "Untitled")
        return {
            "title": title,
            "description": self.description.strip() or None,
            "location": self.location.strip() or None,
            "taken_date": self.taken_date,
            "category_id": category_id,
            "featured": self.featured,
            "tags": self.people.selected,
        }

    def submit(
        self,
        service: FamilyDataService,
        notifier: Notifier,
        on_success: Callable[[Any], None] | None = None,
    ) -> bool:
        """Upload the selected file and create its photo record."""
        file = self._require_file(notifier)
        if file is None:
            return False
        return self._run(
            "upload_family_photo",
            lambda: service.upload_family_photo(
                file.data, file.name, file.content_type, self.metadata(), self.people.member_ids()
            ),
            notifier,
            on_success,
            success_title="Photo uploaded",
            failure_title="Upload failed",
        )

    def reset(self) -> None:
        """Clear every field for the next upload."""
        known = self.people.known_members
        self.clear_file()
        self.title = self.description = self.location = ""
        self.taken_date = None
        self.category_id = None
        self.featured = False
        self.people = PeopleTagger(known)
        self.is_open = True


@dataclass
class AvatarUploadForm(_FileFormFlow):
    member_id: str = ""

    def submit(
        self,
        service: FamilyDataService,
        notifier: Notifier,
        on_success: Callable[[Any], None] | None = None,
    ) -> bool:
        """Upload the selected file as the member's avatar; the callback gets the new URL."""
        file = self._require_file(notifier)
        if file is None:
            return False
        return self._run(
            "update_member_avatar",
            lambda: service.update_member_avatar(self.member_id, file.data, file.name, file.content_type),
            notifier,
            on_success,
            success_title="Profile picture updated",
            failure_title="Upload failed",
            callback_value=lambda member: member.avatar_url,
        )


@dataclass
class MemberEditForm(_FormFlow):
    member_id: str = ""
    name: str = ""
    relationship: str = ""
    nickname: str = ""
    birthday: date | None = None
    bio: str = ""
    fun_facts_text: str = ""
    _original: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    def from_member(cls, member: FamilyMember) -> "MemberEditForm":
        form = cls(
            member_id=member.id,
            name=member.name,
            relationship=member.relationship or "",
            nickname=member.nickname or "",
            birthday=member.birthday,
            bio=member.bio or "",
            fun_facts_text="\n".join(member.fun_facts),
        )
        form._original = form.values()
        return form

    def values(self) -> dict[str, Any]:
        return {
            "name": self.name.strip(),
            "relationship": self.relationship.strip() or None,
            "nickname": self.nickname.strip() or None,
            "birthday": self.birthday,
            "bio": self.bio.strip() or None,
            "fun_facts": parse_fun_facts(self.fun_facts_text),
        }

    def changes(self) -> dict[str, Any]:
        """Fields that differ from the member the form was opened with."""
        return {key: value for key, value in self.values().items() if self._original.get(key) != value}

    def submit(
        self,
        service: FamilyDataService,
        notifier: Notifier,
        on_success: Callable[[Any], None] | None = None,
    ) -> bool:
        if not self.name.strip():
            notifier.notify(failure("Name is required"))
            return False
        updates = self.changes()
        if not updates:
            self.is_open = False
            return True
        return self._run(
            "update_family_member",
            lambda: service.update_family_member(self.member_id, updates),
            notifier,
            on_success,
            success_title="Profile updated",
            failure_title="Could not save profile",
        )


@dataclass
class MemoryForm(_FormFlow):
    member_id: str = ""
    memory_id: str | None = None
    title: str = ""
    content: str = ""
    memory_date: date | None = None
    location: str = ""
    is_favorite: bool = False

    @classmethod
    def for_memory(cls, memory: FamilyMemory) -> "MemoryForm":
        return cls(
            member_id=memory.member_id,
            memory_id=memory.id,
            title=memory.title,
            content=memory.content,
            memory_date=memory.memory_date,
            location=memory.location or "",
            is_favorite=memory.is_favorite,
        )

    @property
    def is_editing(self) -> bool:
        return self.memory_id is not None

    def values(self) -> dict[str, Any]:
        return {
            "member_id": self.member_id,
            "title": self.title.strip(),
            "content": self.content.strip(),
            "memory_date": self.memory_date or None,
            "location": self.location.strip() or None,
            "is_favorite": self.is_favorite,
        }

    def submit(
        self,
        service: FamilyDataService,
        notifier: Notifier,
        on_success: Callable[[Any], None] | None = None,
    ) -> bool:
        values = self.values()
        if not values["title"] or not values["content"]:
            notifier.notify(failure("Title and story are required"))
            return False
        if self.is_editing:
            memory_id = self.memory_id or ""
            return self._run(
                "update_memory",
                lambda: service.update_memory(memory_id, values),
                notifier,
                on_success,
                success_title="Memory updated",
                failure_title="Could not update memory",
            )
        return self._run(
            "create_memory",
            lambda: service.create_memory(values),
            notifier,
            on_success,
            success_title="Memory added",
            failure_title="Could not add memory",
        )


def delete_memory_action(
    service: FamilyDataService,
    notifier: Notifier,
    memory_id: str,
    on_success: Callable[[str], None] | None = None,
) -> bool:
    """Delete a memory and report the outcome."""
    try:
        deleted = service.delete_memory(memory_id)
    except Exception as e:
        error_info = handle_error(e, {"operation": "delete_memory", "memory_id": memory_id})
        notifier.notify(failure("Could not delete memory", error_info.user_message))
        return False
    if not deleted:
        notifier.notify(failure("Could not delete memory", "Please try again."))
        return False
    if on_success is not None:
        on_success(memory_id)
    notifier.notify(success("Memory deleted"))
    return True


# Session keys of the file forms a page mounts: (form key prefix, widget key prefix).
PAGE_FILE_FORMS: dict[str, tuple[str, str]] = {
    "photos": ("photo_upload_form", "photo_upload_"),
    "member_profile": ("avatar_upload_form_", "avatar_upload_"),
}


def release_file_forms(session: MutableMapping[str, Any], form_prefix: str, widget_prefix: str) -> int:
    """
    Drop the file forms under ``form_prefix`` and the widget values under ``widget_prefix``.

    Selected files and their previews are cleared before the forms are dropped.

    Returns:
        int: Number of file forms released
    """
    released = 0
    for key in [k for k in session.keys() if str(k).startswith(form_prefix)]:
        form = session.pop(key)
        if isinstance(form, _FileFormFlow):
            form.clear_file()
            released += 1
    for key in [k for k in session.keys() if str(k).startswith(widget_prefix)]:
        del session[key]
    if released:
        logger.debug("file_forms_released", form_prefix=form_prefix, count=released)
    return released


def release_page_forms(session: MutableMapping[str, Any], page: str) -> int:
    """Release the file forms of ``page`` when its view unmounts."""
    if page not in PAGE_FILE_FORMS:
        return 0
    return release_file_forms(session, *PAGE_FILE_FORMS[page])
