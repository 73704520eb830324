"""
Data access layer for familyhub.

One method per read or write against the backend (DuckDB records plus GCS
objects). Nothing here raises to the caller:

* Reads return a :class:`FetchResult`. On failure ``data`` is still a usable
  value (``[]`` for collections, ``None`` for single records) and ``error``
  carries the reason, so pages can tell "no records" from "backend down".
* Writes return the affected record (``bool`` for deletes) or ``None`` when
  the backend rejected them. Call sites decide how to tell the user.

File uploads are two-phase: the object is stored first, and the metadata
record is only written once the object store has returned its public URL.
"""

import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

from ..config import get_database_path, is_database_backup_enabled
from ..logging_config import get_logger, log_user_action
from ..models.database import DatabaseManager, get_database_manager
from ..models.family import (
    EventType,
    FamilyEvent,
    FamilyMember,
    FamilyMemory,
    FamilyPhoto,
    FamilyPost,
    PhotoCategory,
    new_id,
    utc_now,
)
from .storage import StorageService, get_storage_service

logger = get_logger(__name__)

T = TypeVar("T")

# Columns callers may set on insert/update; ids and timestamps are managed here.
MEMBER_COLUMNS = ("name", "relationship", "nickname", "birthday", "bio", "fun_facts", "avatar_url")
EVENT_COLUMNS = (
    "title",
    "event_date",
    "location",
    "description",
    "attendees",
    "event_type",
    "photos",
    "is_recurring",
    "recurrence_pattern",
)
PHOTO_COLUMNS = ("title", "description", "image_url", "location", "taken_date", "tags", "category_id", "featured")
POST_COLUMNS = ("title", "content", "author_id", "post_date", "images", "tags", "is_milestone")
MEMORY_COLUMNS = ("member_id", "title", "content", "memory_date", "location", "is_favorite")
LIST_COLUMNS = {"fun_facts", "attendees", "photos", "tags", "images"}

PHOTO_SELECT = """
SELECT p.*,
       c.name AS category_name,
       c.description AS category_description,
       c.color AS category_color
FROM family_photos p
LEFT JOIN photo_categories c ON c.id = p.category_id
"""
PHOTO_ORDER = " ORDER BY p.taken_date DESC NULLS LAST, p.created_at DESC"


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of a read: the data plus, on failure, why it is empty."""

    data: T
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def success(cls, data: T) -> "FetchResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, default: T, reason: str) -> "FetchResult[T]":
        return cls(data=default, error=reason)


def _clean_values(values: dict[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """Keep whitelisted columns and normalise blanks from form input."""
    cleaned: dict[str, Any] = {}
    for column in allowed:
        if column not in values:
            continue
        value = values[column]
        if isinstance(value, EventType):
            value = value.value
        if column in LIST_COLUMNS:
            value = [str(item) for item in (value or [])]
        elif isinstance(value, str) and value.strip() == "" and column not in ("title", "name", "content"):
            value = None
        cleaned[column] = value
    return cleaned


def build_storage_path(prefix: str, filename: str, stem: str | None = None) -> str:
    """
    Build an object path that keeps the original file extension.

    Args:
        prefix: Folder inside the bucket (``photos``, ``avatars``)
        filename: Original filename, used only for its extension
        stem: Object name without extension (random id when omitted)
    """
    extension = Path(filename).suffix.lower() or ".jpg"
    return f"{prefix}/{stem or new_id()}{extension}"


class FamilyDataService:
    """Reads and writes family records against DuckDB and GCS."""

    def __init__(
        self,
        db_manager: DatabaseManager,
        storage_service: StorageService | None = None,
        backup_enabled: bool = False,
    ) -> None:
        """
        Args:
            db_manager: Database holding the family tables
            storage_service: Object store; resolved lazily from configuration when omitted
            backup_enabled: Copy the database file to GCS after each successful write
        """
        self.db = db_manager
        self._storage = storage_service
        self.backup_enabled = backup_enabled

    @property
    def storage(self) -> StorageService:
        if self._storage is None:
            self._storage = get_storage_service()
        return self._storage

    # ------------------------------------------------------------------
    # internal helpers

    def _fetch(self, operation: str, default: T, loader: Callable[[], T], **context: Any) -> FetchResult[T]:
        try:
            return FetchResult.success(loader())
        except Exception as e:
            logger.error(f"{operation}_failed", error=str(e), error_type=type(e).__name__, **context)
            return FetchResult.failure(default, str(e))

    def _insert(self, table: str, values: dict[str, Any]) -> dict[str, Any] | None:
        now = utc_now()
        row = {"id": new_id(), **values, "created_at": now}
        if table != "photo_categories":
            row["updated_at"] = now
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        return self.db.fetch_one(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders}) RETURNING *",  # nosec B608
            list(row.values()),
        )

    def _update(self, table: str, record_id: str, values: dict[str, Any]) -> dict[str, Any] | None:
        values = {**values, "updated_at": utc_now()}
        assignments = ", ".join(f"{column} = ?" for column in values)
        return self.db.fetch_one(
            f"UPDATE {table} SET {assignments} WHERE id = ? RETURNING *",  # nosec B608
            [*values.values(), record_id],
        )

    def _after_write(self, action: str, **context: Any) -> None:
        log_user_action(context.pop("user_id", "system"), action, **context)
        if self.backup_enabled:
            self.backup_database()

    def backup_database(self) -> bool:
        """
        Copy the DuckDB file to the database bucket.

        Returns:
            bool: True if the backup was written
        """
        if self.db.db_path == ":memory:":
            return False
        try:
            if not self.storage.has_database_backup():
                return False
            self.storage.upload_database_file(self.db.snapshot_bytes())
            return True
        except Exception as e:
            logger.error("database_backup_failed", db_path=self.db.db_path, error=str(e))
            return False

    # ------------------------------------------------------------------
    # family members

    def get_family_members(self) -> FetchResult[list[FamilyMember]]:
        """All members ordered by name."""
        return self._fetch(
            "get_family_members",
            [],
            lambda: [
                FamilyMember.from_row(row) for row in self.db.fetch_all("SELECT * FROM family_members ORDER BY name")
            ],
        )

    def get_family_member_by_id(self, member_id: str) -> FetchResult[FamilyMember | None]:
        def load() -> FamilyMember | None:
            row = self.db.fetch_one("SELECT * FROM family_members WHERE id = ?", [member_id])
            return FamilyMember.from_row(row) if row else None

        return self._fetch("get_family_member_by_id", None, load, member_id=member_id)

    def create_family_member(self, values: dict[str, Any]) -> FamilyMember | None:
        try:
            row = self._insert("family_members", _clean_values(values, MEMBER_COLUMNS))
        except Exception as e:
            logger.error("create_family_member_failed", error=str(e))
            return None
        if row is None:
            return None
        member = FamilyMember.from_row(row)
        self._after_write("member_created", member_id=member.id)
        return member

    def update_family_member(self, member_id: str, updates: dict[str, Any]) -> FamilyMember | None:
        """
        Apply a partial update to a member.

        Returns:
            The updated member, or None if it does not exist or the write failed
        """
        values = _clean_values(updates, MEMBER_COLUMNS)
        if not values:
            logger.warning("update_family_member_empty", member_id=member_id)
            return self.get_family_member_by_id(member_id).data
        try:
            row = self._update("family_members", member_id, values)
        except Exception as e:
            logger.error("update_family_member_failed", member_id=member_id, error=str(e))
            return None
        if row is None:
            logger.warning("update_family_member_not_found", member_id=member_id)
            return None
        self._after_write("member_updated", member_id=member_id, fields=sorted(values))
        return FamilyMember.from_row(row)

    # ------------------------------------------------------------------
    # events

    def get_family_events(self) -> FetchResult[list[FamilyEvent]]:
        """All events, most recent first."""
        return self._fetch(
            "get_family_events",
            [],
            lambda: [
                FamilyEvent.from_row(row)
                for row in self.db.fetch_all("SELECT * FROM family_events ORDER BY event_date DESC")
            ],
        )

    def get_family_event_by_id(self, event_id: str) -> FetchResult[FamilyEvent | None]:
        def load() -> FamilyEvent | None:
            row = self.db.fetch_one("SELECT * FROM family_events WHERE id = ?", [event_id])
            return FamilyEvent.from_row(row) if row else None

        return self._fetch("get_family_event_by_id", None, load, event_id=event_id)

    def create_family_event(self, values: dict[str, Any]) -> FamilyEvent | None:
        try:
            row = self._insert("family_events", _clean_values(values, EVENT_COLUMNS))
        except Exception as e:
            logger.error("create_family_event_failed", error=str(e))
            return None
        if row is None:
            return None
        event = FamilyEvent.from_row(row)
        self._after_write("event_created", event_id=event.id)
        return event

    # ------------------------------------------------------------------
    # photos and categories

    def get_family_photos(self) -> FetchResult[list[FamilyPhoto]]:
        """All photos with their category, newest taken date first."""
        return self._fetch(
            "get_family_photos",
            [],
            lambda: [FamilyPhoto.from_row(row) for row in self.db.fetch_all(PHOTO_SELECT + PHOTO_ORDER)],
        )

    def get_photos_for_member(self, member_id: str) -> FetchResult[list[FamilyPhoto]]:
        """Photos the member is linked to through the association table."""
        query = PHOTO_SELECT + " JOIN photo_members pm ON pm.photo_id = p.id WHERE pm.member_id = ?" + PHOTO_ORDER
        return self._fetch(
            "get_photos_for_member",
            [],
            lambda: [FamilyPhoto.from_row(row) for row in self.db.fetch_all(query, [member_id])],
            member_id=member_id,
        )

    def get_photos_for_event(self, event_id: str) -> FetchResult[list[FamilyPhoto]]:
        """Photos referenced by an event, matched by photo id or image URL."""
        query = PHOTO_SELECT + " WHERE list_contains(?, p.id) OR list_contains(?, p.image_url)" + PHOTO_ORDER

        def load() -> list[FamilyPhoto]:
            row = self.db.fetch_one("SELECT photos FROM family_events WHERE id = ?", [event_id])
            references = [str(reference) for reference in (row or {}).get("photos") or []]
            if not references:
                return []
            return [FamilyPhoto.from_row(photo) for photo in self.db.fetch_all(query, [references, references])]

        return self._fetch("get_photos_for_event", [], load, event_id=event_id)

    def get_photo_categories(self) -> FetchResult[list[PhotoCategory]]:
        return self._fetch(
            "get_photo_categories",
            [],
            lambda: [
                PhotoCategory.from_row(row)
                for row in self.db.fetch_all("SELECT * FROM photo_categories ORDER BY name")
            ],
        )

    def create_photo_category(
        self, name: str, description: str | None = None, color: str | None = None
    ) -> PhotoCategory | None:
        try:
            row = self._insert("photo_categories", {"name": name, "description": description, "color": color})
        except Exception as e:
            logger.error("create_photo_category_failed", name=name, error=str(e))
            return None
        if row is None:
            return None
        self._after_write("category_created", category=name)
        return PhotoCategory.from_row(row)

    def create_family_photo(self, values: dict[str, Any]) -> FamilyPhoto | None:
        """Insert photo metadata that references an already stored image."""
        try:
            row = self._insert("family_photos", _clean_values(values, PHOTO_COLUMNS))
        except Exception as e:
            logger.error("create_family_photo_failed", title=values.get("title"), error=str(e))
            return None
        if row is None:
            return None
        photo = FamilyPhoto.from_row(row)
        self._after_write("photo_created", photo_id=photo.id)
        return photo

    def link_photo_to_members(self, photo_id: str, member_ids: Iterable[str]) -> bool:
        """Record which members appear in a photo; existing links are kept."""
        member_ids = list(dict.fromkeys(member_ids))
        if not member_ids:
            return True
        try:
            for member_id in member_ids:
                self.db.execute(
                    "INSERT INTO photo_members (photo_id, member_id) VALUES (?, ?) ON CONFLICT DO NOTHING",
                    [photo_id, member_id],
                )
        except Exception as e:
            logger.error("link_photo_to_members_failed", photo_id=photo_id, error=str(e))
            return False
        return True

    def upload_photo_to_storage(self, file_data: bytes, path: str, content_type: str | None = None) -> str | None:
        """
        Store a file in the object store (first phase of an upload).

        Returns:
            The public URL of the stored object, or None on failure
        """
        try:
            result = self.storage.upload_file(path, file_data, content_type)
        except Exception as e:
            logger.error("upload_photo_to_storage_failed", path=path, error=str(e))
            return None
        return str(result["public_url"])

    def upload_family_photo(
        self,
        file_data: bytes,
        filename: str,
        content_type: str | None,
        metadata: dict[str, Any],
        member_ids: Iterable[str] = (),
    ) -> FamilyPhoto | None:
        """
        Two-phase photo upload: object first, then the metadata record.

        The metadata insert is never attempted when the object upload fails.
        Member links are written last; a failure there is logged but the
        photo is still returned because it exists and is visible.
        """
        path = build_storage_path("photos", filename)
        started = time.perf_counter()

        image_url = self.upload_photo_to_storage(file_data, path, content_type)
        if image_url is None:
            return None

        photo = self.create_family_photo({**metadata, "image_url": image_url})
        if photo is None:
            logger.error("photo_metadata_insert_failed", path=path)
            return None

        if not self.link_photo_to_members(photo.id, member_ids):
            logger.warning("photo_member_links_incomplete", photo_id=photo.id)

        logger.info(
            "family_photo_uploaded",
            photo_id=photo.id,
            path=path,
            file_size=len(file_data),
            duration_seconds=round(time.perf_counter() - started, 3),
        )
        return photo

    def update_member_avatar(
        self, member_id: str, file_data: bytes, filename: str, content_type: str | None = None
    ) -> FamilyMember | None:
        """
        Two-phase avatar upload: object first, then the member's avatar URL.
        """
        stem = f"profile_{member_id}_{int(time.time() * 1000)}"
        avatar_url = self.upload_photo_to_storage(file_data, build_storage_path("avatars", filename, stem), content_type)
        if avatar_url is None:
            return None
        return self.update_family_member(member_id, {"avatar_url": avatar_url})

    # ------------------------------------------------------------------
    # posts

    def get_family_posts(self) -> FetchResult[list[FamilyPost]]:
        return self._fetch(
            "get_family_posts",
            [],
            lambda: [
                FamilyPost.from_row(row)
                for row in self.db.fetch_all("SELECT * FROM family_posts ORDER BY post_date DESC")
            ],
        )

    def create_family_post(self, values: dict[str, Any]) -> FamilyPost | None:
        cleaned = _clean_values(values, POST_COLUMNS)
        cleaned.setdefault("post_date", utc_now())
        try:
            row = self._insert("family_posts", cleaned)
        except Exception as e:
            logger.error("create_family_post_failed", error=str(e))
            return None
        if row is None:
            return None
        post = FamilyPost.from_row(row)
        self._after_write("post_created", post_id=post.id)
        return post

    # ------------------------------------------------------------------
    # memories

    def get_memories_for_member(self, member_id: str) -> FetchResult[list[FamilyMemory]]:
        query = (
            "SELECT * FROM family_memories WHERE member_id = ? "
            "ORDER BY memory_date DESC NULLS LAST, created_at DESC"
        )
        return self._fetch(
            "get_memories_for_member",
            [],
            lambda: [FamilyMemory.from_row(row) for row in self.db.fetch_all(query, [member_id])],
            member_id=member_id,
        )

    def create_memory(self, values: dict[str, Any]) -> FamilyMemory | None:
        cleaned = _clean_values(values, MEMORY_COLUMNS)
        if not cleaned.get("member_id"):
            logger.error("create_memory_failed", error="member_id is required")
            return None
        try:
            row = self._insert("family_memories", cleaned)
        except Exception as e:
            logger.error("create_memory_failed", member_id=cleaned.get("member_id"), error=str(e))
            return None
        if row is None:
            return None
        memory = FamilyMemory.from_row(row)
        self._after_write("memory_created", memory_id=memory.id, member_id=memory.member_id)
        return memory

    def update_memory(self, memory_id: str, updates: dict[str, Any]) -> FamilyMemory | None:
        # A memory stays with the member it was written for.
        values = _clean_values(updates, [column for column in MEMORY_COLUMNS if column != "member_id"])
        try:
            row = self._update("family_memories", memory_id, values)
        except Exception as e:
            logger.error("update_memory_failed", memory_id=memory_id, error=str(e))
            return None
        if row is None:
            logger.warning("update_memory_not_found", memory_id=memory_id)
            return None
        self._after_write("memory_updated", memory_id=memory_id)
        return FamilyMemory.from_row(row)

    def delete_memory(self, memory_id: str) -> bool:
        try:
            row = self.db.fetch_one("DELETE FROM family_memories WHERE id = ? RETURNING id", [memory_id])
        except Exception as e:
            logger.error("delete_memory_failed", memory_id=memory_id, error=str(e))
            return False
        if row is None:
            logger.warning("delete_memory_not_found", memory_id=memory_id)
            return False
        self._after_write("memory_deleted", memory_id=memory_id)
        return True


def restore_database(db_path: str, storage_service: StorageService) -> bool:
    """
    Download the database backup to ``db_path`` if no local copy exists.

    Returns:
        bool: True if a backup was restored
    """
    local = Path(db_path)
    if local.exists() or not storage_service.has_database_backup():
        return False
    try:
        file_data = storage_service.download_database_file()
    except Exception as e:
        logger.error("database_restore_failed", db_path=db_path, error=str(e))
        return False
    if file_data is None:
        return False
    local.parent.mkdir(parents=True, exist_ok=True)
    local.write_bytes(file_data)
    logger.info("database_restored", db_path=db_path, file_size=len(file_data))
    return True


_family_data_service: FamilyDataService | None = None
_family_data_service_lock = threading.Lock()


def get_family_data_service() -> FamilyDataService:
    """
    Get the process-wide data service.

    On first use the database backup is restored from GCS when one is
    configured and no local file exists yet.
    """
    global _family_data_service
    if _family_data_service is None:
        with _family_data_service_lock:
            if _family_data_service is None:
                db_path = get_database_path()
                backup_enabled = is_database_backup_enabled()
                storage_service = None
                if backup_enabled:
                    try:
                        storage_service = get_storage_service()
                        restore_database(db_path, storage_service)
                    except Exception as e:
                        logger.warning("database_backup_unavailable", error=str(e))
                        backup_enabled = False
                _family_data_service = FamilyDataService(
                    get_database_manager(db_path, create_if_missing=True),
                    storage_service=storage_service,
                    backup_enabled=backup_enabled,
                )
    return _family_data_service


def reset_family_data_service() -> None:
    """Drop the process-wide service (tests and database resets)."""
    global _family_data_service
    with _family_data_service_lock:
        if _family_data_service is not None:
            _family_data_service.db.close()
        _family_data_service = None
