"""
Family record models for familyhub.

Each dataclass mirrors one table of the record store. Rows come back from
DuckDB as dictionaries keyed by column name; ``from_row`` accepts those (and
ISO strings for temporal columns, as passed through session state) and
``to_dict`` produces the column mapping used for inserts.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """Fixed vocabulary for family event tags."""

    BIRTHDAY = "birthday"
    HOLIDAY = "holiday"
    VACATION = "vacation"
    MILESTONE = "milestone"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "EventType | None":
        """Normalise a stored tag; unknown tags become OTHER."""
        if not value:
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return cls.OTHER


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _string_list(value: Any) -> list[str]:
    if not value:
        return []
    return [str(item) for item in value]


def new_id() -> str:
    """Generate a record identifier."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as a naive UTC timestamp, matching DuckDB TIMESTAMP columns."""
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass
class PhotoCategory:
    """Named grouping applied to photos for filtering."""

    id: str
    name: str
    description: str | None = None
    color: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "PhotoCategory":
        return cls(
            id=row["id"],
            name=row["name"],
            description=row.get("description"),
            color=row.get("color"),
            created_at=_parse_datetime(row.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "created_at": _iso(self.created_at),
        }


@dataclass
class FamilyMember:
    """A person in the family tree shown on the members page."""

    id: str
    name: str
    relationship: str | None = None
    nickname: str | None = None
    birthday: date | None = None
    bio: str | None = None
    fun_facts: list[str] = field(default_factory=list)
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "FamilyMember":
        return cls(
            id=row["id"],
            name=row["name"],
            relationship=row.get("relationship"),
            nickname=row.get("nickname"),
            birthday=_parse_date(row.get("birthday")),
            bio=row.get("bio"),
            fun_facts=_string_list(row.get("fun_facts")),
            avatar_url=row.get("avatar_url"),
            created_at=_parse_datetime(row.get("created_at")),
            updated_at=_parse_datetime(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "relationship": self.relationship,
            "nickname": self.nickname,
            "birthday": _iso(self.birthday),
            "bio": self.bio,
            "fun_facts": list(self.fun_facts),
            "avatar_url": self.avatar_url,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @property
    def initials(self) -> str:
        """Initials shown in place of a missing avatar."""
        parts = [part for part in self.name.split() if part]
        return "".join(part[0].upper() for part in parts[:2]) or "?"


@dataclass
class FamilyEvent:
    """A dated family occasion, upcoming or past."""

    id: str
    title: str
    event_date: datetime
    location: str | None = None
    description: str | None = None
    attendees: list[str] = field(default_factory=list)
    event_type: EventType | None = None
    photos: list[str] = field(default_factory=list)
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "FamilyEvent":
        event_date = _parse_datetime(row["event_date"])
        if event_date is None:
            raise ValueError("event_date is required")
        return cls(
            id=row["id"],
            title=row["title"],
            event_date=event_date,
            location=row.get("location"),
            description=row.get("description"),
            attendees=_string_list(row.get("attendees")),
            event_type=EventType.parse(row.get("event_type")),
            photos=_string_list(row.get("photos")),
            is_recurring=bool(row.get("is_recurring") or False),
            recurrence_pattern=row.get("recurrence_pattern"),
            created_at=_parse_datetime(row.get("created_at")),
            updated_at=_parse_datetime(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "event_date": _iso(self.event_date),
            "location": self.location,
            "description": self.description,
            "attendees": list(self.attendees),
            "event_type": self.event_type.value if self.event_type else None,
            "photos": list(self.photos),
            "is_recurring": self.is_recurring,
            "recurrence_pattern": self.recurrence_pattern,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class FamilyPhoto:
    """Photo metadata; the image itself lives in object storage at ``image_url``."""

    id: str
    title: str
    image_url: str
    description: str | None = None
    location: str | None = None
    taken_date: date | None = None
    tags: list[str] = field(default_factory=list)
    category_id: str | None = None
    featured: bool = False
    category: PhotoCategory | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "FamilyPhoto":
        category = None
        if row.get("category_name"):
            category = PhotoCategory(
                id=row["category_id"],
                name=row["category_name"],
                description=row.get("category_description"),
                color=row.get("category_color"),
            )
        return cls(
            id=row["id"],
            title=row["title"],
            image_url=row["image_url"],
            description=row.get("description"),
            location=row.get("location"),
            taken_date=_parse_date(row.get("taken_date")),
            tags=_string_list(row.get("tags")),
            category_id=row.get("category_id"),
            featured=bool(row.get("featured") or False),
            category=category,
            created_at=_parse_datetime(row.get("created_at")),
            updated_at=_parse_datetime(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "image_url": self.image_url,
            "description": self.description,
            "location": self.location,
            "taken_date": _iso(self.taken_date),
            "tags": list(self.tags),
            "category_id": self.category_id,
            "featured": self.featured,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @property
    def people(self) -> list[str]:
        """Names of the people tagged in the photo."""
        return self.tags


@dataclass
class FamilyPost:
    """A news-feed style post."""

    id: str
    title: str
    content: str
    post_date: datetime
    author_id: str | None = None
    images: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    is_milestone: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "FamilyPost":
        return cls(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            post_date=_parse_datetime(row.get("post_date")) or utc_now(),
            author_id=row.get("author_id"),
            images=_string_list(row.get("images")),
            tags=_string_list(row.get("tags")),
            is_milestone=bool(row.get("is_milestone") or False),
            created_at=_parse_datetime(row.get("created_at")),
            updated_at=_parse_datetime(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "post_date": _iso(self.post_date),
            "author_id": self.author_id,
            "images": list(self.images),
            "tags": list(self.tags),
            "is_milestone": self.is_milestone,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class FamilyMemory:
    """A dated anecdote attached to one family member."""

    id: str
    member_id: str
    title: str
    content: str
    memory_date: date | None = None
    location: str | None = None
    is_favorite: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "FamilyMemory":
        return cls(
            id=row["id"],
            member_id=row["member_id"],
            title=row["title"],
            content=row["content"],
            memory_date=_parse_date(row.get("memory_date")),
            location=row.get("location"),
            is_favorite=bool(row.get("is_favorite") or False),
            created_at=_parse_datetime(row.get("created_at")),
            updated_at=_parse_datetime(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "member_id": self.member_id,
            "title": self.title,
            "content": self.content,
            "memory_date": _iso(self.memory_date),
            "location": self.location,
            "is_favorite": self.is_favorite,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class PhotoMemberLink:
    """Association row between a photo and a member appearing in it."""

    photo_id: str
    member_id: str
