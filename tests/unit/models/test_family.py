"""
Unit tests for family record models.
"""

from datetime import date, datetime

import pytest

from familyhub.models.family import (
    EventType,
    FamilyEvent,
    FamilyMember,
    FamilyMemory,
    FamilyPhoto,
    FamilyPost,
    PhotoCategory,
)


@pytest.mark.unit
class TestEventType:
    def test_parse(self):
        assert EventType.parse("Birthday") == EventType.BIRTHDAY
        assert EventType.parse("graduation") == EventType.OTHER
        assert EventType.parse(None) is None
        assert EventType.parse("") is None


@pytest.mark.unit
class TestFamilyMember:
    def test_from_row_with_iso_strings(self):
        member = FamilyMember.from_row(
            {
                "id": "m1",
                "name": "Rose Miller",
                "birthday": "1950-03-04",
                "fun_facts": None,
                "created_at": "2024-01-01T10:00:00Z",
            }
        )

        assert member.birthday == date(1950, 3, 4)
        assert member.fun_facts == []
        assert member.created_at.year == 2024

    def test_to_dict_round_trips(self):
        member = FamilyMember(id="m1", name="Rose", birthday=date(1950, 3, 4), fun_facts=["Bakes"])

        assert FamilyMember.from_row(member.to_dict()) == member

    @pytest.mark.parametrize(
        "name,initials",
        [("Rose Miller", "RM"), ("cher", "C"), ("Mary Ann Smith", "MA"), ("  ", "?")],
    )
    def test_initials(self, name, initials):
        assert FamilyMember(id="m1", name=name).initials == initials


@pytest.mark.unit
class TestFamilyEvent:
    def test_from_row(self):
        event = FamilyEvent.from_row(
            {
                "id": "e1",
                "title": "Reunion",
                "event_date": date(2024, 7, 4),
                "event_type": "holiday",
                "attendees": ["Rose"],
                "photos": None,
                "is_recurring": None,
            }
        )

        assert event.event_date == datetime(2024, 7, 4)
        assert event.event_type == EventType.HOLIDAY
        assert event.photos == []
        assert not event.is_recurring

    def test_event_date_required(self):
        with pytest.raises(ValueError):
            FamilyEvent.from_row({"id": "e1", "title": "Reunion", "event_date": None})

    def test_to_dict_uses_tag_value(self):
        event = FamilyEvent(id="e1", title="Party", event_date=datetime(2024, 1, 1), event_type=EventType.BIRTHDAY)

        assert event.to_dict()["event_type"] == "birthday"


@pytest.mark.unit
class TestFamilyPhoto:
    def test_from_row_with_category(self):
        photo = FamilyPhoto.from_row(
            {
                "id": "p1",
                "title": "Beach",
                "image_url": "https://example.com/p1.jpg",
                "category_id": "c1",
                "category_name": "Vacations",
                "category_color": "#00f",
                "tags": ["Rose", "Sam"],
                "featured": True,
            }
        )

        assert photo.category == PhotoCategory(id="c1", name="Vacations", color="#00f")
        assert photo.people == ["Rose", "Sam"]
        assert photo.featured

    def test_from_row_without_category(self):
        photo = FamilyPhoto.from_row({"id": "p1", "title": "Beach", "image_url": "u", "category_id": None})

        assert photo.category is None
        assert photo.people == []


@pytest.mark.unit
def test_post_without_date_gets_one():
    post = FamilyPost.from_row({"id": "x", "title": "Hello", "content": "Hi"})

    assert post.post_date is not None


@pytest.mark.unit
def test_memory_round_trip():
    memory = FamilyMemory(id="mem1", member_id="m1", title="Bike", content="Story", memory_date=date(1990, 6, 1))

    assert FamilyMemory.from_row(memory.to_dict()) == memory
