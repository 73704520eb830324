"""
Unit tests for gallery and event filtering.
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from familyhub.utils.filters import (
    ALL_CATEGORIES,
    count_photos_by_category,
    filter_photos,
    matches_query,
    paginate,
    partition_events,
)
from tests.conftest import TestDataFactory


@pytest.fixture
def photos():
    factory = TestDataFactory()
    return [
        factory.create_photo("Family Reunion 2023", id="p1", location="Lake House", category_id="events"),
        factory.create_photo("Beach Day", id="p2", location="Santa Cruz", category_id="vacation"),
        factory.create_photo(
            "Grandma's Kitchen", id="p3", description="Baking for the reunion", category_id="events"
        ),
        factory.create_photo("Sunset", id="p4"),
    ]


@pytest.mark.unit
class TestMatchesQuery:
    def test_blank_query_matches_everything(self, photos):
        assert all(matches_query(photo, "") for photo in photos)
        assert all(matches_query(photo, "   ") for photo in photos)

    def test_case_insensitive_title_match(self, photos):
        assert matches_query(photos[0], "REUNION")

    def test_location_match(self, photos):
        assert matches_query(photos[1], "santa")

    def test_description_match(self, photos):
        assert matches_query(photos[2], "baking")

    def test_missing_fields_do_not_match(self, photos):
        assert not matches_query(photos[3], "lake")

    def test_query_is_trimmed(self, photos):
        assert matches_query(photos[1], "  beach  ")


@pytest.mark.unit
class TestFilterPhotos:
    def test_query_matches_title_or_description(self, photos):
        result = filter_photos(photos, "reunion")

        assert [photo.id for photo in result] == ["p1", "p3"]

    def test_reunion_titles_in_original_order(self):
        factory = TestDataFactory()
        gallery = [
            factory.create_photo("Reunion 2023", id="r1"),
            factory.create_photo("Beach Day", id="r2"),
            factory.create_photo("Reunion Planning", id="r3"),
        ]

        result = filter_photos(gallery, "reunion")

        assert result == [gallery[0], gallery[2]]

    def test_all_category_and_empty_query_keep_everything(self, photos):
        result = filter_photos(photos, "", ALL_CATEGORIES)

        assert result == photos

    def test_category_filter(self, photos):
        result = filter_photos(photos, category="vacation")

        assert [photo.id for photo in result] == ["p2"]

    def test_query_and_category_combine(self, photos):
        assert filter_photos(photos, "reunion", "vacation") == []

    def test_filter_is_idempotent(self, photos):
        once = filter_photos(photos, "reunion", "events")

        assert filter_photos(once, "reunion", "events") == once

    def test_input_is_not_mutated(self, photos):
        original = list(photos)

        filter_photos(photos, "beach")

        assert photos == original

    def test_unknown_category_matches_nothing(self, photos):
        assert filter_photos(photos, category="missing") == []


@pytest.mark.unit
def test_count_photos_by_category(photos):
    counts = count_photos_by_category(photos)

    assert counts == {ALL_CATEGORIES: 4, "events": 2, "vacation": 1}


@pytest.mark.unit
class TestPartitionEvents:
    def test_split_and_order(self):
        factory = TestDataFactory()
        now = datetime(2024, 6, 1, 12, 0)
        events = [
            factory.create_event("Old picnic", now - timedelta(days=300), id="e1"),
            factory.create_event("Birthday", now + timedelta(days=30), id="e2"),
            factory.create_event("Graduation", now - timedelta(days=10), id="e3"),
            factory.create_event("Reunion", now + timedelta(days=2), id="e4"),
        ]

        upcoming, past = partition_events(events, now)

        assert [event.id for event in upcoming] == ["e4", "e2"]
        assert [event.id for event in past] == ["e3", "e1"]

    def test_event_at_now_is_upcoming(self):
        now = datetime(2024, 6, 1, 12, 0)
        event = TestDataFactory().create_event(event_date=now)

        upcoming, past = partition_events([event], now)

        assert upcoming == [event]
        assert past == []

    def test_aware_now_is_compared_as_utc(self):
        event = TestDataFactory().create_event(event_date=datetime(2024, 6, 1, 10, 0))
        # 12:00 at UTC+3 is 09:00 UTC, so the event is still ahead.
        now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=3)))

        upcoming, _ = partition_events([event], now)

        assert upcoming == [event]

    def test_defaults_to_current_time(self):
        factory = TestDataFactory()
        future = factory.create_event(event_date=datetime.now(UTC).replace(tzinfo=None) + timedelta(days=1))

        upcoming, past = partition_events([future])

        assert upcoming == [future]
        assert past == []


@pytest.mark.unit
class TestPaginate:
    def test_first_page(self):
        items, has_more = paginate(list(range(10)), 0, 4)

        assert items == [0, 1, 2, 3]
        assert has_more

    def test_last_page(self):
        items, has_more = paginate(list(range(10)), 2, 4)

        assert items == [8, 9]
        assert not has_more

    def test_exact_fit_has_no_more(self):
        items, has_more = paginate(list(range(8)), 1, 4)

        assert items == [4, 5, 6, 7]
        assert not has_more

    def test_negative_page_is_first_page(self):
        items, _ = paginate(list(range(5)), -3, 2)

        assert items == [0, 1]

    def test_invalid_page_size(self):
        with pytest.raises(ValueError):
            paginate([1, 2, 3], 0, 0)
