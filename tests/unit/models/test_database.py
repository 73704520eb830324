"""
Unit tests for database management.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from familyhub.models.database import DatabaseManager, create_database, get_database_manager
from familyhub.models.schema import REQUIRED_COLUMNS, get_schema_statements, get_table_names


@pytest.mark.unit
class TestSchema:
    def test_every_table_has_required_columns(self):
        assert set(get_table_names()) == set(REQUIRED_COLUMNS)

    def test_statements_are_idempotent(self):
        assert all("IF NOT EXISTS" in statement for statement in get_schema_statements())


@pytest.mark.integration
class TestDatabaseManager:
    def test_create_database(self, temp_dir):
        db_path = temp_dir / "nested" / "family.db"

        with create_database(str(db_path)) as db_manager:
            assert db_manager.verify_schema()

        assert db_path.exists()

    def test_in_memory_database(self):
        with create_database(":memory:") as db_manager:
            db_manager.execute("INSERT INTO photo_categories (id, name) VALUES (?, ?)", ["c1", "Holidays"])

            assert db_manager.fetch_one("SELECT name FROM photo_categories WHERE id = ?", ["c1"]) == {
                "name": "Holidays"
            }
            assert db_manager.fetch_one("SELECT name FROM photo_categories WHERE id = ?", ["missing"]) is None

    def test_fetch_all_returns_dicts(self):
        with create_database(":memory:") as db_manager:
            db_manager.execute("INSERT INTO photo_members VALUES ('p1', 'm1'), ('p1', 'm2')")

            rows = db_manager.fetch_all("SELECT * FROM photo_members ORDER BY member_id")

        assert rows == [{"photo_id": "p1", "member_id": "m1"}, {"photo_id": "p1", "member_id": "m2"}]

    def test_verify_schema_on_empty_database(self):
        db_manager = DatabaseManager(":memory:")
        try:
            assert not db_manager.verify_schema()
        finally:
            db_manager.close()

    def test_get_database_manager_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            get_database_manager(str(temp_dir / "missing.db"), create_if_missing=False)

    def test_get_database_manager_reopens_existing(self, temp_dir):
        db_path = str(temp_dir / "family.db")
        create_database(db_path).close()

        with get_database_manager(db_path) as db_manager:
            assert db_manager.verify_schema()

    def test_snapshot_bytes_contains_committed_rows(self, temp_dir):
        db_path = temp_dir / "family.db"
        with create_database(str(db_path)) as db_manager:
            db_manager.execute("INSERT INTO photo_categories (id, name) VALUES (?, ?)", ["c1", "Holidays"])

            snapshot = db_manager.snapshot_bytes()

        copy_path = temp_dir / "copy.db"
        copy_path.write_bytes(snapshot)
        with get_database_manager(str(copy_path), create_if_missing=False) as copy:
            assert copy.fetch_one("SELECT name FROM photo_categories WHERE id = ?", ["c1"]) == {"name": "Holidays"}

    def test_snapshot_reads_file_under_lock(self, temp_dir):
        db_manager = create_database(str(temp_dir / "family.db"))
        events = []
        lock = MagicMock()
        lock.__enter__.side_effect = lambda: events.append("acquire")
        lock.__exit__.side_effect = lambda *args: events.append("release")
        db_manager._lock = lock

        def read_bytes(path):
            events.append("read")
            return b"db"

        try:
            with patch.object(Path, "read_bytes", autospec=True, side_effect=read_bytes):
                assert db_manager.snapshot_bytes() == b"db"
        finally:
            db_manager.close()

        assert events == ["acquire", "read", "release"]

    def test_snapshot_of_memory_database(self):
        with create_database(":memory:") as db_manager:
            with pytest.raises(ValueError):
                db_manager.snapshot_bytes()
