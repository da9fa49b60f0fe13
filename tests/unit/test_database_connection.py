"""
Unit tests for activity_logs/database/connection.py and migrations.py
Tests DatabaseManager connection handling and schema management.
"""
import pytest
import sqlite3
from unittest.mock import patch

from activity_logs.config import Settings
from activity_logs.database.connection import DatabaseManager
from activity_logs.database.migrations import create_activity_schema, create_auth_schema, drop_schema


# ==========================================================================
# TEST DatabaseManager.__init__
# ==========================================================================

class TestDatabaseManagerInit:
    """Test DatabaseManager initialization."""

    def test_init_uses_activities_url(self, test_settings):
        db_manager = DatabaseManager(test_settings)

        assert db_manager.settings == test_settings
        assert db_manager.db_url == test_settings.database_url
        assert db_manager.is_sqlite is True

    def test_for_auth_uses_auth_url(self, test_settings):
        db_manager = DatabaseManager.for_auth(test_settings)
        assert db_manager.db_url == test_settings.auth_database_url

    def test_unsupported_url_raises(self):
        settings = Settings(_env_file=None, database_url="postgresql://localhost/activities")
        with pytest.raises(ValueError, match="Unsupported database URL"):
            DatabaseManager(settings)

    @patch('activity_logs.database.connection.sqlite3.connect')
    def test_init_failure_raises_error(self, mock_connect, test_settings):
        """Should raise error when the file cannot be opened."""
        mock_connect.side_effect = sqlite3.OperationalError("unable to open database file")

        with pytest.raises(sqlite3.OperationalError):
            DatabaseManager(test_settings)


# ==========================================================================
# TEST query execution
# ==========================================================================

class TestQueryExecution:
    """Test execute_query, execute_many and transaction handling."""

    @pytest.fixture
    def db(self, test_settings):
        db_manager = DatabaseManager(test_settings)
        db_manager.execute_query("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
        return db_manager

    def test_execute_query_fetch_one(self, db):
        db.execute_query("INSERT INTO items (name) VALUES (?)", ("alpha",))

        row = db.execute_query("SELECT name FROM items WHERE name = ?", ("alpha",), fetch_one=True)

        assert row["name"] == "alpha"

    def test_execute_query_without_fetch_returns_none(self, db):
        assert db.execute_query("INSERT INTO items (name) VALUES (?)", ("beta",)) is None

    def test_execute_many(self, db):
        db.execute_many("INSERT INTO items (name) VALUES (?)", [("a",), ("b",), ("c",)])

        rows = db.execute_query("SELECT name FROM items ORDER BY id", fetch_all=True)

        assert [row["name"] for row in rows] == ["a", "b", "c"]

    def test_error_rolls_back(self, db):
        with pytest.raises(sqlite3.IntegrityError):
            with db.get_cursor() as cursor:
                cursor.execute("INSERT INTO items (name) VALUES (?)", ("kept?",))
                cursor.execute("INSERT INTO items (name) VALUES (NULL)")

        assert db.execute_query("SELECT COUNT(*) AS n FROM items", fetch_one=True)["n"] == 0

    def test_foreign_keys_enabled(self, db):
        with db.get_connection() as conn:
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_close_all(self, db):
        db.close_all()
        assert db.execute_query("SELECT 1 AS one", fetch_one=True)["one"] == 1


# ==========================================================================
# TEST migrations
# ==========================================================================

class TestMigrations:
    """Test schema creation and teardown."""

    @staticmethod
    def table_names(db):
        rows = db.execute_query("SELECT name FROM sqlite_master WHERE type = 'table'", fetch_all=True)
        return {row["name"] for row in rows}

    def test_create_schemas_idempotent(self, test_settings):
        db = DatabaseManager(test_settings)
        create_activity_schema(db)
        create_activity_schema(db)
        create_auth_schema(db)

        assert {"activities", "activity_comments", "users"} <= self.table_names(db)

    def test_drop_schema(self, activity_db):
        drop_schema(activity_db)

        assert not {"activities", "activity_comments"} & self.table_names(activity_db)

    def test_comments_cascade_on_delete(self, activity_db):
        activity_db.execute_query(
            "INSERT INTO activities (id, owner_id, week_start, date) VALUES ('x', 'u1', '2024-01-14', '2024-01-15')"
        )
        activity_db.execute_query(
            "INSERT INTO activity_comments (activity_id, author_id, author_name, author_role, text, timestamp) "
            "VALUES ('x', 'c1', 'Coach', 'coach', 'Hi', '2024-01-15T10:00:00')"
        )

        activity_db.execute_query("DELETE FROM activities WHERE id = 'x'")

        remaining = activity_db.execute_query("SELECT COUNT(*) AS n FROM activity_comments", fetch_one=True)
        assert remaining["n"] == 0
