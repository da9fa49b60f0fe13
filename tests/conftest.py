"""
Pytest configuration and shared fixtures.
"""
import pytest
import os
import sys
from datetime import date
from unittest.mock import MagicMock

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from activity_logs.config import Settings
from activity_logs.database.connection import DatabaseManager
from activity_logs.database.migrations import create_activity_schema, create_auth_schema
from activity_logs.database.repositories import ActivityRepository, UserRepository
from activity_logs.models import ActivityRecord, Actor, LogType, UserProfile, UserRole
from activity_logs.services.activity_service import ActivityService
from activity_logs.services.user_service import UserService
from tests.fixtures.mock_data import FIXED_NOW, USERS


# ==========================================================================
# CONFIGURATION FIXTURES
# ==========================================================================

@pytest.fixture
def test_settings(tmp_path):
    """Return test settings pointing at temporary SQLite files."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'activities.db'}",
        auth_database_url=f"sqlite:///{tmp_path / 'auth.db'}",
        editable_weeks_back=2,
        activity_list_limit=100,
        users_page_size=25,
        log_file=str(tmp_path / 'app.log'),
    )


@pytest.fixture
def fixed_clock():
    """Clock frozen at Wednesday 2024-01-17."""
    return lambda: FIXED_NOW


# ==========================================================================
# ACTOR FIXTURES
# ==========================================================================

@pytest.fixture
def client_actor():
    return Actor(user_id="client-1", name="Client One", email="client.one@example.com", role=UserRole.CLIENT)


@pytest.fixture
def other_client_actor():
    return Actor(user_id="client-2", name="Client Two", email="client.two@example.com", role=UserRole.CLIENT)


@pytest.fixture
def coach_actor():
    return Actor(user_id="coach-1", name="Coach Carter", email="coach@example.com", role=UserRole.COACH)


@pytest.fixture
def admin_actor():
    return Actor(user_id="admin-1", name="Admin Adams", email="admin@example.com", role=UserRole.ADMIN)


# ==========================================================================
# MODEL FIXTURES
# ==========================================================================

@pytest.fixture
def sample_activity():
    """Return an editable activity owned by client-1."""
    return ActivityRecord(
        id="act-1",
        owner_id="client-1",
        log_type=LogType.PROGRAM_ACTIVITY,
        date=date(2024, 1, 15),
        start_time="09:00",
        end_time="10:30",
        description="Resume workshop",
    )


@pytest.fixture
def expired_activity():
    """Return an activity three weeks before the fixed clock's week."""
    return ActivityRecord(
        id="act-old",
        owner_id="client-1",
        log_type=LogType.EMPLOYMENT_SEARCH,
        date=date(2023, 12, 27),
        duration=30,
    )


# ==========================================================================
# DATABASE FIXTURES
# ==========================================================================

@pytest.fixture
def mock_db_manager():
    """Return mock DatabaseManager."""
    mock_db = MagicMock()
    mock_db.execute_query = MagicMock()
    return mock_db


@pytest.fixture
def activity_db(test_settings):
    """Activities database with schema."""
    db = DatabaseManager(test_settings)
    create_activity_schema(db)
    return db


@pytest.fixture
def auth_db(test_settings):
    """Auth database with schema."""
    db = DatabaseManager.for_auth(test_settings)
    create_auth_schema(db)
    return db


@pytest.fixture
def activity_repo(activity_db):
    return ActivityRepository(activity_db)


@pytest.fixture
def user_repo(auth_db):
    """User repository seeded with the mock users."""
    repo = UserRepository(auth_db)
    for user in USERS:
        repo.upsert(UserProfile(**user))
    return repo


# ==========================================================================
# SERVICE FIXTURES
# ==========================================================================

@pytest.fixture
def activity_service(activity_repo, user_repo, test_settings, fixed_clock):
    return ActivityService(activity_repo, user_repo, test_settings, clock=fixed_clock)


@pytest.fixture
def user_service(user_repo, test_settings):
    return UserService(user_repo, test_settings)
