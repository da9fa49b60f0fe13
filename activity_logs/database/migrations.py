"""
Database schema migrations for the activities and auth stores.
"""
import logging
from activity_logs.database.connection import DatabaseManager

logger = logging.getLogger(__name__)


def create_activity_schema(db_manager: DatabaseManager):
    """
    Create activities and comments tables with indexes.

    Args:
        db_manager: Activities database manager
    """
    try:
        with db_manager.get_cursor() as cursor:
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS activities (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    log_type TEXT,
                    week_start TEXT NOT NULL,
                    date TEXT NOT NULL,
                    start_time TEXT,
                    end_time TEXT,
                    duration INTEGER CHECK (duration IS NULL OR duration >= 0),
                    activity_type TEXT NOT NULL DEFAULT 'Job Search',
                    status TEXT NOT NULL DEFAULT 'Pending',
                    description TEXT NOT NULL DEFAULT '',
                    notes TEXT,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Comments are append-only
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS activity_comments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    activity_id TEXT NOT NULL REFERENCES activities(id) ON DELETE CASCADE,
                    author_id TEXT NOT NULL,
                    author_name TEXT NOT NULL,
                    author_role TEXT NOT NULL,
                    text TEXT NOT NULL,
                    timestamp TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_activities_owner_date
                ON activities(owner_id, date DESC)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_activities_status
                ON activities(status)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_comments_activity
                ON activity_comments(activity_id, id)
            """)

            logger.info("Activity schema created successfully")

    except Exception as e:
        logger.error(f"Failed to create activity schema: {e}")
        raise


def create_auth_schema(db_manager: DatabaseManager):
    """
    Create users table in the auth store.

    Args:
        db_manager: Auth database manager
    """
    try:
        with db_manager.get_cursor() as cursor:
            # assigned_coaches holds a JSON array of coach emails
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT UNIQUE NOT NULL,
                    name TEXT NOT NULL DEFAULT '',
                    phone TEXT,
                    role TEXT NOT NULL DEFAULT 'client',
                    assigned_coaches TEXT NOT NULL DEFAULT '[]',
                    last_login TEXT
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_users_role
                ON users(role)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_users_last_login
                ON users(last_login DESC)
            """)

            logger.info("Auth schema created successfully")

    except Exception as e:
        logger.error(f"Failed to create auth schema: {e}")
        raise


def drop_schema(db_manager: DatabaseManager):
    """
    Drop all tables (use with caution!).

    Args:
        db_manager: Database connection manager
    """
    try:
        with db_manager.get_cursor() as cursor:
            cursor.execute("DROP TABLE IF EXISTS activity_comments")
            cursor.execute("DROP TABLE IF EXISTS activities")
            cursor.execute("DROP TABLE IF EXISTS users")
            logger.info("Database schema dropped")

    except Exception as e:
        logger.error(f"Failed to drop schema: {e}")
        raise
