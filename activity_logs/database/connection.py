"""
SQLite connection handling for the activities and auth stores.
Each store is its own database file with its own manager.
"""
import logging
import sqlite3
from contextlib import contextmanager
from typing import Generator, Optional

from activity_logs.config import Settings

logger = logging.getLogger(__name__)

SQLITE_PREFIX = 'sqlite:///'


class DatabaseManager:
    """
    Opens a short-lived connection to one store per unit of work.
    Rows come back as sqlite3.Row so callers can read columns by name.
    """

    def __init__(self, settings: Settings, url: Optional[str] = None, store: str = "activities"):
        """
        Initialize database manager.

        Args:
            settings: Application settings
            url: Database URL (defaults to the activities store)
            store: Store label used in log messages
        """
        self.settings = settings
        self.store = store
        self.db_url = url or settings.get_database_url()
        self.is_sqlite = self.db_url.startswith(SQLITE_PREFIX)
        self.path: Optional[str] = None

        self._open_store()

    @classmethod
    def for_auth(cls, settings: Settings) -> "DatabaseManager":
        """Manager for the store holding users and their roles."""
        return cls(settings, url=settings.get_auth_database_url(), store="auth")

    def _open_store(self):
        """Resolve the file path and make sure it opens."""
        if not self.is_sqlite:
            logger.error(f"Unsupported URL for {self.store} store: {self.db_url}")
            raise ValueError(f"Unsupported database URL: {self.db_url}")

        self.path = self.db_url[len(SQLITE_PREFIX):]
        try:
            conn = self._connect()
            try:
                conn.execute("SELECT 1")
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Cannot open {self.store} store at {self.path}: {e}")
            raise
        logger.info(f"{self.store.capitalize()} store ready: {self.path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        # Comments cascade with their activity
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Yield a connection that commits on success and rolls back on error.

        Example:
            with db_manager.get_connection() as conn:
                conn.execute("SELECT * FROM activities")
        """
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"{self.store.capitalize()} store error: {e}")
            raise
        finally:
            conn.close()

    @contextmanager
    def get_cursor(self, commit: bool = True) -> Generator[sqlite3.Cursor, None, None]:
        """
        Yield a cursor inside its own transaction.

        Args:
            commit: Commit when the block exits cleanly (default: True)
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            try:
                yield cursor
                if commit:
                    conn.commit()
                else:
                    conn.rollback()
            finally:
                cursor.close()

    def execute_query(self, query: str, params: tuple = None, fetch_one: bool = False, fetch_all: bool = False):
        """
        Run one statement.

        Args:
            query: SQL with ? placeholders
            params: Placeholder values
            fetch_one: Return the first row
            fetch_all: Return every row

        Returns:
            sqlite3.Row, list of rows, or None when nothing is fetched
        """
        with self.get_cursor() as cursor:
            cursor.execute(query, params or ())
            if fetch_one:
                return cursor.fetchone()
            if fetch_all:
                return cursor.fetchall()
            return None

    def execute_many(self, query: str, params_list: list):
        """
        Run one statement for each parameter tuple in a single transaction.

        Args:
            query: SQL with ? placeholders
            params_list: One tuple per row
        """
        with self.get_cursor() as cursor:
            cursor.executemany(query, params_list)

    def close_all(self):
        """Connections are closed after each unit of work; nothing stays open."""
        logger.debug(f"{self.store.capitalize()} store has no open connections")
