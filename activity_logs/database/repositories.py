"""
Data access layer for activities and users.
Provides repository pattern over the two SQLite stores.
"""
import json
import logging
import uuid
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from activity_logs.database.connection import DatabaseManager
from activity_logs.models import ActivityComment, ActivityRecord, UserProfile, UserRole

logger = logging.getLogger(__name__)

ACTIVITY_COLUMNS = """
    id, owner_id, log_type, week_start, date, start_time, end_time, duration,
    activity_type, status, description, notes, created_at, updated_at
"""


def _enum_value(value):
    return getattr(value, "value", value)


class ActivityRepository:
    """Repository for activity records and their comments."""

    def __init__(self, db_manager: DatabaseManager):
        """
        Initialize repository with database manager.

        Args:
            db_manager: Activities database manager
        """
        self.db = db_manager

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, record: ActivityRecord) -> ActivityRecord:
        """
        Insert a new activity and assign its id.

        Args:
            record: Activity to store (id is ignored)

        Returns:
            ActivityRecord: Stored activity with id and timestamps
        """
        now = datetime.now()
        stored = record.model_copy(update={
            "id": uuid.uuid4().hex,
            "comments": [],
            "created_at": now,
            "updated_at": now,
        })

        query = f"""
            INSERT INTO activities ({ACTIVITY_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            stored.id,
            stored.owner_id,
            _enum_value(stored.log_type),
            stored.week_start.isoformat(),
            stored.date.isoformat(),
            stored.start_time,
            stored.end_time,
            stored.duration,
            _enum_value(stored.activity_type),
            _enum_value(stored.status),
            stored.description,
            stored.notes,
            now.isoformat(),
            now.isoformat(),
        )

        try:
            self.db.execute_query(query, params)
        except Exception as e:
            logger.error(f"Failed to create activity for {stored.owner_id}: {e}")
            raise
        logger.info(f"Created activity {stored.id} for {stored.owner_id}")
        return stored

    def update(self, record: ActivityRecord) -> ActivityRecord:
        """
        Persist the mutable fields of an existing activity.
        owner_id and log_type are never written after creation.

        Args:
            record: Activity with changes applied

        Returns:
            ActivityRecord: Activity with refreshed updated_at
        """
        stored = record.model_copy(update={"updated_at": datetime.now()})
        query = """
            UPDATE activities
            SET week_start = ?,
                date = ?,
                start_time = ?,
                end_time = ?,
                duration = ?,
                activity_type = ?,
                status = ?,
                description = ?,
                notes = ?,
                updated_at = ?
            WHERE id = ?
        """
        params = (
            stored.week_start.isoformat(),
            stored.date.isoformat(),
            stored.start_time,
            stored.end_time,
            stored.duration,
            _enum_value(stored.activity_type),
            _enum_value(stored.status),
            stored.description,
            stored.notes,
            stored.updated_at.isoformat(),
            stored.id,
        )

        try:
            self.db.execute_query(query, params)
        except Exception as e:
            logger.error(f"Failed to update activity {stored.id}: {e}")
            raise
        logger.info(f"Updated activity {stored.id}")
        return stored

    def delete(self, activity_id: str) -> bool:
        """
        Delete an activity and its comments.

        Returns:
            bool: True if a row was deleted
        """
        with self.db.get_cursor() as cursor:
            cursor.execute("DELETE FROM activity_comments WHERE activity_id = ?", (activity_id,))
            cursor.execute("DELETE FROM activities WHERE id = ?", (activity_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Deleted activity {activity_id}")
        return deleted

    def append_comment(self, activity_id: str, comment: ActivityComment) -> ActivityComment:
        """
        Append a comment to an activity. Existing comments are never changed.

        Args:
            activity_id: Activity to comment on
            comment: Comment to append

        Returns:
            ActivityComment: The stored comment
        """
        query = """
            INSERT INTO activity_comments
                (activity_id, author_id, author_name, author_role, text, timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
        """
        params = (
            activity_id,
            comment.author_id,
            comment.author_name,
            _enum_value(comment.author_role),
            comment.text,
            comment.timestamp.isoformat(),
        )

        try:
            self.db.execute_query(query, params)
        except Exception as e:
            logger.error(f"Failed to add comment to activity {activity_id}: {e}")
            raise
        logger.info(f"Added comment to activity {activity_id} by {comment.author_id}")
        return comment

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, activity_id: str) -> Optional[ActivityRecord]:
        """
        Fetch activity by id.

        Args:
            activity_id: Activity identifier

        Returns:
            ActivityRecord: Activity with comments or None
        """
        query = f"SELECT {ACTIVITY_COLUMNS} FROM activities WHERE id = ?"
        result = self.db.execute_query(query, (activity_id,), fetch_one=True)
        if not result:
            return None
        rows = self._attach_comments([dict(result)])
        return ActivityRecord.model_validate(rows[0])

    def list_activities(self, owner_id: Optional[str] = None, status: Optional[str] = None,
                        limit: int = 100) -> List[ActivityRecord]:
        """
        List activities, most recent first.

        Args:
            owner_id: Only this user's activities
            status: Only activities with this status
            limit: Maximum number of activities

        Returns:
            List[ActivityRecord]: Matching activities
        """
        conditions = []
        params: list = []
        if owner_id:
            conditions.append("owner_id = ?")
            params.append(owner_id)
        if status:
            conditions.append("status = ?")
            params.append(_enum_value(status))

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        query = f"""
            SELECT {ACTIVITY_COLUMNS}
            FROM activities
            {where}
            ORDER BY date DESC, created_at DESC
            LIMIT ?
        """
        params.append(limit)

        rows = self._fetch_rows(query, tuple(params))
        return self._to_records(rows)

    def fetch_rows_for_range(self, owner_id: str, start: date, end: date) -> List[dict]:
        """
        Fetch raw activity rows (with comments) for a user between two dates inclusive.
        Rows are returned unvalidated so callers can tolerate legacy data.

        Returns:
            List[dict]: Activity rows ordered by date, then creation time
        """
        query = f"""
            SELECT {ACTIVITY_COLUMNS}
            FROM activities
            WHERE owner_id = ? AND date >= ? AND date <= ?
            ORDER BY date ASC, created_at ASC
        """
        return self._fetch_rows(query, (owner_id, start.isoformat(), end.isoformat()))

    def list_for_range(self, owner_id: str, start: date, end: date) -> List[ActivityRecord]:
        """List a user's activities between two dates inclusive."""
        return self._to_records(self.fetch_rows_for_range(owner_id, start, end))

    @staticmethod
    def _to_records(rows: List[dict]) -> List[ActivityRecord]:
        """Validate rows one by one; malformed legacy rows are logged and left out."""
        records = []
        for row in rows:
            try:
                records.append(ActivityRecord.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed activity {row.get('id')}: "
                    f"{e.error_count()} validation error(s)"
                )
        return records

    def _fetch_rows(self, query: str, params: tuple) -> List[dict]:
        results = self.db.execute_query(query, params, fetch_all=True)
        if not results:
            return []
        return self._attach_comments([dict(row) for row in results])

    def _attach_comments(self, rows: List[dict]) -> List[dict]:
        """Load comments for all rows in one query, oldest first."""
        ids = [row["id"] for row in rows]
        for row in rows:
            row["comments"] = []
        if not ids:
            return rows

        placeholders = ", ".join("?" for _ in ids)
        query = f"""
            SELECT activity_id, author_id, author_name, author_role, text, timestamp
            FROM activity_comments
            WHERE activity_id IN ({placeholders})
            ORDER BY id ASC
        """
        comments = self.db.execute_query(query, tuple(ids), fetch_all=True) or []

        by_id = {row["id"]: row for row in rows}
        for comment in comments:
            data = dict(comment)
            by_id[data.pop("activity_id")]["comments"].append(data)
        return rows


class UserRepository:
    """Repository for users in the auth store."""

    def __init__(self, db_manager: DatabaseManager):
        """
        Initialize repository with database manager.

        Args:
            db_manager: Auth database manager
        """
        self.db = db_manager

    @staticmethod
    def _row_to_profile(row) -> UserProfile:
        data = dict(row)
        if isinstance(data.get("assigned_coaches"), str):
            data["assigned_coaches"] = json.loads(data["assigned_coaches"])
        return UserProfile.model_validate(data)

    def upsert(self, profile: UserProfile) -> UserProfile:
        """
        Insert or update user by id.

        Args:
            profile: User to save

        Returns:
            UserProfile: The saved user
        """
        query = """
            INSERT INTO users (id, email, name, phone, role, assigned_coaches, last_login)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                email = excluded.email,
                name = excluded.name,
                phone = excluded.phone,
                role = excluded.role,
                assigned_coaches = excluded.assigned_coaches,
                last_login = excluded.last_login
        """
        params = (
            profile.id,
            str(profile.email).lower(),
            profile.name,
            profile.phone,
            _enum_value(profile.role),
            json.dumps(profile.assigned_coaches),
            profile.last_login.isoformat() if profile.last_login else None,
        )

        try:
            self.db.execute_query(query, params)
        except Exception as e:
            logger.error(f"Failed to upsert user {profile.email}: {e}")
            raise
        logger.info(f"Upserted user: {profile.email}")
        return profile

    def get_by_id(self, user_id: str) -> Optional[UserProfile]:
        """Fetch user by id."""
        query = """
            SELECT id, email, name, phone, role, assigned_coaches, last_login
            FROM users
            WHERE id = ?
        """
        result = self.db.execute_query(query, (user_id,), fetch_one=True)
        return self._row_to_profile(result) if result else None

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        """Fetch user by email (case-insensitive)."""
        query = """
            SELECT id, email, name, phone, role, assigned_coaches, last_login
            FROM users
            WHERE email = ?
        """
        result = self.db.execute_query(query, (email.strip().lower(),), fetch_one=True)
        return self._row_to_profile(result) if result else None

    def get_by_ids(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        """
        Batch-fetch users by id.

        Args:
            user_ids: User identifiers (duplicates allowed)

        Returns:
            Dict[str, UserProfile]: Found users keyed by id
        """
        ids = sorted(set(user_ids))
        if not ids:
            return {}

        placeholders = ", ".join("?" for _ in ids)
        query = f"""
            SELECT id, email, name, phone, role, assigned_coaches, last_login
            FROM users
            WHERE id IN ({placeholders})
        """
        results = self.db.execute_query(query, tuple(ids), fetch_all=True) or []
        profiles = [self._row_to_profile(row) for row in results]
        return {profile.id: profile for profile in profiles}

    def list_users(self, role: Optional[UserRole] = None, coach_email: Optional[str] = None,
                   page: int = 1, limit: int = 25) -> Tuple[List[UserProfile], int]:
        """
        List users, most recent login first.

        Args:
            role: Only users with this role
            coach_email: Only users assigned to this coach
            page: 1-based page number
            limit: Page size

        Returns:
            tuple: (users on the page, total matching users)
        """
        conditions = []
        params: list = []
        if role:
            conditions.append("role = ?")
            params.append(_enum_value(role))
        if coach_email:
            conditions.append(
                "EXISTS (SELECT 1 FROM json_each(users.assigned_coaches) WHERE lower(json_each.value) = ?)"
            )
            params.append(coach_email.strip().lower())
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        count = self.db.execute_query(f"SELECT COUNT(*) AS total FROM users {where}", tuple(params), fetch_one=True)
        total = count["total"] if count else 0

        query = f"""
            SELECT id, email, name, phone, role, assigned_coaches, last_login
            FROM users
            {where}
            ORDER BY last_login DESC, name ASC
            LIMIT ? OFFSET ?
        """
        results = self.db.execute_query(query, tuple(params + [limit, (page - 1) * limit]), fetch_all=True) or []
        return [self._row_to_profile(row) for row in results], total

    def update_name(self, user_id: str, name: str) -> bool:
        """
        Update a user's display name.

        Returns:
            bool: True if the user exists
        """
        with self.db.get_cursor() as cursor:
            cursor.execute("UPDATE users SET name = ? WHERE id = ?", (name, user_id))
            updated = cursor.rowcount > 0

        if updated:
            logger.info(f"Updated name for user {user_id}")
        return updated

    def touch_last_login(self, user_id: str, when: Optional[datetime] = None) -> bool:
        """
        Record a sign-in time.

        Returns:
            bool: True if successful
        """
        try:
            when = when or datetime.now()
            self.db.execute_query("UPDATE users SET last_login = ? WHERE id = ?", (when.isoformat(), user_id))
            return True

        except Exception as e:
            logger.error(f"Failed to record last login for {user_id}: {e}")
            return False
