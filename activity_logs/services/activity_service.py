"""
Activity operations for signed-in users.
Combines access rules, the week calculator and both stores; owners are
joined in from the auth store with a single batch fetch.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from activity_logs.config import Settings
from activity_logs.database.repositories import ActivityRepository, UserRepository
from activity_logs.exceptions import ActivityLogError, ForbiddenError, InvalidInputError, NotFoundError
from activity_logs.models import (
    ActivityComment, ActivityCreate, ActivityRecord, ActivityUpdate, ActivityWithOwner,
    Actor, GroupingResult, OwnerSummary, UserRole
)
from activity_logs.policy.authorization import (
    authorize_comment, authorize_create, authorize_delete, authorize_read, authorize_update,
    can_edit, require_actor, require_staff
)
from activity_logs.processors.log_grouper import group_activities_into_weekly_logs
from activity_logs.processors.report_builder import WeekReport, build_week_report
from activity_logs.scheduling.week_calculator import (
    DateLike, editable_range, weeks_in_month, week_start as get_week_start
)

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("owner_id", "log_type")
REQUIRED_FIELDS = ("date", "activity_type", "status", "description")


def _validate(model_cls, data) -> BaseModel:
    """
    Validate a payload, surfacing the domain error raised by a field validator.

    Raises:
        InvalidDateError: Unparseable date
        InvalidTimeFormatError: Time that is not HH:MM
        InvalidInputError: Any other invalid field
    """
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        for error in errors:
            cause = error.get("ctx", {}).get("error")
            if isinstance(cause, ActivityLogError):
                raise cause from e
        field = ".".join(str(part) for part in errors[0]["loc"]) or model_cls.__name__
        raise InvalidInputError(f"Invalid {field}: {errors[0]['msg']}") from e


class ActivityService:
    """Activity use cases: listing, editing, commenting, weekly logs and reports."""

    def __init__(self, activity_repo: ActivityRepository, user_repo: UserRepository,
                 settings: Settings, clock: Callable[[], datetime] = datetime.now):
        """
        Initialize service.

        Args:
            activity_repo: Activities store
            user_repo: Auth/user store
            settings: Application settings
            clock: Source of the current time
        """
        self.activities = activity_repo
        self.users = user_repo
        self.settings = settings
        self.clock = clock

    @property
    def weeks_back(self) -> int:
        return self.settings.editable_weeks_back

    def editable_range(self) -> Tuple[date, date]:
        """First and last day that may currently be edited."""
        return editable_range(self.clock(), self.weeks_back)

    def can_edit(self, actor: Optional[Actor], record: ActivityRecord) -> bool:
        return can_edit(actor, record, self.clock(), self.weeks_back)

    def _load(self, activity_id: str) -> ActivityRecord:
        record = self.activities.get_by_id(activity_id)
        if record is None:
            raise NotFoundError(f"Activity not found: {activity_id}")
        return record

    def _resolve_owner(self, actor: Actor, owner_id: Optional[str]) -> str:
        """Clients only ever see their own data."""
        owner_id = owner_id or actor.user_id
        if actor.role == UserRole.CLIENT and owner_id != actor.user_id:
            raise ForbiddenError("Clients may only access their own activities")
        return owner_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_activities(self, actor: Optional[Actor], owner_id: Optional[str] = None,
                        status: Optional[str] = None, limit: Optional[int] = None) -> List[ActivityWithOwner]:
        """
        List activities with owner details, most recent first.
        Clients always get their own activities; coaches and admins may filter by owner.
        """
        actor = require_actor(actor)
        if actor.role == UserRole.CLIENT:
            owner_id = actor.user_id

        records = self.activities.list_activities(
            owner_id=owner_id, status=status, limit=limit or self.settings.activity_list_limit
        )
        return self.attach_owners(records)

    def attach_owners(self, records: List[ActivityRecord]) -> List[ActivityWithOwner]:
        """Merge owner name/email from the auth store using one batch lookup."""
        owners = self.users.get_by_ids(record.owner_id for record in records)
        missing = {record.owner_id for record in records} - set(owners)
        if missing:
            logger.warning(f"{len(missing)} activity owners not found in auth store")

        enriched = []
        for record in records:
            profile = owners.get(record.owner_id)
            owner = OwnerSummary(id=profile.id, name=profile.name, email=str(profile.email)) if profile else None
            enriched.append(ActivityWithOwner(activity=record, owner=owner))
        return enriched

    def get_activity(self, actor: Optional[Actor], activity_id: str) -> ActivityRecord:
        actor = require_actor(actor)
        record = self._load(activity_id)
        authorize_read(actor, record)
        return record

    def weekly_logs(self, actor: Optional[Actor], owner_id: Optional[str] = None,
                    month: Optional[DateLike] = None) -> GroupingResult:
        """
        Group a user's activities for every week overlapping a month.

        Args:
            actor: Signed-in user
            owner_id: User whose logs to show (defaults to actor)
            month: Any date in the month (defaults to today)

        Returns:
            GroupingResult: Weekly logs, most recent week first, plus skipped rows
        """
        actor = require_actor(actor)
        owner_id = self._resolve_owner(actor, owner_id)

        weeks = weeks_in_month(month if month is not None else self.clock())
        rows = self.activities.fetch_rows_for_range(owner_id, weeks[0], weeks[-1] + timedelta(days=6))
        result = group_activities_into_weekly_logs(rows)
        if result.skipped_count:
            logger.warning(f"Skipped {result.skipped_count} malformed activities for {owner_id}")
        return result

    def export_week_report(self, actor: Optional[Actor], owner_id: str, week_start: DateLike) -> WeekReport:
        """Build a participant's weekly report. Coaches and admins only."""
        require_staff(actor)
        owner = self.users.get_by_id(owner_id)
        if owner is None:
            raise NotFoundError(f"User not found: {owner_id}")

        start = get_week_start(week_start)
        rows = self.activities.fetch_rows_for_range(owner_id, start, start + timedelta(days=6))
        return build_week_report(
            owner.name or str(owner.email),
            start,
            rows,
            title=self.settings.report_title,
            generated_at=self.clock(),
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_activity(self, actor: Optional[Actor], payload: Union[ActivityCreate, Dict]) -> ActivityRecord:
        """
        Create an activity for the actor, or for a client when the actor is staff.

        Raises:
            InvalidInputError: Missing log type or invalid field
            InvalidDateError: Unparseable date
            InvalidTimeFormatError: Start or end time that is not HH:MM
            ForbiddenError: Client creating for another user
            EditWindowExpiredError: Date outside the editable window
        """
        actor = require_actor(actor)
        if not isinstance(payload, ActivityCreate):
            payload = _validate(ActivityCreate, payload)
        if payload.log_type is None:
            raise InvalidInputError("logType is required")

        owner_id = payload.owner_id or actor.user_id
        authorize_create(actor, owner_id, payload.date, self.clock(), self.weeks_back)

        record = _validate(ActivityRecord, {**payload.model_dump(exclude={"owner_id"}), "owner_id": owner_id})
        return self.activities.create(record)

    def update_activity(self, actor: Optional[Actor], activity_id: str,
                        changes: Union[ActivityUpdate, Dict]) -> ActivityRecord:
        """
        Apply a partial update. owner_id and log_type cannot change; both the
        current and the new date must be inside the editable window.
        """
        actor = require_actor(actor)
        if not isinstance(changes, ActivityUpdate):
            changes = _validate(ActivityUpdate, changes)
        record = self._load(activity_id)

        updates = changes.model_dump(exclude_unset=True)
        for field in IMMUTABLE_FIELDS:
            if field in updates and updates.pop(field) != getattr(record, field):
                raise InvalidInputError(f"{field} cannot be changed after creation")
        for field in REQUIRED_FIELDS:
            if field in updates and updates[field] is None:
                updates.pop(field)

        authorize_update(actor, record, self.clock(), new_date=updates.get("date"), weeks_back=self.weeks_back)

        data = record.model_dump()
        data.update(updates)
        return self.activities.update(_validate(ActivityRecord, data))

    def delete_activity(self, actor: Optional[Actor], activity_id: str) -> None:
        actor = require_actor(actor)
        record = self._load(activity_id)
        authorize_delete(actor, record, self.clock(), self.weeks_back)
        self.activities.delete(activity_id)

    def add_comment(self, actor: Optional[Actor], activity_id: str, text: str) -> ActivityComment:
        """
        Append a comment. Coaches and admins may comment on any activity,
        clients on their own; the editable window does not apply.
        """
        actor = require_actor(actor)
        text = (text or "").strip()
        if not text:
            raise InvalidInputError("Comment is required")

        record = self._load(activity_id)
        authorize_comment(actor, record)

        comment = ActivityComment(
            author_id=actor.user_id,
            author_name=actor.display_name,
            author_role=actor.role,
            text=text,
            timestamp=self.clock(),
        )
        return self.activities.append_comment(activity_id, comment)
