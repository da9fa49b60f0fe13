"""
Role-based access rules for activity records.
Pure decision functions; callers pass the current time so results are reproducible.
"""
from datetime import datetime
from typing import Optional

from activity_logs.exceptions import EditWindowExpiredError, ForbiddenError, UnauthenticatedError
from activity_logs.models import ActivityRecord, Actor, UserRole
from activity_logs.scheduling.week_calculator import (
    EDITABLE_WEEKS_BACK, DateLike, format_week_range, is_editable
)


def require_actor(actor: Optional[Actor]) -> Actor:
    """Raise UnauthenticatedError when there is no signed-in user."""
    if actor is None:
        raise UnauthenticatedError("Unauthorized")
    return actor


def require_staff(actor: Optional[Actor]) -> Actor:
    """Only coaches and admins may pass."""
    actor = require_actor(actor)
    if not actor.role.is_staff:
        raise ForbiddenError("Forbidden: Insufficient permissions")
    return actor


def _require_owner_or_staff(actor: Actor, owner_id: str) -> None:
    if actor.role == UserRole.CLIENT and owner_id != actor.user_id:
        raise ForbiddenError("Clients may only access their own activities")


def _require_editable(activity_date: DateLike, now: datetime, weeks_back: int) -> None:
    if not is_editable(activity_date, now=now, weeks_back=weeks_back):
        raise EditWindowExpiredError(
            f"Week of {format_week_range(activity_date)} is no longer editable"
        )


def authorize_read(actor: Optional[Actor], record: ActivityRecord) -> None:
    """Clients read their own records; coaches and admins read any."""
    actor = require_actor(actor)
    _require_owner_or_staff(actor, record.owner_id)


def authorize_create(actor: Optional[Actor], owner_id: str, activity_date: DateLike,
                     now: datetime, weeks_back: int = EDITABLE_WEEKS_BACK) -> None:
    """
    Check that actor may create an activity for owner_id on activity_date.

    Raises:
        UnauthenticatedError: No actor
        ForbiddenError: Client creating for someone else
        EditWindowExpiredError: Date outside the editable window
    """
    actor = require_actor(actor)
    _require_owner_or_staff(actor, owner_id)
    _require_editable(activity_date, now, weeks_back)


def authorize_update(actor: Optional[Actor], record: ActivityRecord, now: datetime,
                     new_date: Optional[DateLike] = None,
                     weeks_back: int = EDITABLE_WEEKS_BACK) -> None:
    """
    Check that actor may modify record. Both the stored date and, when the
    update moves the activity, the new date must be editable.
    """
    actor = require_actor(actor)
    _require_owner_or_staff(actor, record.owner_id)
    _require_editable(record.date, now, weeks_back)
    if new_date is not None:
        _require_editable(new_date, now, weeks_back)


def authorize_delete(actor: Optional[Actor], record: ActivityRecord, now: datetime,
                     weeks_back: int = EDITABLE_WEEKS_BACK) -> None:
    """Same rules as updating without moving the date."""
    authorize_update(actor, record, now, weeks_back=weeks_back)


def authorize_comment(actor: Optional[Actor], record: ActivityRecord) -> None:
    """Coaches and admins comment on any record, clients on their own; the editable window does not apply."""
    actor = require_actor(actor)
    _require_owner_or_staff(actor, record.owner_id)


def can_edit(actor: Optional[Actor], record: ActivityRecord, now: datetime,
             weeks_back: int = EDITABLE_WEEKS_BACK) -> bool:
    """Non-raising variant of authorize_update for display decisions."""
    try:
        authorize_update(actor, record, now, weeks_back=weeks_back)
    except (UnauthenticatedError, ForbiddenError, EditWindowExpiredError):
        return False
    return True
