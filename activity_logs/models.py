"""
Pydantic data models for the Activity Logs platform.
Defines type-safe data structures for activities, weekly logs and users.
"""
import datetime as dt
import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr, Field, computed_field, field_validator, model_validator

from activity_logs.scheduling.duration_calculator import elapsed, minutes_to_hours, parse_time
from activity_logs.scheduling.week_calculator import (
    format_week_range, to_date, week_end, week_start as get_week_start
)


# ==========================================================================
# ENUMERATIONS
# ==========================================================================

class LogType(str, Enum):
    """Category of a recurring weekly activity log."""
    EMPLOYMENT_SEARCH = "Employment Search"
    PROGRAM_ACTIVITY = "Program Activity"
    WORK_EXPERIENCE = "Work Experience"

    @property
    def label(self) -> str:
        """Full log name used on reports."""
        return LOG_TYPE_LABELS[self]


LOG_TYPE_LABELS = {
    LogType.EMPLOYMENT_SEARCH: "Self-Directed Employment Search Log",
    LogType.PROGRAM_ACTIVITY: "W-2 Activity Log",
    LogType.WORK_EXPERIENCE: "Work Experience Log",
}


class ActivityType(str, Enum):
    """Kind of activity within a log."""
    JOB_SEARCH = "Job Search"
    JOB_APPLICATION = "Job Application"
    INTERVIEW = "Interview"
    JOB_TRAINING = "Job Training"
    WORK_HOURS = "Work Hours"
    MEETING = "Meeting"
    OTHER = "Other"


class ActivityStatus(str, Enum):
    """Activity completion status."""
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class UserRole(str, Enum):
    """User role; the legacy level 'participant' maps to client."""
    CLIENT = "client"
    COACH = "coach"
    ADMIN = "admin"

    @property
    def is_staff(self) -> bool:
        """Coaches and admins oversee client activity."""
        return self in (UserRole.COACH, UserRole.ADMIN)


def parse_log_type(value: Any) -> Optional[LogType]:
    """Accept a LogType, its canonical value or its full label; blank means missing."""
    if value is None or isinstance(value, LogType):
        return value
    text = str(value).strip()
    if not text:
        return None
    for log_type, label in LOG_TYPE_LABELS.items():
        if text in (log_type.value, label):
            return log_type
    raise ValueError(f"Unknown log type: {value!r}")


def parse_role(value: Any) -> UserRole:
    """Map stored user levels to roles."""
    if isinstance(value, UserRole):
        return value
    text = str(value or "").strip().lower()
    if text in ("", "participant"):
        return UserRole.CLIENT
    return UserRole(text)


def normalize_time(value: Any) -> Optional[str]:
    """Blank means no time; anything else must be HH:MM."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    hour, minute = parse_time(value)
    return f"{hour:02d}:{minute:02d}"


# ==========================================================================
# COMMENT MODEL
# ==========================================================================

class ActivityComment(BaseModel):
    """Comment appended to an activity. Comments are never edited or deleted."""
    author_id: str = Field(..., description="User who wrote the comment")
    author_name: str = Field(..., description="Display name at the time of writing")
    author_role: UserRole = Field(..., description="Role at the time of writing")
    text: str = Field(..., min_length=1, description="Comment body")
    timestamp: dt.datetime = Field(default_factory=dt.datetime.now, description="When the comment was added")

    @field_validator("author_role", mode="before")
    @classmethod
    def _normalize_role(cls, value):
        return parse_role(value)


# ==========================================================================
# ACTIVITY MODEL
# ==========================================================================

class ActivityRecord(BaseModel):
    """A single logged activity."""
    id: Optional[str] = Field(default=None, description="Storage identifier")
    owner_id: str = Field(..., min_length=1, description="User who performed the activity")
    log_type: Optional[LogType] = Field(default=None, description="Log the activity belongs to")
    date: dt.date = Field(..., description="Calendar date of the activity")
    start_time: Optional[str] = Field(default=None, description="Start time HH:MM")
    end_time: Optional[str] = Field(default=None, description="End time HH:MM")
    duration: Optional[int] = Field(default=None, ge=0, description="Duration in minutes")
    activity_type: ActivityType = Field(default=ActivityType.JOB_SEARCH, description="Kind of activity")
    status: ActivityStatus = Field(default=ActivityStatus.PENDING, description="Completion status")
    description: str = Field(default="", description="What was done")
    notes: Optional[str] = Field(default=None, description="Free-form notes")
    comments: List[ActivityComment] = Field(default_factory=list, description="Coach/client comments, oldest first")

    # Metadata
    created_at: Optional[dt.datetime] = Field(default=None, description="Record creation timestamp")
    updated_at: Optional[dt.datetime] = Field(default=None, description="Last update timestamp")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return to_date(value)

    @field_validator("log_type", mode="before")
    @classmethod
    def _parse_log_type(cls, value):
        return parse_log_type(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _validate_time(cls, value):
        return normalize_time(value)

    @model_validator(mode="after")
    def _derive_duration(self):
        # Clock times win over a stored duration when both exist
        if self.start_time and self.end_time:
            self.duration = elapsed(self.start_time, self.end_time)
        return self

    @computed_field
    @property
    def week_start(self) -> dt.date:
        """Sunday of the activity's week; always follows date."""
        return get_week_start(self.date)

    @property
    def time_range(self) -> Optional[str]:
        """'HH:MM - HH:MM' when both times are set."""
        if self.start_time and self.end_time:
            return f"{self.start_time} - {self.end_time}"
        return None


class ActivityCreate(BaseModel):
    """Payload for creating an activity."""
    owner_id: Optional[str] = None
    log_type: Optional[LogType] = None
    date: dt.date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    activity_type: ActivityType = ActivityType.JOB_SEARCH
    status: ActivityStatus = ActivityStatus.PENDING
    description: str = ""
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return to_date(value)

    @field_validator("log_type", mode="before")
    @classmethod
    def _parse_log_type(cls, value):
        return parse_log_type(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _validate_time(cls, value):
        return normalize_time(value)


class ActivityUpdate(BaseModel):
    """Partial update payload; only fields explicitly set are applied."""
    owner_id: Optional[str] = None
    log_type: Optional[LogType] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    activity_type: Optional[ActivityType] = None
    status: Optional[ActivityStatus] = None
    description: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return None if value is None else to_date(value)

    @field_validator("log_type", mode="before")
    @classmethod
    def _parse_log_type(cls, value):
        return parse_log_type(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _validate_time(cls, value):
        return normalize_time(value)


# ==========================================================================
# WEEKLY LOG MODELS (derived, never persisted)
# ==========================================================================

class WeeklyLog(BaseModel):
    """Activities of one log type within one week."""
    log_type: LogType
    week_start: dt.date
    activities: List[ActivityRecord] = Field(default_factory=list)
    total_duration_minutes: int = Field(default=0, ge=0)

    @property
    def week_end(self) -> dt.datetime:
        return week_end(self.week_start)

    @property
    def week_label(self) -> str:
        return format_week_range(self.week_start)

    @property
    def total_hours(self) -> float:
        return minutes_to_hours(self.total_duration_minutes)


class SkippedRecord(BaseModel):
    """A record the grouper could not place."""
    index: int = Field(..., ge=0, description="Position in the input sequence")
    record_id: Optional[str] = Field(default=None, description="Record id, if known")
    reason: str = Field(..., description="Why the record was skipped")


class GroupingResult(BaseModel):
    """Weekly logs plus the records that were skipped while grouping."""
    logs: List[WeeklyLog] = Field(default_factory=list)
    skipped: List[SkippedRecord] = Field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


# ==========================================================================
# USER MODELS
# ==========================================================================

class UserProfile(BaseModel):
    """User record from the auth store."""
    id: str = Field(..., min_length=1, description="User identifier")
    email: EmailStr = Field(..., description="Sign-in email")
    name: str = Field(default="", description="Display name")
    phone: Optional[str] = Field(default=None, description="Phone number for SMS sign-in")
    role: UserRole = Field(default=UserRole.CLIENT, description="Access role")
    assigned_coaches: List[str] = Field(default_factory=list, description="Emails of assigned coaches")
    last_login: Optional[dt.datetime] = Field(default=None, description="Most recent sign-in")

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value):
        return parse_role(value)

    @field_validator("assigned_coaches", mode="before")
    @classmethod
    def _normalize_coaches(cls, value):
        return [str(email).strip().lower() for email in (value or []) if str(email).strip()]

    def __str__(self) -> str:
        """String representation of user."""
        return f"{self.name} <{self.email}>" if self.name else str(self.email)


class Actor(BaseModel):
    """The signed-in user performing an action."""
    user_id: str = Field(..., min_length=1)
    name: str = ""
    email: Optional[str] = None
    role: UserRole = UserRole.CLIENT

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value):
        return parse_role(value)

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "Actor":
        return cls(user_id=profile.id, name=profile.name, email=str(profile.email), role=profile.role)

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown User"


class OwnerSummary(BaseModel):
    """Owner fields merged into activity listings."""
    id: str
    name: str = ""
    email: Optional[str] = None


class ActivityWithOwner(BaseModel):
    """Activity joined with its owner from the auth store."""
    activity: ActivityRecord
    owner: Optional[OwnerSummary] = None


class UserPage(BaseModel):
    """One page of a user listing."""
    items: List[UserProfile] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=25, ge=1)
    total: int = Field(default=0, ge=0)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_more(self) -> bool:
        return (self.page - 1) * self.limit + len(self.items) < self.total
