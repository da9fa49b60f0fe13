"""
Weekly activity report generation.
Builds per-log tables with pandas for download and on-screen display.
"""
import logging
import re
from datetime import date, datetime
from typing import Iterable, List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from activity_logs.models import ActivityRecord, WeeklyLog
from activity_logs.processors.log_grouper import group_activities_into_weekly_logs, logs_for_week
from activity_logs.scheduling.duration_calculator import format_duration
from activity_logs.scheduling.week_calculator import DateLike, format_week_range, week_start as get_week_start

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["Date", "Activity Type", "Description", "Time", "Duration", "Status"]


class ReportSection(BaseModel):
    """One log type's activities within the report week."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    log: WeeklyLog
    table: pd.DataFrame

    @property
    def title(self) -> str:
        return self.log.log_type.label

    @property
    def total_time(self) -> str:
        return format_duration(self.log.total_duration_minutes)


class WeekReport(BaseModel):
    """A participant's activity report for one week."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    participant_name: str
    week_start: date
    generated_at: datetime = Field(default_factory=datetime.now)
    sections: List[ReportSection] = Field(default_factory=list)
    skipped_count: int = 0

    @property
    def week_label(self) -> str:
        return format_week_range(self.week_start)

    @property
    def is_empty(self) -> bool:
        return not self.sections

    def to_frame(self) -> pd.DataFrame:
        """All sections in one table with a leading Log column."""
        if not self.sections:
            return pd.DataFrame(columns=["Log"] + REPORT_COLUMNS)
        frames = [section.table.assign(Log=section.title) for section in self.sections]
        combined = pd.concat(frames, ignore_index=True)
        return combined[["Log"] + REPORT_COLUMNS]

    def to_csv(self) -> str:
        """Serialize the combined table as CSV."""
        return self.to_frame().to_csv(index=False)

    def export_filename(self, extension: str = "csv") -> str:
        """e.g. activity-log-Jane-Doe-Jan-14-–-20.csv"""
        name = re.sub(r"\s+", "-", self.participant_name.strip()) or "participant"
        week = re.sub(r"\s+", "-", self.week_label)
        return f"activity-log-{name}-{week}.{extension}"


def build_activity_table(activities: Iterable[ActivityRecord]) -> pd.DataFrame:
    """
    Build the report table for a list of activities.

    Args:
        activities: Activities in display order

    Returns:
        pd.DataFrame: One row per activity with REPORT_COLUMNS
    """
    rows = [
        {
            "Date": activity.date.strftime("%m/%d/%Y"),
            "Activity Type": activity.activity_type.value,
            "Description": activity.description,
            "Time": activity.time_range or "-",
            "Duration": format_duration(activity.duration) if activity.duration else "-",
            "Status": activity.status.value,
        }
        for activity in activities
    ]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def build_week_report(participant_name: str, week_start: DateLike, activities: Iterable,
                      title: str = "W-2 FSET Activity Logs",
                      generated_at: Optional[datetime] = None) -> WeekReport:
    """
    Build a participant's weekly report, one section per log type.

    Args:
        participant_name: Name shown on the report
        week_start: Any date within the report week
        activities: Activity records or raw rows; other weeks are ignored
        title: Report heading
        generated_at: Generation timestamp (defaults to now)

    Returns:
        WeekReport: Report with sections ordered by log type
    """
    start = get_week_start(week_start)
    result = group_activities_into_weekly_logs(activities)

    sections = [
        ReportSection(log=log, table=build_activity_table(log.activities))
        for log in logs_for_week(result.logs, start)
    ]

    logger.info(
        f"Built report for {participant_name}, week {format_week_range(start)}: "
        f"{len(sections)} logs, {result.skipped_count} skipped"
    )
    return WeekReport(
        title=title,
        participant_name=participant_name,
        week_start=start,
        generated_at=generated_at or datetime.now(),
        sections=sections,
        skipped_count=result.skipped_count,
    )
