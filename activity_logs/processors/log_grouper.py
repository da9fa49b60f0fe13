"""
Grouping of activities into weekly logs.
Buckets activities by (log type, week start) for calendar display and report export.
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Tuple

from pydantic import ValidationError

from activity_logs.models import ActivityRecord, GroupingResult, LogType, SkippedRecord, WeeklyLog
from activity_logs.scheduling.duration_calculator import minutes_to_hours
from activity_logs.scheduling.week_calculator import DateLike, week_start as get_week_start

logger = logging.getLogger(__name__)


def _coerce_record(item: Any) -> ActivityRecord:
    """Accept model instances as-is and validate raw mappings from storage."""
    if isinstance(item, ActivityRecord):
        return item
    return ActivityRecord.model_validate(item)


def _record_id(item: Any):
    if isinstance(item, ActivityRecord):
        return item.id
    if isinstance(item, dict):
        value = item.get("id", item.get("_id"))
        return str(value) if value is not None else None
    return None


def group_activities_into_weekly_logs(records: Iterable[Any]) -> GroupingResult:
    """
    Group activities into weekly logs.

    Activities keep their input order inside a group. Groups are ordered by
    week start (most recent first), then by log type value. Records without a
    log type, or raw records that fail validation, are skipped and reported
    instead of aborting the whole grouping.

    Args:
        records: ActivityRecord instances or raw activity mappings

    Returns:
        GroupingResult: Ordered weekly logs and skipped records
    """
    logs_map: Dict[Tuple[LogType, date], WeeklyLog] = {}
    skipped: List[SkippedRecord] = []

    for index, item in enumerate(records):
        try:
            activity = _coerce_record(item)
        except ValidationError as e:
            reason = f"invalid record: {e.error_count()} validation error(s)"
            skipped.append(SkippedRecord(index=index, record_id=_record_id(item), reason=reason))
            logger.warning(f"Skipping activity at position {index}: {reason}")
            continue

        if activity.log_type is None:
            skipped.append(SkippedRecord(index=index, record_id=activity.id, reason="missing log type"))
            logger.warning(f"Skipping activity {activity.id or index}: missing log type")
            continue

        key = (activity.log_type, activity.week_start)
        log = logs_map.get(key)
        if log is None:
            log = WeeklyLog(log_type=activity.log_type, week_start=activity.week_start)
            logs_map[key] = log

        log.activities.append(activity)
        log.total_duration_minutes += activity.duration or 0

    # Week descending, then log type ascending
    ordered = sorted(logs_map.values(), key=lambda log: log.log_type.value)
    ordered.sort(key=lambda log: log.week_start, reverse=True)

    if skipped:
        logger.info(f"Grouped {len(ordered)} weekly logs, skipped {len(skipped)} records")
    return GroupingResult(logs=ordered, skipped=skipped)


def logs_for_week(logs: Iterable[WeeklyLog], week_start: DateLike) -> List[WeeklyLog]:
    """Get the weekly logs belonging to the week containing week_start."""
    target = get_week_start(week_start)
    return [log for log in logs if log.week_start == target]


def calculate_week_total_hours(logs: Iterable[WeeklyLog], week_start: DateLike) -> float:
    """
    Calculate total hours across all logs in a week.

    Args:
        logs: Weekly logs (any weeks)
        week_start: Any date in the week to total

    Returns:
        float: Decimal hours rounded to 2 places
    """
    total_minutes = sum(log.total_duration_minutes for log in logs_for_week(logs, week_start))
    return minutes_to_hours(total_minutes)
