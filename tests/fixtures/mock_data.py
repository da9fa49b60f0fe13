"""
Mock data and test fixtures for testing.
"""
from datetime import datetime


# Wednesday; week starts Sunday 2024-01-14, editable from 2023-12-31 to 2024-01-20
FIXED_NOW = datetime(2024, 1, 17, 10, 30)


# ==========================================================================
# RAW ACTIVITY ROWS (as stored)
# ==========================================================================

RAW_ACTIVITY_ROWS = [
    {
        "id": "a1",
        "owner_id": "client-1",
        "log_type": "Program Activity",
        "date": "2024-01-15",
        "start_time": "09:00",
        "end_time": "10:00",
        "activity_type": "Job Training",
        "status": "Completed",
        "description": "Forklift safety class",
    },
    {
        "id": "a2",
        "owner_id": "client-1",
        "log_type": "Self-Directed Employment Search Log",
        "date": "2024-01-16",
        "duration": 45,
        "activity_type": "Job Application",
        "status": "Completed",
        "description": "Applied at warehouse",
    },
    {
        "id": "a3",
        "owner_id": "client-1",
        "log_type": "Work Experience",
        "date": "2024-01-08",
        "start_time": "22:00",
        "end_time": "02:00",
        "activity_type": "Work Hours",
        "status": "Completed",
        "description": "Night shift",
    },
]

RAW_ROW_MISSING_LOG_TYPE = {
    "id": "legacy-1",
    "owner_id": "client-1",
    "date": "2024-01-15",
    "duration": 30,
    "activity_type": "Other",
    "description": "Imported before log types existed",
}

RAW_ROW_BAD_DATE = {
    "id": "broken-1",
    "owner_id": "client-1",
    "log_type": "Program Activity",
    "date": "not-a-date",
}


# ==========================================================================
# USERS
# ==========================================================================

USERS = [
    {"id": "client-1", "email": "client.one@example.com", "name": "Client One",
     "role": "participant", "assigned_coaches": ["coach@example.com"]},
    {"id": "client-2", "email": "client.two@example.com", "name": "Client Two",
     "role": "client", "assigned_coaches": ["other.coach@example.com"]},
    {"id": "coach-1", "email": "coach@example.com", "name": "Coach Carter", "role": "coach"},
    {"id": "admin-1", "email": "admin@example.com", "name": "Admin Adams", "role": "admin"},
]
