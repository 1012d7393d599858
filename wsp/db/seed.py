"""
Demo rows for the local development store.

Two companies on different fiscal calendars, one superadmin, an admin per
company, a handful of users (one unassigned) and some tasks around week 10.
"""

from copy import deepcopy
from typing import Any

_SEEDED_AT = "2025-01-06T09:00:00+00:00"

SUPERADMIN_ID = "superadmin-001"

COMPANIES: list[dict[str, Any]] = [
    {"id": "company-a", "name": "Innovate Inc.", "calendar_start_month": "April", "created_at": _SEEDED_AT},
    {"id": "company-b", "name": "Synergy Solutions", "calendar_start_month": "January", "created_at": _SEEDED_AT},
]

PROFILES: list[dict[str, Any]] = [
    {"id": SUPERADMIN_ID, "name": "Super Admin", "email": "super@wsp.local", "role": "superadmin", "company_id": None},
    {"id": "admin-001", "name": "Alice Admin", "email": "alice@innovate.local", "role": "admin", "company_id": "company-a"},
    {"id": "user-001", "name": "Bob Builder", "email": "bob@innovate.local", "role": "user", "company_id": "company-a"},
    {"id": "user-002", "name": "Charlie Crew", "email": "charlie@innovate.local", "role": "user", "company_id": "company-a"},
    {"id": "admin-002", "name": "Diana Director", "email": "diana@synergy.local", "role": "admin", "company_id": "company-b"},
    {"id": "user-003", "name": "Eve Employee", "email": "eve@synergy.local", "role": "user", "company_id": "company-b"},
    {"id": "user-004", "name": "Frank Field", "email": "frank@unassigned.local", "role": "user", "company_id": None},
]


def _task(task_id, user_id, week, day, text, status, minutes, priority=False):
    return {
        "id": task_id,
        "user_id": user_id,
        "week_number": week,
        "day": day,
        "text": text,
        "status": status,
        "time_taken": minutes,
        "is_priority": priority,
        "created_at": _SEEDED_AT,
    }


TASKS: list[dict[str, Any]] = [
    _task("task-001", "user-001", 10, "Monday", "Review project proposal and provide feedback.", "Complete", 60, True),
    _task("task-002", "user-001", 10, "Tuesday", "Prepare presentation for the client meeting.", "Incomplete", 90),
    _task("task-009", "user-001", 11, "Wednesday", "Follow up on previous action items.", "InProgress", 0),
    _task("task-003", "user-003", 10, "Monday", "Onboard new team member and set up their accounts.", "Complete", 120),
    _task("task-004", "user-003", 10, "Wednesday", "Draft the quarterly report.", "Additional", 45),
    _task("task-005", "user-003", 10, "Friday", "Finalize sprint planning for next week.", "Incomplete", 30, True),
    _task("task-006", "user-004", 10, "Thursday", "Analyze competitor marketing strategies.", "Complete", 150),
    _task("task-007", "user-004", 10, "Thursday", "Create ad copy for the new campaign.", "Incomplete", 0),
    _task("task-008", "user-004", 9, "Tuesday", "A task from a previous week.", "Complete", 25),
]

UNPLANNED_TASKS: list[dict[str, Any]] = [
    {
        "id": "unplanned-001",
        "user_id": "user-001",
        "text": "Clean up the shared drive.",
        "status": "Incomplete",
        "time_taken": 0,
        "is_priority": False,
        "created_at": _SEEDED_AT,
    },
    {
        "id": "unplanned-002",
        "user_id": "user-003",
        "text": "Book the team offsite venue.",
        "status": "Incomplete",
        "time_taken": 0,
        "is_priority": True,
        "created_at": _SEEDED_AT,
    },
]


def seed_tables() -> dict[str, list[dict[str, Any]]]:
    """Fresh copy of every seeded table."""
    return deepcopy(
        {
            "companies": COMPANIES,
            "profiles": PROFILES,
            "tasks": TASKS,
            "unplanned_tasks": UNPLANNED_TASKS,
            "focus_notes": [],
            "audit_logs": [],
        }
    )
