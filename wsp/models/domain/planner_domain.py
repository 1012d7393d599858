"""
Domain models for the WSP planner.
Pydantic models that mirror the rows of the hosted tables
(companies, profiles, tasks, unplanned_tasks, focus_notes).
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class CalendarStartMonth(str, Enum):
    JANUARY = "January"
    APRIL = "April"


class TaskStatus(str, Enum):
    INCOMPLETE = "Incomplete"
    IN_PROGRESS = "InProgress"
    COMPLETE = "Complete"
    ADDITIONAL = "Additional"


class Day(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


DAYS: list[Day] = list(Day)


class FocusItemStatus(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    NONE = "none"


class Company(BaseModel):
    """A tenant. The fiscal start month is fixed at creation."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    calendar_start_month: CalendarStartMonth = CalendarStartMonth.APRIL
    created_at: datetime | None = None


class Profile(BaseModel):
    """Public profile row; `id` matches the Supabase auth identity."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    email: str
    role: Role = Role.USER
    company_id: str | None = None


class Task(BaseModel):
    """A planned task on a user's weekly board."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    week_number: int = Field(..., ge=1)
    day: Day
    text: str
    status: TaskStatus = TaskStatus.INCOMPLETE
    time_taken: int = Field(0, ge=0, description="Minutes spent")
    is_priority: bool = False
    created_at: datetime | None = None


class UnplannedTask(BaseModel):
    """A backlog task not yet scheduled to a week/day."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    text: str
    status: TaskStatus = TaskStatus.INCOMPLETE
    time_taken: int = Field(0, ge=0)
    is_priority: bool = False
    created_at: datetime | None = None


class FocusItem(BaseModel):
    id: str
    text: str
    status: FocusItemStatus = FocusItemStatus.NONE


class FocusNote(BaseModel):
    """One per profile. `focus_text` holds a JSON list of FocusItem."""

    model_config = ConfigDict(extra="ignore")

    user_id: str
    focus_text: str | None = None
    pointers_text: str | None = None
    updated_at: datetime | None = None
