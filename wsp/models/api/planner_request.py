# wsp/models/api/planner_request.py
"""
Planner API request models.
Used by routes for input validation.
"""

from pydantic import BaseModel, Field

from wsp.core.calendar import TOTAL_WEEKS
from wsp.models.domain.planner_domain import CalendarStartMonth, Day, FocusItem, Role, TaskStatus
from wsp.services.view_state_service import ViewName


class TaskCreateRequest(BaseModel):
    """Request for adding a task to a user's board."""

    week_number: int = Field(..., ge=1, le=TOTAL_WEEKS, description="Fiscal week (1-52)")
    day: Day = Field(..., description="Weekday column")
    text: str = Field(..., min_length=1, max_length=2000, description="Task text")


class TaskUpdateRequest(BaseModel):
    """Partial task update; only supplied fields change."""

    text: str | None = Field(None, min_length=1, max_length=2000)
    status: TaskStatus | None = None
    time_taken: int | None = Field(None, ge=0, description="Minutes spent")
    is_priority: bool | None = None
    day: Day | None = None
    week_number: int | None = Field(None, ge=1, le=TOTAL_WEEKS)


class UnplannedTaskCreateRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)


class UnplannedTaskUpdateRequest(BaseModel):
    text: str | None = Field(None, min_length=1, max_length=2000)
    status: TaskStatus | None = None
    time_taken: int | None = Field(None, ge=0)
    is_priority: bool | None = None


class PlanTaskRequest(BaseModel):
    """Schedule a backlog item onto the board."""

    week_number: int = Field(..., ge=1, le=TOTAL_WEEKS)
    day: Day


class FocusNoteRequest(BaseModel):
    items: list[FocusItem] = Field(default_factory=list, description="Focus items in display order")
    pointers_text: str | None = Field(None, max_length=10000)


class CompanyCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    calendar_start_month: CalendarStartMonth = CalendarStartMonth.APRIL


class ProfileUpdateRequest(BaseModel):
    """Role and/or company reassignment. `clear_company` unassigns."""

    role: Role | None = None
    company_id: str | None = None
    clear_company: bool = False


class UserCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.USER
    company_id: str | None = None


class ViewStateRequest(BaseModel):
    """Partial view-state update."""

    viewing_user_id: str | None = None
    current_week: int | None = Field(None, ge=1, le=TOTAL_WEEKS)
    week_range_start: int | None = Field(None, ge=1, le=TOTAL_WEEKS)
    week_range_end: int | None = Field(None, ge=1, le=TOTAL_WEEKS)
    current_view: ViewName | None = None
