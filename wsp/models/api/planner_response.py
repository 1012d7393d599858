# wsp/models/api/planner_response.py
from datetime import date, datetime

from pydantic import BaseModel, Field

from wsp.core.access import Permissions
from wsp.core.calendar import CalendarContext, WeekSpan
from wsp.models.domain.planner_domain import CalendarStartMonth, FocusItem, Profile, TaskStatus
from wsp.services.stats_service import TaskStats, format_minutes, stats_title


class AuthMeta(BaseModel):
    """Auth metadata extracted from JWT claims."""

    user_id: str
    email: str | None = None
    role: str | None = "authenticated"
    aud: str | None = None
    iat: int | None = None
    exp: int | None = None


class MeResponse(BaseModel):
    """API response for /me endpoint."""

    profile: Profile = Field(..., description="Planner profile of the caller")
    auth: AuthMeta = Field(..., description="JWT authentication metadata")


class PermissionsResponse(BaseModel):
    can_edit_tasks: bool
    can_add_task: bool
    can_manage_users: bool
    viewable_users: list[Profile]

    @classmethod
    def from_permissions(cls, permissions: Permissions) -> "PermissionsResponse":
        return cls(
            can_edit_tasks=permissions.can_edit_tasks,
            can_add_task=permissions.can_add_task,
            can_manage_users=permissions.can_manage_users,
            viewable_users=permissions.viewable_users,
        )


class CalendarResponse(BaseModel):
    week_number: int
    fiscal_year_start: date
    fiscal_year_label: str
    start_month: CalendarStartMonth

    @classmethod
    def from_context(cls, context: CalendarContext) -> "CalendarResponse":
        return cls(
            week_number=context.week_number,
            fiscal_year_start=context.fiscal_year_start,
            fiscal_year_label=context.fiscal_year_label,
            start_month=context.start_month,
        )


class WeekSpanResponse(BaseModel):
    week: int
    start: date
    end: date

    @classmethod
    def from_span(cls, span: WeekSpan) -> "WeekSpanResponse":
        return cls(week=span.week, start=span.start, end=span.end)


class WeeksResponse(BaseModel):
    fiscal_year_label: str
    start_month: CalendarStartMonth
    weeks: list[WeekSpanResponse]


class WorkspaceResponse(BaseModel):
    """Everything the board needs on first load."""

    current_user: Profile
    viewing_user: Profile | None
    permissions: PermissionsResponse
    calendar: CalendarResponse
    time_tracking_enabled: bool


class StatusStats(BaseModel):
    count: int
    time_minutes: int
    percentage: float


class StatsResponse(BaseModel):
    title: str
    start_week: int
    end_week: int
    total_tasks: int
    total_time_minutes: int
    total_time_display: str
    by_status: dict[TaskStatus, StatusStats]

    @classmethod
    def from_stats(cls, user_name: str, stats: TaskStats) -> "StatsResponse":
        percentages = stats.percentages
        return cls(
            title=stats_title(user_name, stats.start_week, stats.end_week),
            start_week=stats.start_week,
            end_week=stats.end_week,
            total_tasks=stats.total_tasks,
            total_time_minutes=stats.total_time,
            total_time_display=format_minutes(stats.total_time),
            by_status={
                status: StatusStats(
                    count=stats.counts[status],
                    time_minutes=stats.time_by_status[status],
                    percentage=round(percentages[status], 1),
                )
                for status in TaskStatus
            },
        )


class DeleteUserResponse(BaseModel):
    deleted_user_id: str
    next_viewing_user_id: str | None


class ViewStateResponse(BaseModel):
    viewing_user_id: str | None
    current_week: int
    week_range_start: int
    week_range_end: int
    current_view: str
    persisted: bool = False


class FocusNoteResponse(BaseModel):
    user_id: str
    items: list[FocusItem]
    pointers_text: str | None = None
    updated_at: datetime | None = None
