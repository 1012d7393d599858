"""
Dashboard statistics and the weekly task CSV for one board.

Both default to the viewed profile's current fiscal week.
"""

from fastapi import APIRouter, Depends, Query, Response

from wsp.auth.verify import auth_dependency
from wsp.core.calendar import TOTAL_WEEKS, normalize_week_range
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.api.planner_response import StatsResponse
from wsp.models.domain.planner_domain import Profile, Task
from wsp.routes.common import raise_http_error, require_user_id
from wsp.services import task_service
from wsp.services.errors import WSPServiceError
from wsp.services.export_service import weekly_tasks_csv, weekly_tasks_filename
from wsp.services.stats_service import compute_task_stats
from wsp.services.workspace_service import get_workspace_context

logger = get_logger(__name__)

router = APIRouter(prefix="/users/{owner_id}", tags=["dashboard"])


async def _load_range(
    client: DataClient, user_id: str, owner_id: str, start_week: int | None, end_week: int | None
) -> tuple[Profile, list[Task], int, int]:
    context = await get_workspace_context(client, user_id, owner_id)
    current = context.calendar.week_number
    start, end = normalize_week_range(start_week or current, end_week or start_week or current)
    tasks = await task_service.list_tasks(client, user_id, owner_id, start, end)
    return context.viewing_user, tasks, start, end


@router.get("/dashboard", response_model=StatsResponse)
async def get_dashboard(
    owner_id: str,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    start_week: int | None = Query(None, ge=1, le=TOTAL_WEEKS),
    end_week: int | None = Query(None, ge=1, le=TOTAL_WEEKS),
):
    user_id = require_user_id(claims)
    try:
        owner, tasks, start, end = await _load_range(client, user_id, owner_id, start_week, end_week)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "load_dashboard")

    return StatsResponse.from_stats(owner.name, compute_task_stats(tasks, start, end))


@router.get("/export.csv")
async def export_tasks_csv(
    owner_id: str,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    start_week: int | None = Query(None, ge=1, le=TOTAL_WEEKS),
    end_week: int | None = Query(None, ge=1, le=TOTAL_WEEKS),
):
    """Weekly task table as CSV (one block per week, days side by side)."""
    user_id = require_user_id(claims)
    try:
        owner, tasks, start, end = await _load_range(client, user_id, owner_id, start_week, end_week)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "export_tasks")

    logger.info("Task export generated", user_id=user_id, owner_id=owner_id, start_week=start, end_week=end)
    return Response(
        content=weekly_tasks_csv(owner, tasks, start, end),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{weekly_tasks_filename(owner, start, end)}"'},
    )
