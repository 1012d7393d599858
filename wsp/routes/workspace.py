"""
Workspace endpoint: first-load context for the board.
"""

from fastapi import APIRouter, Depends, Query

from wsp.auth.verify import auth_dependency
from wsp.config import settings
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.api.planner_response import CalendarResponse, PermissionsResponse, WorkspaceResponse
from wsp.routes.common import raise_http_error, require_user_id
from wsp.services.errors import WSPServiceError
from wsp.services.workspace_service import get_workspace_context

logger = get_logger(__name__)

router = APIRouter(tags=["workspace"])


@router.get("/workspace", response_model=WorkspaceResponse)
async def get_workspace(
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    viewing_user_id: str | None = Query(None, description="Profile whose board to open"),
):
    """Caller, viewed profile, permissions and the viewed profile's fiscal calendar."""
    user_id = require_user_id(claims)

    try:
        context = await get_workspace_context(client, user_id, viewing_user_id)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "load_workspace")

    logger.debug(
        "Workspace resolved",
        user_id=user_id,
        viewing_user_id=context.viewing_user.id if context.viewing_user else None,
        week=context.calendar.week_number,
    )
    return WorkspaceResponse(
        current_user=context.current_user,
        viewing_user=context.viewing_user,
        permissions=PermissionsResponse.from_permissions(context.permissions),
        calendar=CalendarResponse.from_context(context.calendar),
        time_tracking_enabled=settings.TIME_TRACKING_ENABLED,
    )
