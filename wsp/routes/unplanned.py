"""
Unplanned backlog endpoints. Always the caller's own backlog.
"""

from fastapi import APIRouter, Depends, Response, status

from wsp.auth.verify import auth_dependency
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.models.api.planner_request import (
    PlanTaskRequest,
    UnplannedTaskCreateRequest,
    UnplannedTaskUpdateRequest,
)
from wsp.models.domain.planner_domain import Task, UnplannedTask
from wsp.routes.common import raise_http_error, require_user_id
from wsp.services import task_service
from wsp.services.errors import WSPServiceError

router = APIRouter(prefix="/unplanned-tasks", tags=["unplanned"])


@router.get("", response_model=list[UnplannedTask])
async def list_backlog(claims: dict = Depends(auth_dependency), client: DataClient = Depends(get_data_client)):
    user_id = require_user_id(claims)
    try:
        return await task_service.list_unplanned(client, user_id)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "list_unplanned_tasks")


@router.post("", response_model=UnplannedTask, status_code=status.HTTP_201_CREATED)
async def create_backlog_item(
    request: UnplannedTaskCreateRequest,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        return await task_service.add_unplanned(client, user_id, request.text)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "add_unplanned_task")


@router.patch("/{task_id}", response_model=UnplannedTask)
async def patch_backlog_item(
    task_id: str,
    request: UnplannedTaskUpdateRequest,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        return await task_service.update_unplanned(
            client, user_id, task_id, request.model_dump(exclude_unset=True)
        )
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "update_unplanned_task")


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_backlog_item(
    task_id: str,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        await task_service.delete_unplanned(client, user_id, task_id)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "delete_unplanned_task")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{task_id}/plan", response_model=Task, status_code=status.HTTP_201_CREATED)
async def plan_backlog_item(
    task_id: str,
    request: PlanTaskRequest,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    """Move a backlog item onto the caller's board at the given week and day."""
    user_id = require_user_id(claims)
    try:
        return await task_service.plan_unplanned(client, user_id, task_id, request.week_number, request.day)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "plan_unplanned_task")
