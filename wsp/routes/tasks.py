"""
Task board endpoints.

GET/POST /users/{user_id}/tasks   list or add tasks on a user's board
PATCH/DELETE /tasks/{task_id}     owner-only edits
"""

from fastapi import APIRouter, Depends, Query, Response, status

from wsp.auth.verify import auth_dependency
from wsp.core.calendar import TOTAL_WEEKS
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.models.api.planner_request import TaskCreateRequest, TaskUpdateRequest
from wsp.models.domain.planner_domain import Task, TaskStatus
from wsp.routes.common import raise_http_error, require_user_id
from wsp.services import task_service
from wsp.services.errors import WSPServiceError

router = APIRouter(tags=["tasks"])


@router.get("/users/{owner_id}/tasks", response_model=list[Task])
async def list_user_tasks(
    owner_id: str,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    week: int | None = Query(None, ge=1, le=TOTAL_WEEKS, description="Single week"),
    start_week: int | None = Query(None, ge=1, le=TOTAL_WEEKS),
    end_week: int | None = Query(None, ge=1, le=TOTAL_WEEKS),
    status_filter: TaskStatus | None = Query(None, alias="status"),
):
    user_id = require_user_id(claims)
    if week is not None:
        start_week = end_week = week

    try:
        return await task_service.list_tasks(client, user_id, owner_id, start_week, end_week, status_filter)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "list_tasks")


@router.post("/users/{owner_id}/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    owner_id: str,
    request: TaskCreateRequest,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        return await task_service.add_task(
            client, user_id, owner_id, request.week_number, request.day, request.text
        )
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "add_task")


@router.patch("/tasks/{task_id}", response_model=Task)
async def patch_task(
    task_id: str,
    request: TaskUpdateRequest,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        return await task_service.update_task(client, user_id, task_id, request.model_dump(exclude_unset=True))
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "update_task")


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_task(
    task_id: str,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        await task_service.delete_task(client, user_id, task_id)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "delete_task")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
