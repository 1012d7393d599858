"""
View-state endpoints: restore and save where the caller left off.
"""

from fastapi import APIRouter, Depends, Response, status

from wsp.auth.verify import auth_dependency
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.models.api.planner_request import ViewStateRequest
from wsp.models.api.planner_response import ViewStateResponse
from wsp.routes.common import raise_http_error, require_user_id
from wsp.services.errors import WSPServiceError
from wsp.services.redis_client import fast_redis
from wsp.services.view_state_service import (
    StateStore,
    ViewState,
    clear_view_state,
    get_view_state,
    update_view_state,
)

router = APIRouter(prefix="/view-state", tags=["view-state"])


def get_state_store() -> StateStore | None:
    """Redis when it came up at startup; tests override this."""
    return fast_redis if fast_redis.initialized else None


def _to_response(state: ViewState, persisted: bool) -> ViewStateResponse:
    return ViewStateResponse(**state.model_dump(mode="json"), persisted=persisted)


@router.get("", response_model=ViewStateResponse)
async def read_view_state(
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    store: StateStore | None = Depends(get_state_store),
):
    user_id = require_user_id(claims)
    try:
        state = await get_view_state(client, user_id, store=store)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "load_view_state")
    return _to_response(state, persisted=store is not None)


@router.put("", response_model=ViewStateResponse)
async def write_view_state(
    request: ViewStateRequest,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    store: StateStore | None = Depends(get_state_store),
):
    user_id = require_user_id(claims)
    try:
        state, persisted = await update_view_state(
            client, user_id, request.model_dump(exclude_unset=True), store=store
        )
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "save_view_state")
    return _to_response(state, persisted)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def reset_view_state(
    claims: dict = Depends(auth_dependency),
    store: StateStore | None = Depends(get_state_store),
):
    """Drop the saved state so the next load starts on the default board and week."""
    user_id = require_user_id(claims)
    await clear_view_state(user_id, store=store)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
