"""
Focus note endpoints. Notes are private to their owner.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from wsp.auth.verify import auth_dependency
from wsp.core.access import can_view_focus_note
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.api.planner_request import FocusNoteRequest
from wsp.models.api.planner_response import FocusNoteResponse
from wsp.models.domain.planner_domain import FocusNote
from wsp.routes.common import raise_http_error, require_user_id
from wsp.services.errors import WSPServiceError
from wsp.services.focus_service import get_focus_note, parse_focus_items, save_focus_note
from wsp.services.workspace_service import resolve_actor

logger = get_logger(__name__)

router = APIRouter(prefix="/focus-note", tags=["focus"])


def _to_response(user_id: str, note: FocusNote | None) -> FocusNoteResponse:
    if note is None:
        return FocusNoteResponse(user_id=user_id, items=[])
    return FocusNoteResponse(
        user_id=note.user_id,
        items=parse_focus_items(note.focus_text),
        pointers_text=note.pointers_text,
        updated_at=note.updated_at,
    )


@router.get("", response_model=FocusNoteResponse)
async def read_focus_note(
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    owner_id: str | None = Query(None, alias="user_id", description="Defaults to the caller"),
):
    user_id = require_user_id(claims)
    owner_id = owner_id or user_id

    try:
        actor, _ = await resolve_actor(client, user_id)
        if not can_view_focus_note(actor, owner_id):
            logger.warning("Blocked focus note read", user_id=user_id, owner_id=owner_id)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Focus notes are private")
        note = await get_focus_note(client, owner_id)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "load_focus_note")

    return _to_response(owner_id, note)


@router.put("", response_model=FocusNoteResponse)
async def write_focus_note(
    request: FocusNoteRequest,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        await resolve_actor(client, user_id)
        note = await save_focus_note(client, user_id, request.items, request.pointers_text)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "save_focus_note")

    return _to_response(user_id, note)
