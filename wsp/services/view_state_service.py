"""
Per-user view state: whose board is open, the selected week and week range,
and the active view. Kept in Redis with a TTL so a returning user lands where
they left off; without Redis the state is computed but not persisted.
"""

from datetime import date
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from wsp.config import settings
from wsp.core.access import can_view_profile, compute_permissions
from wsp.core.calendar import TOTAL_WEEKS, clamp_week, normalize_week_range
from wsp.db.client import DataClient
from wsp.infrastructure.observability.logging import get_logger
from wsp.services.errors import PermissionDeniedError
from wsp.services.redis_client import fast_redis
from wsp.services.workspace_service import (
    WorkspaceContext,
    calendar_for,
    get_workspace_context,
    resolve_viewing,
)

logger = get_logger(__name__)

KEY_PREFIX = "wsp:view_state:"


class ViewName(str, Enum):
    BOARD = "board"
    DASHBOARD = "dashboard"
    FOCUS = "focus"
    MANAGEMENT = "management"
    CALENDAR = "calendar"


# Views that show the viewed profile's data rather than the caller's own
SHARED_VIEWS = {ViewName.BOARD, ViewName.DASHBOARD, ViewName.CALENDAR}


class ViewState(BaseModel):
    viewing_user_id: str | None = None
    current_week: int = Field(1, ge=1, le=TOTAL_WEEKS)
    week_range_start: int = Field(1, ge=1, le=TOTAL_WEEKS)
    week_range_end: int = Field(1, ge=1, le=TOTAL_WEEKS)
    current_view: ViewName = ViewName.BOARD


class StateStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set_with_ttl(self, key: str, value: str, ttl_s: int | None = None) -> bool: ...

    async def delete(self, key: str) -> bool: ...


def _key(user_id: str) -> str:
    return f"{KEY_PREFIX}{user_id}"


def _resolve_store(store: StateStore | None) -> StateStore | None:
    if store is not None:
        return store
    return fast_redis if fast_redis.initialized else None


def default_view_state(context: WorkspaceContext) -> ViewState:
    # A 371-day fiscal year has a week 53; the board grid stops at 52
    week = clamp_week(context.calendar.week_number)
    return ViewState(
        viewing_user_id=context.viewing_user.id if context.viewing_user else None,
        current_week=week,
        week_range_start=week,
        week_range_end=week,
        current_view=ViewName.BOARD,
    )


def _reconcile(saved: ViewState, context: WorkspaceContext) -> ViewState:
    """Drop parts of a stored state the caller may no longer use."""
    actor = context.current_user
    directory = context.directory
    state = saved.model_copy()

    target = directory.profile(saved.viewing_user_id)
    if target is None or not can_view_profile(actor, target, directory.profiles):
        fallback = default_view_state(context)
        state.viewing_user_id = fallback.viewing_user_id
        state.current_week = fallback.current_week
        state.week_range_start = fallback.week_range_start
        state.week_range_end = fallback.week_range_end

    permissions = compute_permissions(actor, directory.profile(state.viewing_user_id), directory.profiles)
    if state.current_view is ViewName.MANAGEMENT and not permissions.can_manage_users:
        state.current_view = ViewName.BOARD

    state.current_week = clamp_week(state.current_week)
    state.week_range_start, state.week_range_end = normalize_week_range(
        state.week_range_start, state.week_range_end
    )
    return state


async def _load(
    client: DataClient, user_id: str, store: StateStore | None, today: date | None
) -> tuple[WorkspaceContext, ViewState]:
    context = await get_workspace_context(client, user_id, today=today)
    if store is None:
        return context, default_view_state(context)

    raw = await store.get(_key(user_id))
    if not raw:
        return context, default_view_state(context)

    try:
        saved = ViewState.model_validate_json(raw)
    except PydanticValidationError as e:
        logger.warning("Discarding unreadable view state", user_id=user_id, error=str(e))
        await store.delete(_key(user_id))
        return context, default_view_state(context)

    return context, _reconcile(saved, context)


async def get_view_state(
    client: DataClient,
    user_id: str,
    store: StateStore | None = None,
    today: date | None = None,
) -> ViewState:
    _, state = await _load(client, user_id, _resolve_store(store), today)
    return state


async def update_view_state(
    client: DataClient,
    user_id: str,
    changes: dict[str, Any],
    store: StateStore | None = None,
    today: date | None = None,
) -> tuple[ViewState, bool]:
    """
    Apply a partial update and persist the result.

    Switching to another profile resets the week and range to that profile's
    current fiscal week and leaves any private view for the board;
    opening the dashboard without an explicit range resets the range to the
    current week.

    Returns:
        (state, persisted)
    """
    store = _resolve_store(store)
    context, current = await _load(client, user_id, store, today)
    actor = context.current_user
    directory = context.directory
    changes = {k: v for k, v in changes.items() if v is not None}

    state = current.model_copy()

    if "viewing_user_id" in changes and changes["viewing_user_id"] != current.viewing_user_id:
        target = resolve_viewing(actor, directory, changes["viewing_user_id"])
        state.viewing_user_id = target.id if target else None
        # Week and range follow the newly viewed company calendar
        week = clamp_week(calendar_for(directory, target, today or date.today()).week_number)
        state.current_week = state.week_range_start = state.week_range_end = week
        if state.current_view not in SHARED_VIEWS:
            state.current_view = ViewName.BOARD

    if "current_week" in changes:
        state.current_week = clamp_week(changes["current_week"])

    if "current_view" in changes:
        view = ViewName(changes["current_view"])
        permissions = compute_permissions(actor, directory.profile(state.viewing_user_id), directory.profiles)
        if view is ViewName.MANAGEMENT and not permissions.can_manage_users:
            raise PermissionDeniedError("Only superadmins can open management", user_id=user_id)
        if view is ViewName.DASHBOARD and state.current_view is not ViewName.DASHBOARD:
            state.week_range_start = state.week_range_end = state.current_week
        state.current_view = view

    if "week_range_start" in changes or "week_range_end" in changes:
        changed = "end" if "week_range_end" in changes and "week_range_start" not in changes else "start"
        state.week_range_start, state.week_range_end = normalize_week_range(
            changes.get("week_range_start", state.week_range_start),
            changes.get("week_range_end", state.week_range_end),
            changed=changed,
        )

    persisted = False
    if store is not None:
        persisted = await store.set_with_ttl(
            _key(user_id), state.model_dump_json(), settings.VIEW_STATE_TTL_S
        )
    if not persisted:
        logger.debug("View state not persisted", user_id=user_id, redis_available=store is not None)

    return state, persisted


async def clear_view_state(user_id: str, store: StateStore | None = None) -> bool:
    """Forget the saved state; the next read starts from the defaults."""
    store = _resolve_store(store)
    if store is None:
        return False
    return await store.delete(_key(user_id))
