"""
Task service: weekly board tasks and the unplanned backlog.

Access rules:
- reading a board requires it to be visible to the actor
- adding to a board follows `can_add_task` (owner, same-company admin, superadmin)
- editing or deleting follows `can_edit_tasks` (owner only)
- the unplanned backlog is private to its owner
"""

from typing import Any

from wsp.core.access import can_view_profile, compute_permissions
from wsp.core.calendar import TOTAL_WEEKS
from wsp.core.pending import PendingMutation
from wsp.db.client import DataClient
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.domain.planner_domain import DAYS, Day, Task, TaskStatus, UnplannedTask
from wsp.services.errors import NotFoundError, PermissionDeniedError, ValidationError
from wsp.services.workspace_service import resolve_actor

logger = get_logger(__name__)

_EDITABLE_FIELDS = {"text", "status", "time_taken", "is_priority", "day", "week_number"}
_UNPLANNED_EDITABLE_FIELDS = {"text", "status", "time_taken", "is_priority"}


def _check_week(week: int) -> int:
    if not 1 <= int(week) <= TOTAL_WEEKS:
        raise ValidationError(f"Week must be between 1 and {TOTAL_WEEKS}")
    return int(week)


def _check_text(text: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Task text cannot be empty")
    return cleaned


def _clean_changes(changes: dict[str, Any], allowed: set[str]) -> dict[str, Any]:
    cleaned = {k: v for k, v in changes.items() if k in allowed and v is not None}
    if not cleaned:
        raise ValidationError("No changes supplied")
    if "text" in cleaned:
        cleaned["text"] = _check_text(cleaned["text"])
    if "week_number" in cleaned:
        cleaned["week_number"] = _check_week(cleaned["week_number"])
    if "time_taken" in cleaned and int(cleaned["time_taken"]) < 0:
        raise ValidationError("Time taken cannot be negative")
    for key in ("status", "day"):
        if key in cleaned:
            cleaned[key] = getattr(cleaned[key], "value", cleaned[key])
    return cleaned


def sort_tasks(tasks: list[Task]) -> list[Task]:
    """Week, then weekday, then creation time."""
    return sorted(
        tasks,
        key=lambda t: (t.week_number, DAYS.index(t.day), t.created_at.isoformat() if t.created_at else ""),
    )


# =================================================================
# Planned tasks
# =================================================================


async def list_tasks(
    client: DataClient,
    actor_id: str,
    owner_id: str,
    start_week: int | None = None,
    end_week: int | None = None,
    status: TaskStatus | None = None,
) -> list[Task]:
    actor, directory = await resolve_actor(client, actor_id)
    owner = directory.profile(owner_id)
    if owner is None:
        raise NotFoundError("User not found", user_id=actor_id)
    if not can_view_profile(actor, owner, directory.profiles):
        raise PermissionDeniedError("You cannot view this user's tasks", user_id=actor_id)

    query = client.table("tasks").select().eq("user_id", owner_id)
    if start_week is not None:
        query = query.gte("week_number", start_week)
    if end_week is not None:
        query = query.lte("week_number", end_week)
    if status is not None:
        query = query.eq("status", status.value)

    rows = await query.execute()
    return sort_tasks([Task.model_validate(row) for row in rows])


async def add_task(
    client: DataClient,
    actor_id: str,
    owner_id: str,
    week: int,
    day: Day,
    text: str,
) -> Task:
    """Add a task to `owner_id`'s board: Incomplete, no time spent, not a priority."""
    actor, directory = await resolve_actor(client, actor_id)
    owner = directory.profile(owner_id)
    if owner is None:
        raise NotFoundError("User not found", user_id=actor_id)

    permissions = compute_permissions(actor, owner, directory.profiles)
    if not permissions.can_add_task:
        logger.warning("Add task denied", user_id=actor_id, owner_id=owner_id)
        raise PermissionDeniedError("You cannot add tasks to this board", user_id=actor_id)

    payload = {
        "user_id": owner_id,
        "week_number": _check_week(week),
        "day": Day(day).value,
        "text": _check_text(text),
        "status": TaskStatus.INCOMPLETE.value,
        "time_taken": 0,
        "is_priority": False,
    }
    row = await client.table("tasks").insert(payload).single()

    logger.info("Task added", user_id=actor_id, owner_id=owner_id, week=payload["week_number"], day=payload["day"])
    return Task.model_validate(row)


async def _load_task(client: DataClient, task_id: str) -> Task:
    row = await client.table("tasks").select().eq("id", task_id).maybe_single()
    if not row:
        raise NotFoundError("Task not found")
    return Task.model_validate(row)


async def _require_edit(client: DataClient, actor_id: str, task: Task) -> None:
    actor, directory = await resolve_actor(client, actor_id)
    owner = directory.profile(task.user_id)
    permissions = compute_permissions(actor, owner, directory.profiles)
    if not permissions.can_edit_tasks:
        logger.warning("Task edit denied", user_id=actor_id, task_id=task.id, owner_id=task.user_id)
        raise PermissionDeniedError("Only the owner can change this task", user_id=actor_id)


async def update_task(client: DataClient, actor_id: str, task_id: str, changes: dict[str, Any]) -> Task:
    task = await _load_task(client, task_id)
    await _require_edit(client, actor_id, task)

    cleaned = _clean_changes(changes, _EDITABLE_FIELDS)
    row = await client.table("tasks").update(cleaned).eq("id", task_id).maybe_single()
    if not row:
        raise NotFoundError("Task not found")

    logger.info("Task updated", user_id=actor_id, task_id=task_id, fields=sorted(cleaned))
    return Task.model_validate(row)


async def delete_task(client: DataClient, actor_id: str, task_id: str) -> None:
    task = await _load_task(client, task_id)
    await _require_edit(client, actor_id, task)

    await client.table("tasks").delete().eq("id", task_id).execute()
    logger.info("Task deleted", user_id=actor_id, task_id=task_id)


# =================================================================
# Unplanned tasks
# =================================================================


async def list_unplanned(client: DataClient, actor_id: str) -> list[UnplannedTask]:
    """The actor's backlog, newest first."""
    rows = (
        await client.table("unplanned_tasks")
        .select()
        .eq("user_id", actor_id)
        .order("created_at", desc=True)
        .execute()
    )
    return [UnplannedTask.model_validate(row) for row in rows]


async def add_unplanned(client: DataClient, actor_id: str, text: str) -> UnplannedTask:
    await resolve_actor(client, actor_id)
    payload = {
        "user_id": actor_id,
        "text": _check_text(text),
        "status": TaskStatus.INCOMPLETE.value,
        "time_taken": 0,
        "is_priority": False,
    }
    row = await client.table("unplanned_tasks").insert(payload).single()
    logger.info("Unplanned task added", user_id=actor_id, task_id=row["id"])
    return UnplannedTask.model_validate(row)


async def _load_own_unplanned(client: DataClient, actor_id: str, task_id: str) -> UnplannedTask:
    row = await client.table("unplanned_tasks").select().eq("id", task_id).maybe_single()
    # Someone else's backlog item is reported as missing
    if not row or row.get("user_id") != actor_id:
        raise NotFoundError("Unplanned task not found", user_id=actor_id)
    return UnplannedTask.model_validate(row)


async def update_unplanned(
    client: DataClient, actor_id: str, task_id: str, changes: dict[str, Any]
) -> UnplannedTask:
    await _load_own_unplanned(client, actor_id, task_id)
    cleaned = _clean_changes(changes, _UNPLANNED_EDITABLE_FIELDS)
    row = await client.table("unplanned_tasks").update(cleaned).eq("id", task_id).single()
    return UnplannedTask.model_validate(row)


async def delete_unplanned(client: DataClient, actor_id: str, task_id: str) -> None:
    await _load_own_unplanned(client, actor_id, task_id)
    await client.table("unplanned_tasks").delete().eq("id", task_id).execute()
    logger.info("Unplanned task deleted", user_id=actor_id, task_id=task_id)


async def plan_unplanned(
    client: DataClient, actor_id: str, task_id: str, week: int, day: Day
) -> Task:
    """
    Move a backlog item onto the board: insert the Task, then delete the
    unplanned row. Both steps run under one PendingMutation, so a failed
    delete rolls the inserted Task back out.
    """
    item = await _load_own_unplanned(client, actor_id, task_id)
    payload = {
        "user_id": actor_id,
        "week_number": _check_week(week),
        "day": Day(day).value,
        "text": item.text,
        "status": item.status.value,
        "time_taken": item.time_taken,
        "is_priority": item.is_priority,
    }

    mutation = PendingMutation(provisional=payload, operation="plan")
    try:
        row = await client.table("tasks").insert(payload).single()
        mutation.on_rollback(lambda: client.table("tasks").delete().eq("id", row["id"]).execute())
        await client.table("unplanned_tasks").delete().eq("id", task_id).execute()
    except DatabaseError as e:
        logger.error(
            "Planning failed, rolling back",
            user_id=actor_id,
            unplanned_id=task_id,
            mutation_id=mutation.mutation_id,
            compensations=len(mutation.compensations),
            error=str(e),
        )
        await mutation.abort(str(e))
        raise

    task = Task.model_validate(mutation.commit(row))
    logger.info(
        "Unplanned task planned", user_id=actor_id, unplanned_id=task_id, task_id=task.id, week=task.week_number
    )
    return task
