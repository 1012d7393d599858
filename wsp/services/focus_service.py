"""
Focus notes: a private list of focus items with a traffic-light status,
plus free-form pointers. One note per profile, upserted on user_id.
"""

import json
from uuid import uuid4

from wsp.db.client import DataClient
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.domain.planner_domain import FocusItem, FocusItemStatus, FocusNote

logger = get_logger(__name__)


def parse_focus_items(focus_text: str | None) -> list[FocusItem]:
    """
    Decode `focus_text` into items.

    Older notes stored plain text; that becomes a single item. Unknown
    statuses degrade to `none`.
    """
    if not focus_text or not focus_text.strip():
        return []

    try:
        payload = json.loads(focus_text)
    except json.JSONDecodeError:
        return [FocusItem(id=str(uuid4()), text=focus_text.strip())]

    if not isinstance(payload, list):
        return [FocusItem(id=str(uuid4()), text=focus_text.strip())]

    items = []
    for entry in payload:
        if not isinstance(entry, dict) or not str(entry.get("text", "")).strip():
            continue
        try:
            status = FocusItemStatus(entry.get("status", "none"))
        except ValueError:
            status = FocusItemStatus.NONE
        items.append(
            FocusItem(
                id=str(entry.get("id") or uuid4()),
                text=str(entry["text"]).strip(),
                status=status,
            )
        )
    return items


def serialize_focus_items(items: list[FocusItem]) -> str:
    return json.dumps([item.model_dump(mode="json") for item in items])


async def get_focus_note(client: DataClient, user_id: str) -> FocusNote | None:
    row = await client.table("focus_notes").select().eq("user_id", user_id).maybe_single()
    return FocusNote.model_validate(row) if row else None


async def save_focus_note(
    client: DataClient,
    user_id: str,
    items: list[FocusItem],
    pointers_text: str | None,
) -> FocusNote:
    note = {
        "user_id": user_id,
        "focus_text": serialize_focus_items(items),
        "pointers_text": pointers_text,
    }
    row = await client.table("focus_notes").upsert(note, on_conflict="user_id").single()
    logger.info("Focus note saved", user_id=user_id, item_count=len(items))
    return FocusNote.model_validate(row)
