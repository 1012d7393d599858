"""
Workspace context: who is signed in, whose board is open, what they may do
there, and which fiscal week that board defaults to.

The week is always computed from the *viewed* profile's company calendar,
since that is the grid the board shows.
"""

from dataclasses import dataclass
from datetime import date

from wsp.config import settings
from wsp.core.access import (
    Permissions,
    can_view_profile,
    compute_permissions,
    default_viewing_profile,
)
from wsp.core.calendar import CalendarContext, calendar_context
from wsp.db.client import DataClient
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.domain.planner_domain import Profile
from wsp.services.directory_service import Directory, load_directory
from wsp.services.errors import NotFoundError, PermissionDeniedError

logger = get_logger(__name__)


@dataclass
class WorkspaceContext:
    current_user: Profile
    viewing_user: Profile | None
    permissions: Permissions
    calendar: CalendarContext
    directory: Directory


def calendar_for(directory: Directory, profile: Profile | None, today: date) -> CalendarContext:
    start_month = directory.start_month_for(profile) or settings.DEFAULT_CALENDAR_START_MONTH
    return calendar_context(today, start_month)


async def resolve_actor(client: DataClient, user_id: str) -> tuple[Profile, Directory]:
    """Load the directory and the signed-in profile, or fail with NotFoundError."""
    directory = await load_directory(client)
    actor = directory.profile(user_id)
    if actor is None:
        logger.warning("Authenticated identity has no profile", user_id=user_id)
        raise NotFoundError("User profile not found", user_id=user_id)
    return actor, directory


def resolve_viewing(
    actor: Profile, directory: Directory, viewing_user_id: str | None
) -> Profile | None:
    """
    Profile whose board is shown.

    Explicit requests must target a visible profile; with no request the
    role's default board is used.
    """
    if viewing_user_id is None:
        return default_viewing_profile(actor, directory.profiles)

    target = directory.profile(viewing_user_id)
    if target is None:
        raise NotFoundError("Viewed profile not found", user_id=actor.id)
    if not can_view_profile(actor, target, directory.profiles):
        logger.warning(
            "Blocked board access outside permitted profiles",
            user_id=actor.id,
            target_user_id=viewing_user_id,
        )
        raise PermissionDeniedError("You cannot view this user's board", user_id=actor.id)
    return target


async def get_workspace_context(
    client: DataClient,
    user_id: str,
    viewing_user_id: str | None = None,
    today: date | None = None,
) -> WorkspaceContext:
    actor, directory = await resolve_actor(client, user_id)
    viewing = resolve_viewing(actor, directory, viewing_user_id)

    return WorkspaceContext(
        current_user=actor,
        viewing_user=viewing,
        permissions=compute_permissions(actor, viewing, directory.profiles),
        calendar=calendar_for(directory, viewing, today or date.today()),
        directory=directory,
    )
