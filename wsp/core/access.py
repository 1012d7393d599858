"""
Row-visibility and permission rules for the task boards.

Roles in increasing privilege: user < admin < superadmin.

- A user only ever sees their own board.
- An admin sees every profile in their own company and may add tasks to
  colleagues' boards.
- A superadmin sees every other profile, may add tasks to any of them and is
  the only role that manages companies and accounts.
- Editing or deleting a task is reserved to the board owner.

These functions never raise: unknown roles, missing profiles or a missing
current user all resolve to the least-privileged answer. They decide what the
API exposes; the database's own row-level security is still expected to hold.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from wsp.models.domain.planner_domain import Profile, Role


@dataclass(frozen=True)
class Permissions:
    can_edit_tasks: bool = False
    can_add_task: bool = False
    can_manage_users: bool = False
    viewable_users: list[Profile] = field(default_factory=list)


def _role_of(profile: Profile | None) -> Role | None:
    if profile is None:
        return None
    try:
        return Role(profile.role)
    except ValueError:
        return None


def _same_company(a: Profile, b: Profile) -> bool:
    return a.company_id is not None and a.company_id == b.company_id


def viewable_profiles(current_user: Profile | None, all_profiles: Iterable[Profile]) -> list[Profile]:
    """Profiles whose boards `current_user` may open, in snapshot order."""
    role = _role_of(current_user)
    if role is None:
        return []

    profiles = list(all_profiles)
    if role is Role.SUPERADMIN:
        return [p for p in profiles if p.id != current_user.id]
    if role is Role.ADMIN:
        return [p for p in profiles if _same_company(p, current_user)]
    return [current_user]


def compute_permissions(
    current_user: Profile | None,
    viewing_profile: Profile | None,
    all_profiles: Iterable[Profile],
) -> Permissions:
    """
    Derive board permissions for `current_user` looking at `viewing_profile`.

    Args:
        current_user: Authenticated profile, None when signed out
        viewing_profile: Profile whose board is displayed, if any
        all_profiles: Snapshot of every profile

    Returns:
        Permissions record; all False and no viewable users when signed out
    """
    role = _role_of(current_user)
    if role is None:
        return Permissions()

    viewable = viewable_profiles(current_user, all_profiles)
    is_own_board = viewing_profile is not None and viewing_profile.id == current_user.id

    admin_adds = (
        role is Role.ADMIN
        and viewing_profile is not None
        and _same_company(viewing_profile, current_user)
        and not is_own_board
    )
    superadmin_adds = (
        role is Role.SUPERADMIN
        and viewing_profile is not None
        and viewing_profile.id != current_user.id
    )

    return Permissions(
        can_edit_tasks=is_own_board,
        can_add_task=is_own_board or admin_adds or superadmin_adds,
        can_manage_users=role is Role.SUPERADMIN,
        viewable_users=viewable,
    )


def can_view_profile(
    current_user: Profile | None, target: Profile | None, all_profiles: Iterable[Profile]
) -> bool:
    """True when `target`'s board (tasks, dashboard, export) is visible to `current_user`."""
    if current_user is None or target is None or _role_of(current_user) is None:
        return False
    if target.id == current_user.id:
        return True
    return any(p.id == target.id for p in viewable_profiles(current_user, all_profiles))


def can_view_focus_note(current_user: Profile | None, owner_id: str) -> bool:
    # Focus notes are private, even to superadmins
    return current_user is not None and current_user.id == owner_id


def default_viewing_profile(current_user: Profile | None, all_profiles: Iterable[Profile]) -> Profile | None:
    """Superadmins start on the first other profile; everyone else on their own board."""
    role = _role_of(current_user)
    if role is None:
        return None
    if role is Role.SUPERADMIN:
        return next((p for p in all_profiles if p.id != current_user.id), None)
    return current_user


def next_viewing_profile_after_delete(
    remaining: Iterable[Profile], deleted_id: str, viewing_id: str | None
) -> str | None:
    """Pick the board to show once `deleted_id` is gone."""
    if viewing_id != deleted_id:
        return viewing_id
    replacement = next((p for p in remaining if _role_of(p) is not Role.SUPERADMIN), None)
    return replacement.id if replacement else None


def sort_for_display(profiles: Iterable[Profile]) -> list[Profile]:
    """Admins before users, then alphabetical by name."""
    return sorted(
        profiles,
        key=lambda p: (0 if _role_of(p) is Role.ADMIN else 1, p.name.lower()),
    )
