"""
Management service: companies and user accounts.

Superadmin only. Every mutation is written to the audit trail.
"""

from dataclasses import dataclass

from wsp.core.access import compute_permissions, next_viewing_profile_after_delete, sort_for_display
from wsp.db.client import DataClient
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.audit import audit_logger
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.domain.planner_domain import CalendarStartMonth, Company, Profile, Role
from wsp.services.directory_service import Directory
from wsp.services.errors import (
    ConflictError,
    IdentityProviderError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from wsp.services.identity_service import get_identity_client
from wsp.services.view_state_service import StateStore, clear_view_state
from wsp.services.workspace_service import resolve_actor

logger = get_logger(__name__)

ASSIGNABLE_ROLES = {Role.USER, Role.ADMIN}
MIN_PASSWORD_LENGTH = 6


@dataclass
class DeletedUser:
    user_id: str
    next_viewing_user_id: str | None


async def _require_manager(client: DataClient, actor_id: str) -> tuple[Profile, Directory]:
    actor, directory = await resolve_actor(client, actor_id)
    if not compute_permissions(actor, None, directory.profiles).can_manage_users:
        logger.warning("Management access denied", user_id=actor_id, role=actor.role)
        raise PermissionDeniedError("Only superadmins can manage users", user_id=actor_id)
    return actor, directory


# =================================================================
# Companies
# =================================================================


async def list_companies(client: DataClient, actor_id: str) -> list[Company]:
    _, directory = await _require_manager(client, actor_id)
    return sorted(directory.companies, key=lambda c: c.name.lower())


async def list_users(client: DataClient, actor_id: str) -> list[Profile]:
    """Every profile except superadmins, admins first."""
    _, directory = await _require_manager(client, actor_id)
    return sort_for_display(p for p in directory.profiles if p.role != Role.SUPERADMIN)


async def add_company(
    client: DataClient,
    actor_id: str,
    name: str,
    start_month: CalendarStartMonth = CalendarStartMonth.APRIL,
    request_id: str | None = None,
) -> Company:
    _, directory = await _require_manager(client, actor_id)

    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Company name cannot be empty", user_id=actor_id)
    if any(c.name.lower() == cleaned.lower() for c in directory.companies):
        raise ConflictError(f"A company named '{cleaned}' already exists", user_id=actor_id)

    row = await (
        client.table("companies")
        .insert({"name": cleaned, "calendar_start_month": CalendarStartMonth(start_month).value})
        .single()
    )
    company = Company.model_validate(row)

    await audit_logger.log(
        client,
        user_id=actor_id,
        action="company_created",
        resource_type="company",
        resource_id=company.id,
        request_id=request_id,
        metadata={"name": company.name, "calendar_start_month": company.calendar_start_month.value},
    )
    logger.info("Company created", user_id=actor_id, company_id=company.id)
    return company


async def delete_company(
    client: DataClient, actor_id: str, company_id: str, request_id: str | None = None
) -> None:
    _, directory = await _require_manager(client, actor_id)

    company = directory.company(company_id)
    if company is None:
        raise NotFoundError("Company not found", user_id=actor_id)

    members = [p for p in directory.profiles if p.company_id == company_id]
    if members:
        raise ConflictError(
            f"Cannot delete '{company.name}': {len(members)} user(s) are still assigned to it",
            user_id=actor_id,
        )

    await client.table("companies").delete().eq("id", company_id).execute()

    await audit_logger.log(
        client,
        user_id=actor_id,
        action="company_deleted",
        resource_type="company",
        resource_id=company_id,
        request_id=request_id,
        metadata={"name": company.name},
    )
    logger.info("Company deleted", user_id=actor_id, company_id=company_id)


# =================================================================
# Users
# =================================================================


def _check_role(role: Role | str, actor_id: str) -> Role:
    try:
        parsed = Role(role)
    except ValueError:
        raise ValidationError(f"Unknown role: {role}", user_id=actor_id) from None
    if parsed not in ASSIGNABLE_ROLES:
        raise ValidationError("Role must be user or admin", user_id=actor_id)
    return parsed


def _check_company(directory: Directory, company_id: str | None, actor_id: str) -> str | None:
    if company_id and directory.company(company_id) is None:
        raise ValidationError("Company does not exist", user_id=actor_id)
    return company_id or None


async def update_profile(
    client: DataClient,
    actor_id: str,
    profile_id: str,
    role: Role | str | None = None,
    company_id: str | None = None,
    clear_company: bool = False,
    request_id: str | None = None,
) -> Profile:
    """
    Change a profile's role and/or company.

    Args:
        clear_company: Unassign the profile from any company
    """
    _, directory = await _require_manager(client, actor_id)

    target = directory.profile(profile_id)
    if target is None:
        raise NotFoundError("User not found", user_id=actor_id)
    if target.role == Role.SUPERADMIN:
        raise PermissionDeniedError("Superadmin profiles cannot be changed", user_id=actor_id)

    changes: dict = {}
    if role is not None:
        changes["role"] = _check_role(role, actor_id).value
    if clear_company:
        changes["company_id"] = None
    elif company_id is not None:
        changes["company_id"] = _check_company(directory, company_id, actor_id)
    if not changes:
        raise ValidationError("No changes supplied", user_id=actor_id)

    row = await client.table("profiles").update(changes).eq("id", profile_id).single()
    profile = Profile.model_validate(row)

    await audit_logger.log(
        client,
        user_id=actor_id,
        action="profile_updated",
        resource_type="profile",
        resource_id=profile_id,
        request_id=request_id,
        metadata={
            "before": {"role": target.role.value, "company_id": target.company_id},
            "after": {"role": profile.role.value, "company_id": profile.company_id},
        },
    )
    logger.info("Profile updated", user_id=actor_id, profile_id=profile_id, fields=sorted(changes))
    return profile


async def create_user(
    client: DataClient,
    actor_id: str,
    name: str,
    email: str,
    password: str,
    role: Role | str = Role.USER,
    company_id: str | None = None,
    request_id: str | None = None,
) -> Profile:
    """
    Create the auth identity, then the profile row.

    If the profile insert fails the new identity is removed again so no
    orphaned login is left behind.
    """
    _, directory = await _require_manager(client, actor_id)

    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email:
        raise ValidationError("Name and email are required", user_id=actor_id)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", user_id=actor_id
        )
    if any(p.email.lower() == email for p in directory.profiles):
        raise ConflictError("A user with this email already exists", user_id=actor_id)

    parsed_role = _check_role(role, actor_id)
    company_id = _check_company(directory, company_id, actor_id)

    identity = get_identity_client()
    new_id = await identity.create_identity(email, password)

    try:
        row = await (
            client.table("profiles")
            .insert(
                {
                    "id": new_id,
                    "name": name,
                    "email": email,
                    "role": parsed_role.value,
                    "company_id": company_id,
                }
            )
            .single()
        )
    except DatabaseError as e:
        logger.error("Profile insert failed after identity creation", user_id=actor_id, new_user_id=new_id, error=str(e))
        try:
            await identity.delete_identity(new_id)
        except IdentityProviderError as cleanup_error:
            logger.error("Orphaned auth identity left behind", new_user_id=new_id, error=str(cleanup_error))
            raise IdentityProviderError(
                f"User profile could not be created and auth identity {new_id} must be removed manually",
                user_id=actor_id,
                recoverable=False,
            ) from e
        raise

    profile = Profile.model_validate(row)
    await audit_logger.log(
        client,
        user_id=actor_id,
        action="user_created",
        resource_type="profile",
        resource_id=profile.id,
        request_id=request_id,
        metadata={"email": profile.email, "role": profile.role.value, "company_id": profile.company_id},
    )
    logger.info("User created", user_id=actor_id, new_user_id=profile.id, role=profile.role.value)
    return profile


async def delete_user(
    client: DataClient,
    actor_id: str,
    profile_id: str,
    viewing_user_id: str | None = None,
    request_id: str | None = None,
    state_store: StateStore | None = None,
) -> DeletedUser:
    """
    Remove an account and everything it owns.

    Order: tasks, unplanned tasks, focus note, profile, then the auth identity.
    Any saved view state of the account is dropped as well.

    Returns:
        The deleted id and the board the caller should switch to
    """
    _, directory = await _require_manager(client, actor_id)

    target = directory.profile(profile_id)
    if target is None:
        raise NotFoundError("User not found", user_id=actor_id)
    if target.id == actor_id or target.role == Role.SUPERADMIN:
        raise PermissionDeniedError("Superadmin accounts cannot be deleted here", user_id=actor_id)

    for table in ("tasks", "unplanned_tasks", "focus_notes"):
        await client.table(table).delete().eq("user_id", profile_id).execute()
    await client.table("profiles").delete().eq("id", profile_id).execute()

    await get_identity_client().delete_identity(profile_id)
    await clear_view_state(profile_id, store=state_store)

    await audit_logger.log(
        client,
        user_id=actor_id,
        action="user_deleted",
        resource_type="profile",
        resource_id=profile_id,
        request_id=request_id,
        metadata={"email": target.email},
    )
    logger.info("User deleted", user_id=actor_id, deleted_user_id=profile_id)

    remaining = [p for p in directory.profiles if p.id != profile_id]
    return DeletedUser(
        user_id=profile_id,
        next_viewing_user_id=next_viewing_profile_after_delete(remaining, profile_id, viewing_user_id),
    )
