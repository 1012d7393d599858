from datetime import date

import pytest

from wsp.models.domain.planner_domain import CalendarStartMonth
from wsp.services.errors import NotFoundError, PermissionDeniedError
from wsp.services.workspace_service import get_workspace_context

TODAY = date(2025, 6, 2)


@pytest.mark.asyncio
async def test_user_lands_on_own_board(data_client):
    context = await get_workspace_context(data_client, "user-001", today=TODAY)

    assert context.viewing_user.id == "user-001"
    assert context.permissions.can_edit_tasks is True
    assert [p.id for p in context.permissions.viewable_users] == ["user-001"]


@pytest.mark.asyncio
async def test_superadmin_lands_on_first_profile_by_name(data_client):
    context = await get_workspace_context(data_client, "superadmin-001", today=TODAY)

    assert context.viewing_user.id == "admin-001"
    assert context.permissions.can_add_task is True
    assert context.permissions.can_edit_tasks is False
    assert context.permissions.can_manage_users is True


@pytest.mark.asyncio
async def test_week_follows_viewed_company_calendar(data_client):
    own = await get_workspace_context(data_client, "superadmin-001", "user-001", today=TODAY)
    other = await get_workspace_context(data_client, "superadmin-001", "user-003", today=TODAY)

    assert own.calendar.start_month is CalendarStartMonth.APRIL
    assert own.calendar.fiscal_year_start == date(2025, 4, 7)
    assert own.calendar.week_number == 9
    assert other.calendar.start_month is CalendarStartMonth.JANUARY
    assert other.calendar.fiscal_year_start == date(2025, 1, 6)
    assert other.calendar.week_number == 22


@pytest.mark.asyncio
async def test_unassigned_profile_uses_default_calendar(data_client):
    context = await get_workspace_context(data_client, "user-004", today=TODAY)

    assert context.calendar.start_month is CalendarStartMonth.APRIL


@pytest.mark.asyncio
async def test_admin_blocked_from_other_company(data_client):
    with pytest.raises(PermissionDeniedError):
        await get_workspace_context(data_client, "admin-001", "user-003", today=TODAY)


@pytest.mark.asyncio
async def test_unknown_profiles(data_client):
    with pytest.raises(NotFoundError):
        await get_workspace_context(data_client, "ghost", today=TODAY)
    with pytest.raises(NotFoundError):
        await get_workspace_context(data_client, "superadmin-001", "ghost", today=TODAY)
