import pytest

from wsp.db.client import DataClient
from wsp.db.helpers import DatabaseError
from wsp.models.domain.planner_domain import Day, TaskStatus
from wsp.services import task_service
from wsp.services.errors import NotFoundError, PermissionDeniedError, ValidationError


class FailingExecutor:
    """Delegates to a real executor but fails one action on one table."""

    def __init__(self, inner, action: str, table: str):
        self.inner = inner
        self.action = action
        self.table = table

    async def run(self, spec):
        if spec.action == self.action and spec.table.name == self.table:
            raise DatabaseError(f"{self.action} failed", operation=self.action)
        return await self.inner.run(spec)


class TestListTasks:
    @pytest.mark.asyncio
    async def test_owner_lists_own_tasks_sorted(self, data_client):
        tasks = await task_service.list_tasks(data_client, "user-001", "user-001")

        assert [t.id for t in tasks] == ["task-001", "task-002", "task-009"]

    @pytest.mark.asyncio
    async def test_week_range_and_status_filters(self, data_client):
        week_ten = await task_service.list_tasks(data_client, "user-001", "user-001", 10, 10)
        complete = await task_service.list_tasks(
            data_client, "user-001", "user-001", status=TaskStatus.COMPLETE
        )

        assert [t.id for t in week_ten] == ["task-001", "task-002"]
        assert [t.id for t in complete] == ["task-001"]

    @pytest.mark.asyncio
    async def test_admin_reads_same_company_board(self, data_client):
        tasks = await task_service.list_tasks(data_client, "admin-001", "user-001")

        assert len(tasks) == 3

    @pytest.mark.asyncio
    async def test_admin_cannot_read_other_company(self, data_client):
        with pytest.raises(PermissionDeniedError):
            await task_service.list_tasks(data_client, "admin-001", "user-003")

    @pytest.mark.asyncio
    async def test_user_cannot_read_colleague(self, data_client):
        with pytest.raises(PermissionDeniedError):
            await task_service.list_tasks(data_client, "user-001", "user-002")

    @pytest.mark.asyncio
    async def test_unknown_actor(self, data_client):
        with pytest.raises(NotFoundError):
            await task_service.list_tasks(data_client, "ghost", "user-001")


class TestAddTask:
    @pytest.mark.asyncio
    async def test_owner_adds_with_defaults(self, data_client):
        task = await task_service.add_task(data_client, "user-001", "user-001", 12, Day.MONDAY, "  Write tests ")

        assert task.text == "Write tests"
        assert task.status is TaskStatus.INCOMPLETE
        assert task.time_taken == 0
        assert task.is_priority is False
        assert task.week_number == 12

    @pytest.mark.asyncio
    async def test_admin_assigns_to_subordinate(self, data_client):
        task = await task_service.add_task(data_client, "admin-001", "user-002", 5, Day.FRIDAY, "Assigned")

        assert task.user_id == "user-002"

    @pytest.mark.asyncio
    async def test_superadmin_adds_anywhere(self, data_client):
        task = await task_service.add_task(data_client, "superadmin-001", "user-004", 5, Day.FRIDAY, "Assigned")

        assert task.user_id == "user-004"

    @pytest.mark.asyncio
    async def test_user_cannot_add_to_colleague(self, data_client):
        with pytest.raises(PermissionDeniedError):
            await task_service.add_task(data_client, "user-001", "user-002", 5, Day.FRIDAY, "Nope")

    @pytest.mark.asyncio
    async def test_admin_cannot_add_across_companies(self, data_client):
        with pytest.raises(PermissionDeniedError):
            await task_service.add_task(data_client, "admin-002", "user-001", 5, Day.FRIDAY, "Nope")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("week", [0, 53])
    async def test_week_out_of_range(self, data_client, week):
        with pytest.raises(ValidationError):
            await task_service.add_task(data_client, "user-001", "user-001", week, Day.MONDAY, "x")

    @pytest.mark.asyncio
    async def test_blank_text_rejected(self, data_client):
        with pytest.raises(ValidationError):
            await task_service.add_task(data_client, "user-001", "user-001", 1, Day.MONDAY, "   ")

    @pytest.mark.asyncio
    async def test_insert_failure_stores_nothing(self, data_client):
        client = DataClient(FailingExecutor(data_client.executor, "insert", "tasks"), backend="local")

        with pytest.raises(DatabaseError):
            await task_service.add_task(client, "user-001", "user-001", 1, Day.MONDAY, "New")

        assert await task_service.list_tasks(data_client, "user-001", "user-001", 1, 1) == []


class TestEditTask:
    @pytest.mark.asyncio
    async def test_owner_updates(self, data_client):
        task = await task_service.update_task(
            data_client, "user-001", "task-002", {"status": TaskStatus.COMPLETE, "time_taken": 95, "text": None}
        )

        assert task.status is TaskStatus.COMPLETE
        assert task.time_taken == 95
        assert task.text == "Prepare presentation for the client meeting."

    @pytest.mark.asyncio
    async def test_admin_cannot_edit_subordinate_task(self, data_client):
        with pytest.raises(PermissionDeniedError):
            await task_service.update_task(data_client, "admin-001", "task-002", {"is_priority": True})

    @pytest.mark.asyncio
    async def test_superadmin_cannot_delete_others_task(self, data_client):
        with pytest.raises(PermissionDeniedError):
            await task_service.delete_task(data_client, "superadmin-001", "task-001")

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, data_client):
        with pytest.raises(ValidationError):
            await task_service.update_task(data_client, "user-001", "task-002", {"user_id": "user-002"})

    @pytest.mark.asyncio
    async def test_owner_deletes(self, data_client):
        await task_service.delete_task(data_client, "user-001", "task-001")

        with pytest.raises(NotFoundError):
            await task_service.delete_task(data_client, "user-001", "task-001")


class TestUnplanned:
    @pytest.mark.asyncio
    async def test_backlog_is_private(self, data_client):
        own = await task_service.list_unplanned(data_client, "user-001")

        assert [t.id for t in own] == ["unplanned-001"]
        with pytest.raises(NotFoundError):
            await task_service.delete_unplanned(data_client, "user-001", "unplanned-002")

    @pytest.mark.asyncio
    async def test_newest_first(self, data_client):
        added = await task_service.add_unplanned(data_client, "user-001", "Later")

        backlog = await task_service.list_unplanned(data_client, "user-001")

        assert backlog[0].id == added.id

    @pytest.mark.asyncio
    async def test_update_unplanned(self, data_client):
        item = await task_service.update_unplanned(data_client, "user-001", "unplanned-001", {"is_priority": True})

        assert item.is_priority is True

    @pytest.mark.asyncio
    async def test_plan_moves_item_to_board(self, data_client):
        task = await task_service.plan_unplanned(data_client, "user-003", "unplanned-002", 20, Day.THURSDAY)

        assert task.week_number == 20
        assert task.day is Day.THURSDAY
        assert task.text == "Book the team offsite venue."
        assert task.is_priority is True
        assert await task_service.list_unplanned(data_client, "user-003") == []

    @pytest.mark.asyncio
    async def test_plan_rejects_bad_week_without_side_effects(self, data_client):
        with pytest.raises(ValidationError):
            await task_service.plan_unplanned(data_client, "user-001", "unplanned-001", 60, Day.MONDAY)

        assert len(await task_service.list_unplanned(data_client, "user-001")) == 1

    @pytest.mark.asyncio
    async def test_plan_compensates_when_delete_fails(self, data_client):
        client = DataClient(FailingExecutor(data_client.executor, "delete", "unplanned_tasks"), backend="local")

        with pytest.raises(DatabaseError):
            await task_service.plan_unplanned(client, "user-001", "unplanned-001", 4, Day.MONDAY)

        assert await task_service.list_tasks(data_client, "user-001", "user-001", 4, 4) == []
        assert len(await task_service.list_unplanned(data_client, "user-001")) == 1

    @pytest.mark.asyncio
    async def test_plan_insert_failure_keeps_backlog_item(self, data_client):
        client = DataClient(FailingExecutor(data_client.executor, "insert", "tasks"), backend="local")

        with pytest.raises(DatabaseError):
            await task_service.plan_unplanned(client, "user-001", "unplanned-001", 4, Day.MONDAY)

        assert [t.id for t in await task_service.list_unplanned(data_client, "user-001")] == ["unplanned-001"]
