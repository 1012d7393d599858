import pytest

from wsp.core.pending import InvalidTransitionError, MutationState, PendingMutation


def test_mutation_commits_once():
    mutation = PendingMutation(provisional={"text": "draft"})

    assert mutation.state is MutationState.PENDING
    assert not mutation.settled

    result = mutation.commit({"id": "task-1", "text": "draft"})

    assert result["id"] == "task-1"
    assert mutation.result == result
    assert mutation.state is MutationState.COMMITTED
    assert mutation.settled
    with pytest.raises(InvalidTransitionError):
        mutation.rollback("late failure")


def test_mutation_rolls_back_once():
    mutation = PendingMutation(provisional={"text": "draft"})
    mutation.rollback("network down")

    assert mutation.state is MutationState.ROLLED_BACK
    assert mutation.error == "network down"
    with pytest.raises(InvalidTransitionError) as exc_info:
        mutation.commit({"id": "task-1"})
    assert exc_info.value.state is MutationState.ROLLED_BACK
    assert exc_info.value.target is MutationState.COMMITTED


def test_mutation_ids_are_unique_placeholders():
    first = PendingMutation(provisional={})
    second = PendingMutation(provisional={})

    assert first.mutation_id.startswith("pending-")
    assert first.mutation_id != second.mutation_id


@pytest.mark.asyncio
async def test_abort_undoes_applied_steps_newest_first():
    undone = []

    async def undo(name):
        undone.append(name)

    mutation = PendingMutation(provisional={"text": "draft"}, operation="plan")
    mutation.on_rollback(lambda: undo("insert task"))
    mutation.on_rollback(lambda: undo("move attachment"))

    await mutation.abort("delete failed")

    assert undone == ["move attachment", "insert task"]
    assert mutation.state is MutationState.ROLLED_BACK
    assert mutation.error == "delete failed"
    assert mutation.compensations == []


@pytest.mark.asyncio
async def test_abort_after_commit_is_rejected_and_runs_nothing():
    undone = []

    async def undo():
        undone.append("insert")

    mutation = PendingMutation(provisional={})
    mutation.on_rollback(undo)
    mutation.commit({"id": "task-1"})

    with pytest.raises(InvalidTransitionError):
        await mutation.abort("too late")
    assert undone == []


@pytest.mark.asyncio
async def test_failing_compensation_propagates_after_state_change():
    async def broken():
        raise RuntimeError("cleanup failed")

    mutation = PendingMutation(provisional={})
    mutation.on_rollback(broken)

    with pytest.raises(RuntimeError):
        await mutation.abort("second step failed")
    assert mutation.state is MutationState.ROLLED_BACK


def test_no_steps_registered_after_settling():
    mutation = PendingMutation(provisional={})
    mutation.rollback()

    async def undo():
        return None

    with pytest.raises(InvalidTransitionError):
        mutation.on_rollback(undo)
