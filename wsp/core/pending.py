"""
Provisional writes.

A multi-step write is tracked as a PendingMutation. It moves exactly once,
Pending -> Committed (the provisional record is replaced by the authoritative
row) or Pending -> RolledBack (every step already applied is undone, newest
first). Concurrent edits of the same row are last-write-wins at the backend;
nothing here merges.

    mutation = PendingMutation(provisional=payload, operation="plan")
    row = await insert(payload)
    mutation.on_rollback(lambda: delete(row["id"]))
    try:
        await second_step()
    except DatabaseError as e:
        await mutation.abort(str(e))
        raise
    mutation.commit(row)
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4

Compensation = Callable[[], Awaitable[Any]]


class MutationState(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class InvalidTransitionError(Exception):
    """Raised when a settled mutation is committed or rolled back again."""

    def __init__(self, mutation_id: str, state: MutationState, target: MutationState):
        super().__init__(f"Mutation {mutation_id} is {state.value}, cannot move to {target.value}")
        self.mutation_id = mutation_id
        self.state = state
        self.target = target


@dataclass
class PendingMutation:
    provisional: dict[str, Any]
    operation: str = "insert"
    mutation_id: str = field(default_factory=lambda: f"pending-{uuid4()}")
    state: MutationState = MutationState.PENDING
    result: dict[str, Any] | None = None
    error: str | None = None
    compensations: list[Compensation] = field(default_factory=list, repr=False)

    @property
    def settled(self) -> bool:
        return self.state is not MutationState.PENDING

    def _move(self, target: MutationState) -> None:
        if self.settled:
            raise InvalidTransitionError(self.mutation_id, self.state, target)
        self.state = target

    def on_rollback(self, step: Compensation) -> None:
        """Register how to undo a step that has already been applied."""
        if self.settled:
            raise InvalidTransitionError(self.mutation_id, self.state, MutationState.ROLLED_BACK)
        self.compensations.append(step)

    def commit(self, authoritative: dict[str, Any]) -> dict[str, Any]:
        self._move(MutationState.COMMITTED)
        self.result = authoritative
        self.compensations.clear()
        return authoritative

    def rollback(self, error: str | None = None) -> None:
        self._move(MutationState.ROLLED_BACK)
        self.error = error

    async def abort(self, error: str | None = None) -> None:
        """
        Roll back and run the registered compensations, newest first.

        The state is RolledBack before any compensation runs; a failing
        compensation propagates and leaves the remaining ones unrun.
        """
        self.rollback(error)
        steps, self.compensations = list(reversed(self.compensations)), []
        for step in steps:
            await step()
