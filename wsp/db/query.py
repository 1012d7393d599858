"""
Chainable table query builder.

Mirrors the shape of the hosted data client used by the planner front end:

    rows = await client.table("tasks").select().eq("user_id", uid).order("week_number").execute()
    row = await client.table("focus_notes").upsert(note, on_conflict="user_id").single()

The builder only records a QuerySpec; an executor (Postgres or the local
JSON store) turns it into rows.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from wsp.db.helpers import DatabaseError
from wsp.db.schema import TableSchema, check_columns, get_table

Action = Literal["select", "insert", "update", "delete", "upsert"]
Operator = Literal["eq", "neq", "gte", "lte", "in"]


@dataclass(frozen=True)
class Filter:
    column: str
    op: Operator
    value: Any


@dataclass
class QuerySpec:
    table: TableSchema
    action: Action = "select"
    values: list[dict[str, Any]] = field(default_factory=list)
    filters: list[Filter] = field(default_factory=list)
    order_by: list[tuple[str, bool]] = field(default_factory=list)
    limit: int | None = None
    on_conflict: str | None = None


class Executor(Protocol):
    async def run(self, spec: QuerySpec) -> list[dict[str, Any]]: ...


class TableQuery:
    def __init__(self, executor: Executor, table_name: str):
        self._executor = executor
        self._spec = QuerySpec(table=get_table(table_name))

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    # actions

    def select(self) -> "TableQuery":
        self._spec.action = "select"
        return self

    def insert(self, values: dict[str, Any] | list[dict[str, Any]]) -> "TableQuery":
        return self._write("insert", values)

    def upsert(
        self, values: dict[str, Any] | list[dict[str, Any]], on_conflict: str | None = None
    ) -> "TableQuery":
        self._write("upsert", values)
        conflict = on_conflict or self._spec.table.primary_key
        check_columns(self._spec.table, [conflict])
        self._spec.on_conflict = conflict
        return self

    def update(self, values: dict[str, Any]) -> "TableQuery":
        return self._write("update", values)

    def delete(self) -> "TableQuery":
        self._spec.action = "delete"
        return self

    def _write(self, action: Action, values) -> "TableQuery":
        rows = [values] if isinstance(values, dict) else list(values)
        if not rows or any(not row for row in rows):
            raise DatabaseError(f"{action} requires values", operation=action, recoverable=False)
        for row in rows:
            check_columns(self._spec.table, row.keys())
        self._spec.action = action
        self._spec.values = [dict(row) for row in rows]
        return self

    # filters

    def _filter(self, column: str, op: Operator, value: Any) -> "TableQuery":
        check_columns(self._spec.table, [column])
        self._spec.filters.append(Filter(column, op, value))
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "neq", value)

    def gte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "gte", value)

    def lte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "lte", value)

    def in_(self, column: str, values) -> "TableQuery":
        return self._filter(column, "in", list(values))

    # modifiers

    def order(self, column: str, desc: bool = False) -> "TableQuery":
        check_columns(self._spec.table, [column])
        self._spec.order_by.append((column, desc))
        return self

    def limit(self, count: int) -> "TableQuery":
        self._spec.limit = max(0, int(count))
        return self

    # terminals

    async def execute(self) -> list[dict[str, Any]]:
        if self._spec.action in ("update", "delete") and not self._spec.filters:
            # Unfiltered update/delete would touch every tenant's rows
            raise DatabaseError(
                f"{self._spec.action} on {self._spec.table.name} requires a filter",
                operation=self._spec.action,
                recoverable=False,
            )
        return await self._executor.run(self._spec)

    async def maybe_single(self) -> dict[str, Any] | None:
        rows = await self.execute()
        if len(rows) > 1:
            raise DatabaseError(
                f"Expected at most one row from {self._spec.table.name}, got {len(rows)}",
                operation="maybe_single",
                recoverable=False,
            )
        return rows[0] if rows else None

    async def single(self) -> dict[str, Any]:
        row = await self.maybe_single()
        if row is None:
            raise DatabaseError(
                f"Expected one row from {self._spec.table.name}, got none",
                operation="single",
                recoverable=False,
            )
        return row
