"""
Table registry for the planner tables.

The query builder only accepts table and column names listed here, so
identifiers never come from request data.
"""

from dataclasses import dataclass

from wsp.db.helpers import DatabaseError


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: frozenset[str]
    primary_key: str = "id"
    generated_id: bool = True


TABLES: dict[str, TableSchema] = {
    "companies": TableSchema(
        name="companies",
        columns=frozenset({"id", "name", "calendar_start_month", "created_at"}),
    ),
    "profiles": TableSchema(
        name="profiles",
        columns=frozenset({"id", "name", "email", "role", "company_id", "created_at"}),
        generated_id=False,
    ),
    "tasks": TableSchema(
        name="tasks",
        columns=frozenset(
            {
                "id",
                "user_id",
                "week_number",
                "day",
                "text",
                "status",
                "time_taken",
                "is_priority",
                "created_at",
            }
        ),
    ),
    "unplanned_tasks": TableSchema(
        name="unplanned_tasks",
        columns=frozenset(
            {"id", "user_id", "text", "status", "time_taken", "is_priority", "created_at"}
        ),
    ),
    "focus_notes": TableSchema(
        name="focus_notes",
        columns=frozenset({"user_id", "focus_text", "pointers_text", "created_at", "updated_at"}),
        primary_key="user_id",
        generated_id=False,
    ),
    "audit_logs": TableSchema(
        name="audit_logs",
        columns=frozenset(
            {
                "id",
                "user_id",
                "action",
                "resource_type",
                "resource_id",
                "ip_address",
                "user_agent",
                "request_id",
                "metadata",
                "created_at",
            }
        ),
    ),
}


def get_table(name: str) -> TableSchema:
    try:
        return TABLES[name]
    except KeyError:
        raise DatabaseError(f"Unknown table: {name}", operation="schema", recoverable=False) from None


def check_columns(table: TableSchema, columns) -> None:
    unknown = sorted(set(columns) - table.columns)
    if unknown:
        raise DatabaseError(
            f"Unknown column(s) for {table.name}: {', '.join(unknown)}",
            operation="schema",
            recoverable=False,
        )
