"""
PostgreSQL executor for the table query builder.
Renders each QuerySpec with psycopg.sql composition and runs it on the pool.
"""

from enum import Enum
from typing import Any
from uuid import UUID

from psycopg import sql
from psycopg.types.json import Jsonb

from wsp.db.helpers import fetch_all, with_db_retry
from wsp.db.pool import db_pool
from wsp.db.query import Filter, QuerySpec
from wsp.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_OPERATORS = {"eq": "=", "neq": "<>", "gte": ">=", "lte": "<="}


def _adapt(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return Jsonb(value)
    return value


def _normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    return {key: str(value) if isinstance(value, UUID) else value for key, value in row.items()}


def _where(filters: list[Filter]) -> tuple[sql.Composable, list[Any]]:
    if not filters:
        return sql.SQL(""), []

    clauses = []
    params: list[Any] = []
    for f in filters:
        column = sql.Identifier(f.column)
        if f.op == "in":
            clauses.append(sql.SQL("{} = ANY(%s)").format(column))
            params.append([_adapt(v) for v in f.value])
        elif f.value is None and f.op in ("eq", "neq"):
            null_test = "IS NULL" if f.op == "eq" else "IS NOT NULL"
            clauses.append(sql.SQL("{} " + null_test).format(column))
        else:
            clauses.append(sql.SQL("{} " + _OPERATORS[f.op] + " %s").format(column))
            params.append(_adapt(f.value))

    return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(clauses), params


def _order_limit(spec: QuerySpec) -> sql.Composable:
    parts = []
    if spec.order_by:
        ordering = [
            sql.SQL("{} {}").format(sql.Identifier(column), sql.SQL("DESC" if desc else "ASC"))
            for column, desc in spec.order_by
        ]
        parts.append(sql.SQL(" ORDER BY ") + sql.SQL(", ").join(ordering))
    if spec.limit is not None:
        parts.append(sql.SQL(" LIMIT {}").format(sql.Literal(spec.limit)))
    return sql.Composed(parts)


def build_statements(spec: QuerySpec) -> list[tuple[sql.Composable, list[Any]]]:
    """Render a spec to one or more (query, params) pairs."""
    table = sql.Identifier(spec.table.name)
    where, where_params = _where(spec.filters)

    if spec.action == "select":
        query = sql.SQL("SELECT * FROM {}").format(table) + where + _order_limit(spec)
        return [(query, where_params)]

    if spec.action == "delete":
        query = sql.SQL("DELETE FROM {}").format(table) + where + sql.SQL(" RETURNING *")
        return [(query, where_params)]

    if spec.action == "update":
        values = spec.values[0]
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in values
        )
        query = (
            sql.SQL("UPDATE {} SET ").format(table)
            + assignments
            + where
            + sql.SQL(" RETURNING *")
        )
        return [(query, [_adapt(v) for v in values.values()] + where_params)]

    statements = []
    for row in spec.values:
        columns = list(row)
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
            table,
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        if spec.action == "upsert":
            updates = [c for c in columns if c != spec.on_conflict] or [spec.on_conflict]
            assignments = [
                sql.SQL("{} = EXCLUDED.{}").format(sql.Identifier(c), sql.Identifier(c))
                for c in updates
            ]
            if "updated_at" in spec.table.columns and "updated_at" not in row:
                assignments.append(sql.SQL("updated_at = NOW()"))
            query += sql.SQL(" ON CONFLICT ({}) DO UPDATE SET ").format(
                sql.Identifier(spec.on_conflict)
            ) + sql.SQL(", ").join(assignments)
        query += sql.SQL(" RETURNING *")
        statements.append((query, [_adapt(row[c]) for c in columns]))
    return statements


class PostgresExecutor:
    """Runs query specs against the hosted database."""

    @with_db_retry(max_retries=3, base_delay=0.1)
    async def run(self, spec: QuerySpec) -> list[dict[str, Any]]:
        statements = build_statements(spec)

        if len(statements) == 1:
            query, params = statements[0]
            rows = await fetch_all(query, params)
        else:
            rows = []
            async with db_pool.transaction() as conn:
                for query, params in statements:
                    rows.extend(await fetch_all(query, params, connection=conn))

        logger.debug(
            "Query executed",
            table=spec.table.name,
            action=spec.action,
            row_count=len(rows),
        )
        return [_normalize_row(row) for row in rows]
