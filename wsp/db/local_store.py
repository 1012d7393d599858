"""
JSON-file executor for offline development.

Emulates the hosted tables closely enough for the planner to run without a
database: generated ids and created_at on insert, updated_at on upsert,
focus notes keyed by user_id. The whole store lives in one JSON document and
is seeded with demo data the first time it is opened.
"""

import json
import os
import tempfile
import threading
from copy import deepcopy
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import uuid4

from wsp.db.helpers import DatabaseError
from wsp.db.query import Filter, QuerySpec
from wsp.db.schema import TABLES
from wsp.db.seed import seed_tables
from wsp.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _matches(row: dict[str, Any], f: Filter) -> bool:
    value = row.get(f.column)
    target = _plain(f.value)
    if f.op == "eq":
        return value == target
    if f.op == "neq":
        return value != target
    if f.op == "in":
        return value in [_plain(v) for v in target]
    if value is None or target is None:
        return False
    if f.op == "gte":
        return value >= target
    return value <= target


class LocalExecutor:
    """
    Runs query specs against an in-process copy of the tables.

    Args:
        path: JSON file to persist to; None keeps everything in memory
        seed: Seed demo rows when the file does not exist yet
    """

    def __init__(self, path: str | Path | None = None, seed: bool = True):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._tables = self._load(seed)

    def _load(self, seed: bool) -> dict[str, list[dict[str, Any]]]:
        if self.path and self.path.exists():
            try:
                with open(self.path, encoding="utf-8") as handle:
                    stored = json.load(handle)
            except (OSError, json.JSONDecodeError) as e:
                raise DatabaseError(
                    f"Local store at {self.path} is unreadable: {e}",
                    operation="load",
                    recoverable=False,
                ) from e
            tables = {name: list(stored.get(name, [])) for name in TABLES}
            logger.info("Local store loaded", path=str(self.path))
            return tables

        tables = seed_tables() if seed else {name: [] for name in TABLES}
        if seed:
            logger.info("Seeding local store with demo data", path=str(self.path) if self.path else None)
        if self.path:
            self._write(tables)
        return tables

    def _write(self, tables: dict[str, list[dict[str, Any]]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".wsp-store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(tables, handle, indent=2, default=str)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise DatabaseError(f"Could not write local store: {e}", operation="write") from e

    def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        with self._lock:
            return deepcopy(self._tables)

    async def run(self, spec: QuerySpec) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._tables[spec.table.name]
            handler = getattr(self, f"_{spec.action}")
            result, changed = handler(spec, rows)
            if changed and self.path:
                self._write(self._tables)
            return deepcopy(result)

    def _filtered(self, spec: QuerySpec, rows):
        return [row for row in rows if all(_matches(row, f) for f in spec.filters)]

    def _select(self, spec: QuerySpec, rows):
        result = self._filtered(spec, rows)
        for column, desc in reversed(spec.order_by):
            present = [r for r in result if r.get(column) is not None]
            missing = [r for r in result if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            # NULLs sort last ascending and first descending, as in Postgres
            result = missing + present if desc else present + missing
        if spec.limit is not None:
            result = result[: spec.limit]
        return result, False

    def _new_row(self, spec: QuerySpec, values: dict[str, Any], rows) -> dict[str, Any]:
        table = spec.table
        row = {key: _plain(value) for key, value in values.items()}
        if table.primary_key not in row or row[table.primary_key] is None:
            if not table.generated_id:
                raise DatabaseError(
                    f"{table.name}.{table.primary_key} is required",
                    operation=spec.action,
                    recoverable=False,
                )
            row[table.primary_key] = str(uuid4())
        if any(r.get(table.primary_key) == row[table.primary_key] for r in rows):
            raise DatabaseError(
                f"Duplicate key {row[table.primary_key]} in {table.name}",
                operation=spec.action,
                recoverable=False,
            )
        if "created_at" in table.columns:
            row.setdefault("created_at", _now())
        return row

    def _insert(self, spec: QuerySpec, rows):
        # Validate the whole batch before touching the table
        created = []
        for values in spec.values:
            created.append(self._new_row(spec, values, rows + created))
        rows.extend(created)
        return created, True

    def _update(self, spec: QuerySpec, rows):
        values = {key: _plain(value) for key, value in spec.values[0].items()}
        updated = []
        for row in self._filtered(spec, rows):
            row.update(values)
            updated.append(row)
        return updated, bool(updated)

    def _delete(self, spec: QuerySpec, rows):
        doomed = self._filtered(spec, rows)
        if doomed:
            doomed_ids = {id(row) for row in doomed}
            rows[:] = [row for row in rows if id(row) not in doomed_ids]
        return doomed, bool(doomed)

    def _upsert(self, spec: QuerySpec, rows):
        key = spec.on_conflict
        result = []
        for values in spec.values:
            existing = next(
                (r for r in rows if values.get(key) is not None and r.get(key) == _plain(values.get(key))),
                None,
            )
            if existing is None:
                row = self._new_row(spec, values, rows)
                rows.append(row)
            else:
                existing.update({k: _plain(v) for k, v in values.items()})
                if "updated_at" in spec.table.columns:
                    existing["updated_at"] = _now()
                row = existing
            result.append(row)
        return result, True
