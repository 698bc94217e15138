"""JSON-file backed record store.

All tables live in a single JSON document so that a transaction covering
several tables (invitation acceptance touches invitations, memberships and
users) is written in one go.

A transaction loads the tables under the lock, yields them for mutation and
persists them only if the block completes. An exception discards every change
made inside the block.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

TABLES: tuple[str, ...] = (
    "tenants",
    "users",
    "memberships",
    "employees",
    "workflows",
    "workflow_executions",
    "alerts",
    "invitations",
    "event_log",
)

Row = dict[str, object]
ModelT = TypeVar("ModelT", bound=BaseModel)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def new_id() -> str:
    return str(uuid.uuid4())


class Tables:
    """Mutable view over the loaded tables, used inside a transaction."""

    def __init__(self, data: dict[str, list[Row]]) -> None:
        self._data = data

    def rows(self, table: str) -> list[Row]:
        if table not in TABLES:
            raise KeyError(f"Unknown table: {table}")
        return self._data.setdefault(table, [])

    def all(self, table: str, model: type[ModelT]) -> list[ModelT]:
        return [model.model_validate(row) for row in self.rows(table)]

    def get(self, table: str, model: type[ModelT], row_id: str) -> ModelT | None:
        for row in self.rows(table):
            if row.get("id") == row_id:
                return model.model_validate(row)
        return None

    def find(self, table: str, model: type[ModelT], **match: object) -> list[ModelT]:
        out: list[ModelT] = []
        for row in self.rows(table):
            if all(row.get(key) == value for key, value in match.items()):
                out.append(model.model_validate(row))
        return out

    def first(self, table: str, model: type[ModelT], **match: object) -> ModelT | None:
        found = self.find(table, model, **match)
        return found[0] if found else None

    def insert(self, table: str, record: BaseModel) -> None:
        self.rows(table).append(record.model_dump(mode="json"))

    def upsert(self, table: str, record: BaseModel) -> None:
        payload = record.model_dump(mode="json")
        rows = self.rows(table)
        for idx, row in enumerate(rows):
            if row.get("id") == payload.get("id"):
                rows[idx] = payload
                return
        rows.append(payload)

    def delete(self, table: str, row_id: str) -> bool:
        rows = self.rows(table)
        kept = [row for row in rows if row.get("id") != row_id]
        removed = len(kept) != len(rows)
        rows[:] = kept
        return removed


class JsonDatabase:
    """Single-file JSON database with atomic, serialized transactions."""

    def __init__(self, path: Path) -> None:
        self._path = path
        # Re-entrant: a service may open a transaction while an outer one is active.
        self._lock = threading.RLock()
        self._active: Tables | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load_unlocked(self) -> dict[str, list[Row]]:
        empty: dict[str, list[Row]] = {name: [] for name in TABLES}
        if not self._path.exists():
            return empty
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(
                "Database file is not valid JSON; treating as empty",
                extra={"path": str(self._path)},
            )
            return empty
        if not isinstance(raw, dict):
            logger.warning(
                "Database file has unexpected shape; treating as empty",
                extra={"path": str(self._path)},
            )
            return empty
        for name in TABLES:
            value = raw.get(name)
            if isinstance(value, list):
                empty[name] = [row for row in value if isinstance(row, dict)]
        return empty

    def _save_unlocked(self, data: dict[str, list[Row]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        os.replace(tmp, self._path)

    @contextmanager
    def transaction(self) -> Iterator[Tables]:
        with self._lock:
            if self._active is not None:
                # Nested: join the outer transaction; it owns commit/rollback.
                yield self._active
                return

            data = self._load_unlocked()
            working = Tables(copy.deepcopy(data))
            self._active = working
            try:
                yield working
            finally:
                self._active = None
            self._save_unlocked(working._data)

    def read(self) -> Tables:
        """Return a detached snapshot for read-only queries."""

        with self._lock:
            if self._active is not None:
                return Tables(copy.deepcopy(self._active._data))
            return Tables(self._load_unlocked())
