from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from hr_automation.directory.models import Tenant
from hr_automation.storage import JsonDatabase


def _tenant(tenant_id: str, name: str = "Acme") -> Tenant:
    return Tenant(id=tenant_id, name=name, created_at=datetime(2026, 1, 1, tzinfo=UTC))


def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    db = JsonDatabase(tmp_path / "db.json")
    assert db.read().all("tenants", Tenant) == []


def test_transaction_commits(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "db.json"
    db = JsonDatabase(path)

    with db.transaction() as tables:
        tables.insert("tenants", _tenant("t1"))

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["tenants"][0]["id"] == "t1"
    assert db.read().get("tenants", Tenant, "t1") is not None


def test_transaction_rolls_back_on_error(tmp_path: Path) -> None:
    db = JsonDatabase(tmp_path / "db.json")
    with db.transaction() as tables:
        tables.insert("tenants", _tenant("t1"))

    with pytest.raises(RuntimeError):
        with db.transaction() as tables:
            tables.insert("tenants", _tenant("t2"))
            tables.delete("tenants", "t1")
            raise RuntimeError("boom")

    ids = [t.id for t in db.read().all("tenants", Tenant)]
    assert ids == ["t1"]


def test_nested_transaction_joins_outer(tmp_path: Path) -> None:
    db = JsonDatabase(tmp_path / "db.json")

    with pytest.raises(RuntimeError):
        with db.transaction() as outer:
            outer.insert("tenants", _tenant("t1"))
            with db.transaction() as inner:
                assert inner is outer
                inner.insert("tenants", _tenant("t2"))
            raise RuntimeError("outer fails")

    assert db.read().all("tenants", Tenant) == []


def test_upsert_replaces_and_find_matches(tmp_path: Path) -> None:
    db = JsonDatabase(tmp_path / "db.json")
    with db.transaction() as tables:
        tables.insert("tenants", _tenant("t1", "Old"))
        tables.upsert("tenants", _tenant("t1", "New"))
        tables.upsert("tenants", _tenant("t2", "Other"))

    tables = db.read()
    assert [t.name for t in tables.find("tenants", Tenant, id="t1")] == ["New"]
    assert tables.first("tenants", Tenant, name="Other") is not None
    assert tables.first("tenants", Tenant, name="Old") is None


def test_corrupt_file_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    path.write_text("{not json", encoding="utf-8")
    db = JsonDatabase(path)
    assert db.read().all("tenants", Tenant) == []


def test_unknown_table_is_rejected(tmp_path: Path) -> None:
    db = JsonDatabase(tmp_path / "db.json")
    with pytest.raises(KeyError):
        db.read().rows("payslips")
