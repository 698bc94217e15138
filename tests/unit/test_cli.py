from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from hr_automation.directory.models import Tenant
from hr_automation.events.bus import EventRecord
from hr_automation.main import build_parser, main
from hr_automation.storage import JsonDatabase


@pytest.fixture
def data_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    path = tmp_path / "hr.json"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HR_AUTOMATION_DATA_PATH", str(path))
    monkeypatch.setenv("HR_AUTOMATION_MAIL_PROVIDER", "log")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    # main() reconfigures the root logger; put it back afterwards.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield path
    root.handlers[:] = handlers
    root.setLevel(level)


def _tenant_id(path: Path) -> str:
    [tenant] = JsonDatabase(path).read().all("tenants", Tenant)
    return tenant.id


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_bootstrap_then_list_workflows(data_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["bootstrap-tenant", "--name", "Acme", "--admin-email", "a@acme.test"]) == 0
    assert "Created tenant" in capsys.readouterr().out

    tenant_id = _tenant_id(data_path)
    assert main(["list-workflows", "--tenant", tenant_id]) == 0
    assert "0 workflow(s)" in capsys.readouterr().out


def test_emit_event(data_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["bootstrap-tenant", "--name", "Acme", "--admin-email", "a@acme.test"])
    tenant_id = _tenant_id(data_path)
    capsys.readouterr()

    code = main(
        [
            "emit-event",
            "--tenant",
            tenant_id,
            "--name",
            "employee.hired",
            "--data",
            json.dumps(
                {"employee_id": "emp-1", "employee_name": "Kofi Mensah", "hire_date": "2026-01-15"}
            ),
        ]
    )

    assert code == 0
    assert "Published employee.hired" in capsys.readouterr().out


def test_emit_event_rejects_bad_json(data_path: Path) -> None:
    assert main(["emit-event", "--tenant", "t", "--name", "x", "--data", "{"]) == 2


def test_emit_unknown_event_is_a_domain_error(data_path: Path) -> None:
    assert main(["emit-event", "--tenant", "t", "--name", "coffee.brewed"]) == 3


def test_emit_custom_payroll_event_is_rejected(data_path: Path) -> None:
    main(["bootstrap-tenant", "--name", "Acme", "--admin-email", "a@acme.test"])
    tenant_id = _tenant_id(data_path)

    assert main(["emit-event", "--tenant", tenant_id, "--name", "payroll.closing"]) == 3
    assert JsonDatabase(data_path).read().all("event_log", EventRecord) == []


def test_expire_invitations(data_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["expire-invitations"]) == 0
    assert "Expired 0 invitation(s)" in capsys.readouterr().out
