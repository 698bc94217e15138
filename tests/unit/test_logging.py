from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest

from hr_automation.logging import (
    ContextFilter,
    JsonFormatter,
    bound_context,
    configure_logging,
    log_context,
)
from hr_automation.workflow.models import WorkflowAction


@pytest.fixture
def log_stream() -> Iterator[io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(ContextFilter())
    logger = logging.getLogger("hr_automation")
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    yield stream
    logger.removeHandler(handler)
    logger.setLevel(previous)


def _lines(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_formatter_splits_identifiers_from_other_fields() -> None:
    record = logging.LogRecord(
        name="hr_automation.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Invitation created",
        args=(),
        exc_info=None,
    )
    record.invitation_id = "inv-1"
    record.role = "manager"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Invitation created"
    assert payload["level"] == "INFO"
    assert payload["context"] == {"invitation_id": "inv-1"}
    assert payload["extra"] == {"role": "manager"}


def test_log_context_nests_and_resets(log_stream: io.StringIO) -> None:
    logger = logging.getLogger("hr_automation.test")

    with log_context(tenant_id="t1"):
        with log_context(workflow_id="wf-1", event_id=None):
            assert bound_context() == {"tenant_id": "t1", "workflow_id": "wf-1"}
            logger.info("inner")
        logger.info("outer", extra={"tenant_id": "explicit"})
    logger.info("after")

    inner, outer, after = _lines(log_stream)
    assert inner["context"] == {"tenant_id": "t1", "workflow_id": "wf-1"}
    assert outer["context"] == {"tenant_id": "explicit"}
    assert "context" not in after
    assert bound_context() == {}


def test_workflow_logs_carry_tenant_and_workflow(
    services, company, log_stream: io.StringIO
) -> None:
    wf = services.workflows.create(
        company.tenant.id,
        created_by=company.admin.id,
        name="Hire alert",
        trigger_type="employee.hired",
        actions=[WorkflowAction(type="create_alert", config={"title": "Welcome"})],
    )
    services.workflows.activate(company.tenant.id, wf.id)
    log_stream.truncate(0)
    log_stream.seek(0)

    services.directory.hire_employee(company.tenant.id, first_name="Kofi", last_name="Mensah")

    [executed] = [line for line in _lines(log_stream) if line["message"] == "Workflow executed"]
    context = executed["context"]
    assert isinstance(context, dict)
    assert context["tenant_id"] == company.tenant.id
    assert context["workflow_id"] == wf.id
    assert "event_id" in context


def test_configure_logging_installs_one_json_handler() -> None:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    stream = io.StringIO()
    try:
        configure_logging("warning", stream=stream)
        configure_logging("warning", stream=stream)
        assert len(root.handlers) == 1
        with log_context(tenant_id="t1"):
            logging.getLogger("hr_automation.test").warning("careful")
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)

    [line] = _lines(stream)
    assert line["level"] == "WARNING"
    assert line["context"] == {"tenant_id": "t1"}
