"""CLI entrypoint for HR automation maintenance tasks."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from hr_automation import __version__
from hr_automation.config import AutomationSettings
from hr_automation.errors import DomainError
from hr_automation.logging import configure_logging
from hr_automation.services import Services, build_services
from hr_automation.workflow.state_machine import WorkflowStatus

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hr-automation",
        description="HR workflow automation and invitations",
    )
    parser.add_argument("--version", action="version", version=f"hr-automation {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    bootstrap = subparsers.add_parser(
        "bootstrap-tenant",
        help="Create a company with its first administrator",
    )
    bootstrap.add_argument("--name", required=True, help="Company name")
    bootstrap.add_argument("--admin-email", required=True, help="Administrator email")
    bootstrap.add_argument("--admin-first-name", default="Admin")
    bootstrap.add_argument("--admin-last-name", default="User")

    emit = subparsers.add_parser(
        "emit-event",
        help="Publish an HR event and run the workflows it triggers",
    )
    emit.add_argument("--tenant", dest="tenant_id", required=True, help="Tenant id")
    emit.add_argument("--name", required=True, help="Event name, e.g. 'employee.hired'")
    emit.add_argument(
        "--data",
        default="{}",
        help="Event payload as a JSON object (tenant_id is filled in)",
    )

    subparsers.add_parser(
        "expire-invitations",
        help="Mark pending invitations past their expiry as expired",
    )

    list_workflows = subparsers.add_parser("list-workflows", help="List a tenant's workflows")
    list_workflows.add_argument("--tenant", dest="tenant_id", required=True, help="Tenant id")
    list_workflows.add_argument(
        "--status",
        choices=[s.value for s in WorkflowStatus],
        default=None,
        help="Only list workflows in this status",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = AutomationSettings()
    except ValidationError as e:
        # Logging isn't configured yet.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        services = build_services(settings)
        try:
            return _run_command(args, services)
        finally:
            services.close()

    except DomainError as e:
        logger.warning(str(e), extra={"code": e.code, "command": args.command})
        print(str(e), file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


def _run_command(args: argparse.Namespace, services: Services) -> int:
    if args.command == "bootstrap-tenant":
        tenant = services.directory.create_tenant(args.name)
        admin = services.directory.find_user_by_email(args.admin_email)
        if admin is None:
            admin = services.directory.create_user(
                email=args.admin_email,
                first_name=args.admin_first_name,
                last_name=args.admin_last_name,
            )
        services.directory.add_membership(
            user_id=admin.id, tenant_id=tenant.id, role="tenant_admin"
        )
        print(f"Created tenant {tenant.id} ({tenant.name}) with admin {admin.email} ({admin.id})")
        return 0

    if args.command == "emit-event":
        try:
            data = json.loads(args.data)
        except json.JSONDecodeError as e:
            print(f"--data is not valid JSON: {e}", file=sys.stderr)
            return 2
        if not isinstance(data, dict):
            print("--data must be a JSON object", file=sys.stderr)
            return 2
        published = services.bus.publish(args.name, {**data, "tenant_id": args.tenant_id})
        print(f"Published {published.event.name} ({published.event.id})")
        for result in published.results:
            print(
                f"  workflow {result.workflow_id}: {result.status}"
                + (f" ({result.error_message})" if result.error_message else "")
            )
        return 0

    if args.command == "expire-invitations":
        count = services.invitations.expire_stale()
        print(f"Expired {count} invitation(s)")
        return 0

    if args.command == "list-workflows":
        status = WorkflowStatus(args.status) if args.status else None
        page = services.workflows.list(args.tenant_id, status=status, limit=100)
        for wf in page.workflows:
            print(f"{wf.id}  {wf.status.value:<8}  {wf.trigger_type:<28}  {wf.name}")
        print(f"{page.total} workflow(s)")
        return 0

    logger.error("Unknown command", extra={"command": args.command})
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
