"""HTTP API for the HR automation service."""

from hr_automation.server.app import create_app

__all__ = ["create_app"]
