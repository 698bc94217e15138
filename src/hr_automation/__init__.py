"""HR Automation.

Multi-tenant HR administration backend providing:
- a workflow automation engine (event triggers, conditions, actions)
- the invitation lifecycle that links users to tenants
- alerts, team directory and a REST API over both
"""

__version__ = "0.1.0"

from hr_automation.config import AutomationSettings

__all__ = ["__version__", "AutomationSettings"]
