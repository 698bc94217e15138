"""Configuration for the HR automation service.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The service starts without mail credentials; the `resend` mailer validates
them when it is built.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AutomationSettings(BaseSettings):
    """Settings for the API, the workflow engine and invitations.

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `AutomationSettings(_env_file=path_to_env)`.
    """

    data_path: Path = Field(
        default=Path("data/hr_automation.json"),
        validation_alias="HR_AUTOMATION_DATA_PATH",
        description="JSON file holding all tenant records",
    )

    app_url: str = Field(
        default="http://localhost:3000",
        validation_alias="HR_AUTOMATION_APP_URL",
        description="Public base URL used to build invite links",
    )

    invitation_ttl_days: int = Field(
        default=7,
        validation_alias="HR_AUTOMATION_INVITATION_TTL_DAYS",
        description="Number of days an invitation token stays valid",
        ge=1,
        le=90,
    )
    invitation_max_resends: int = Field(
        default=3,
        validation_alias="HR_AUTOMATION_INVITATION_MAX_RESENDS",
        description="Maximum number of times an invitation email may be resent",
        ge=0,
        le=20,
    )

    mail_provider: Literal["log", "resend"] = Field(
        default="log",
        validation_alias="HR_AUTOMATION_MAIL_PROVIDER",
        description="Mail delivery backend",
    )
    mail_api_key: str = Field(default="", validation_alias="HR_AUTOMATION_MAIL_API_KEY")
    mail_api_url: str = Field(
        default="https://api.resend.com/emails",
        validation_alias="HR_AUTOMATION_MAIL_API_URL",
    )
    mail_from: str = Field(
        default="HR Automation <no-reply@localhost>",
        validation_alias="HR_AUTOMATION_MAIL_FROM",
    )

    max_event_depth: int = Field(
        default=3,
        validation_alias="HR_AUTOMATION_MAX_EVENT_DEPTH",
        description=(
            "Events published by workflow actions carry a depth. Events at or beyond this "
            "depth are logged but do not trigger further workflows."
        ),
        ge=1,
        le=10,
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="HR_AUTOMATION_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
