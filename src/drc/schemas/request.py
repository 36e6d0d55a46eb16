"""Request schema — one immutable ReportRequest per run."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from drc.constants import (
    DEFAULT_EMAIL_BODY,
    DEFAULT_HEIGHT,
    DEFAULT_TENANT,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_WIDTH,
    SETTLE_DELAY_MS,
    AuthType,
    ReportFormat,
)


class ReportRequest(BaseModel):
    """Everything needed to capture a single report.

    ``filename`` may be left empty, in which case ``destination`` derives
    ``reporting_<timestamp>.<ext>`` from ``time`` and ``format``.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    format: ReportFormat = ReportFormat.PDF
    width: int = Field(default=DEFAULT_WIDTH, gt=0)
    height: int = Field(default=DEFAULT_HEIGHT, gt=0)
    filename: str = ""

    # Authentication
    auth: AuthType = AuthType.NONE
    username: str | None = None
    password: str | None = None
    tenant: str = DEFAULT_TENANT
    multitenancy: bool = True

    time: datetime = Field(default_factory=datetime.now)

    # Secondary delivery; when set, an email-body preview image is also written
    transport: str | None = None
    email_body: str = DEFAULT_EMAIL_BODY

    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)  # ms

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url must not be empty")
        return v

    @field_validator("transport", "username", "password", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_credentials(self) -> bool:
        return (
            self.auth is not AuthType.NONE
            and self.username is not None
            and self.password is not None
        )

    @property
    def destination(self) -> Path:
        if self.filename:
            return Path(self.filename)
        stamp = self.time.strftime("%Y-%m-%dT%H-%M-%S")
        return Path(f"reporting_{stamp}.{self.format.value}")

    @property
    def email_body_destination(self) -> Path | None:
        return Path(self.email_body) if self.transport else None


class BrowserSettings(BaseModel):
    """Process-level browser settings, normally taken from the environment."""

    executable_path: str | None = None
    timezone: str = "UTC"
    settle_delay_ms: int = SETTLE_DELAY_MS

    @classmethod
    def from_env(cls) -> "BrowserSettings":
        return cls(
            executable_path=os.environ.get("CHROMIUM_PATH") or None,
            timezone=os.environ.get("TZ") or "UTC",
        )
