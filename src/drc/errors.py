"""Failure taxonomy for a capture run.

Every error here is terminal: the CLI reports it and exits non-zero.
Playwright errors and ``OSError`` from the final write are not wrapped and
propagate as they are.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from drc.schemas.auth import AuthOutcome


class ReportCaptureError(Exception):
    """Base class for classified capture failures."""


class DestinationExistsError(ReportCaptureError, FileExistsError):
    """An artifact already exists at the target path."""

    def __init__(self, path: object) -> None:
        super().__init__(f"File with same name already exists: {path}")
        self.path = path


class DestinationCollisionError(ReportCaptureError):
    """The email-body image would be written over the report itself."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Email body and report share the same file: {path}")
        self.path = path


class AuthenticationError(ReportCaptureError):
    """Login or tenant selection failed."""

    def __init__(self, message: str, outcome: "AuthOutcome | None" = None) -> None:
        super().__init__(message)
        self.outcome = outcome


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, outcome: "AuthOutcome | None" = None) -> None:
        super().__init__("Invalid username or password", outcome)


class InvalidTenantError(AuthenticationError):
    def __init__(self, outcome: "AuthOutcome | None" = None) -> None:
        super().__init__("Invalid tenant", outcome)


class ExportNotReadyError(ReportCaptureError):
    """The CSV generate control is disabled because the search has not been saved."""

    def __init__(self) -> None:
        super().__init__("Please save search and retry")
