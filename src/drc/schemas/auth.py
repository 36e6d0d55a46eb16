"""Authentication state machine states and outcome model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from drc.constants import AuthType


class AuthState(str, Enum):
    START = "start"
    CREDENTIALS_ENTERED = "credentials_entered"
    SUBMITTED = "submitted"
    TENANT_PROMPT_DETECTED = "tenant_prompt_detected"
    NO_TENANT_PROMPT = "no_tenant_prompt"
    TENANT_CONFIRMED = "tenant_confirmed"
    SKIPPED = "skipped"
    VERIFIED = "verified"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class AuthOutcome(BaseModel):
    """Result of one login handshake."""

    scheme: AuthType
    tenant_prompt: bool = False
    tenant: str | None = None  # the tenant actually confirmed, if any
    success: bool = False
    state: AuthState = AuthState.START
