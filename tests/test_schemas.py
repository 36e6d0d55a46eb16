"""Tests for request, outcome and capture models."""

from __future__ import annotations

import base64
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from drc.constants import AuthType, ReportFormat
from drc.schemas.auth import AuthOutcome, AuthState
from drc.schemas.capture import CaptureResult
from drc.schemas.request import BrowserSettings, ReportRequest


class TestReportRequest:
    def test_defaults(self) -> None:
        req = ReportRequest(url="https://h/app/dashboards#/view/1")
        assert req.format is ReportFormat.PDF
        assert (req.width, req.height) == (1680, 600)
        assert req.auth is AuthType.NONE
        assert req.tenant == "private"
        assert req.multitenancy is True
        assert req.timeout == 300_000
        assert req.transport is None

    def test_immutable(self) -> None:
        req = ReportRequest(url="https://h")
        with pytest.raises(ValidationError):
            req.url = "https://other"  # type: ignore[misc]

    def test_url_required(self) -> None:
        with pytest.raises(ValidationError, match="url"):
            ReportRequest(url="   ")

    def test_positive_dimensions(self) -> None:
        with pytest.raises(ValidationError):
            ReportRequest(url="https://h", width=0)
        with pytest.raises(ValidationError):
            ReportRequest(url="https://h", timeout=-1)

    def test_string_enums(self) -> None:
        req = ReportRequest(url="https://h", format="csv", auth="saml")
        assert req.format is ReportFormat.CSV
        assert req.auth is AuthType.SAML

    def test_unknown_format(self) -> None:
        with pytest.raises(ValidationError):
            ReportRequest(url="https://h", format="xlsx")

    def test_has_credentials(self) -> None:
        assert not ReportRequest(url="https://h", username="u", password="p").has_credentials
        assert not ReportRequest(url="https://h", auth="basic", username="u").has_credentials
        assert ReportRequest(url="https://h", auth="basic", username="u", password="p").has_credentials

    def test_default_destination(self) -> None:
        req = ReportRequest(url="https://h", format="png", time=datetime(2024, 5, 6, 7, 8, 9))
        assert req.destination == Path("reporting_2024-05-06T07-08-09.png")

    def test_explicit_destination(self) -> None:
        assert ReportRequest(url="https://h", filename="out.pdf").destination == Path("out.pdf")

    def test_email_body_only_with_transport(self) -> None:
        assert ReportRequest(url="https://h").email_body_destination is None
        assert ReportRequest(url="https://h", transport="  ").email_body_destination is None
        req = ReportRequest(url="https://h", transport="smtp", email_body="body.png")
        assert req.email_body_destination == Path("body.png")


class TestBrowserSettings:
    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHROMIUM_PATH", "/usr/bin/chromium")
        monkeypatch.setenv("TZ", "Europe/Berlin")
        settings = BrowserSettings.from_env()
        assert settings.executable_path == "/usr/bin/chromium"
        assert settings.timezone == "Europe/Berlin"
        assert settings.settle_delay_ms == 2000

    def test_from_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CHROMIUM_PATH", raising=False)
        monkeypatch.delenv("TZ", raising=False)
        settings = BrowserSettings.from_env()
        assert settings.executable_path is None
        assert settings.timezone == "UTC"


class TestAuthOutcome:
    def test_defaults(self) -> None:
        outcome = AuthOutcome(scheme=AuthType.OPENID)
        assert outcome.success is False
        assert outcome.tenant is None
        assert outcome.state is AuthState.START


class TestCaptureResult:
    def test_png_payload(self) -> None:
        result = CaptureResult(format=ReportFormat.PNG, buffer=b"\x89PNG")
        prefix, encoded = result.payload.split(";base64,")
        assert prefix == "data:image/png"
        assert base64.b64decode(encoded) == b"\x89PNG"

    def test_csv_payload_is_text(self) -> None:
        result = CaptureResult(format=ReportFormat.CSV, buffer="x,y\n".encode())
        assert result.payload == "x,y\n"
