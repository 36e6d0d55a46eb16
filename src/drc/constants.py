"""Symbolic constants — formats, report sources, auth schemes, selectors."""

from __future__ import annotations

from enum import Enum


class ReportFormat(str, Enum):
    PDF = "pdf"
    PNG = "png"
    CSV = "csv"


class ReportSource(str, Enum):
    DASHBOARD = "Dashboard"
    VISUALIZATION = "Visualization"
    DISCOVER = "Saved search"
    NOTEBOOK = "Notebook"
    OTHER = "Other"


class AuthType(str, Enum):
    NONE = "none"
    BASIC = "basic"
    SAML = "saml"
    COGNITO = "cognito"
    OPENID = "openid"


# Ordered: first match wins.
URL_SOURCE_MARKERS: list[tuple[str, ReportSource]] = [
    ("dashboards#", ReportSource.DASHBOARD),
    ("visualize#", ReportSource.VISUALIZATION),
    ("discover#", ReportSource.DISCOVER),
    ("data-explorer/discover", ReportSource.DISCOVER),
    ("notebooks", ReportSource.NOTEBOOK),
]

MIME_TYPES = {
    ReportFormat.PDF: "application/pdf",
    ReportFormat.PNG: "image/png",
    ReportFormat.CSV: "text/csv",
}

# Request defaults
DEFAULT_WIDTH = 1680
DEFAULT_HEIGHT = 600
DEFAULT_TIMEOUT_MS = 300_000
DEFAULT_TENANT = "private"
DEFAULT_EMAIL_BODY = "email_body.png"

# Pipeline timing (ms)
SETTLE_DELAY_MS = 2000
STABILITY_INTERVAL_MS = 1000
STABILITY_CHECKS = 5

# PDF pages are always this wide regardless of the viewport.
PDF_WIDTH = 1680

# Tenant selection
TENANT_PROMPT = "text=Select your tenant"
TENANT_CONFIRM = 'button[data-test-subj="confirm"]'
TENANT_CUSTOM_LABEL = 'label[for="custom"]'
TENANT_COMBO_TOGGLE = 'button[data-test-subj="comboBoxToggleListButton"]'
TENANT_COMBO_INPUT = 'input[data-test-subj="comboBoxSearchInput"]'
BUILTIN_TENANTS = ("global", "private")

# CSV export
CSV_DOWNLOAD_BUTTON = 'button[id="downloadReport"]'
CSV_GENERATE_BUTTON = 'button[id="generateCSV"]'
CSV_GENERATE_DISABLED = "#generateCSV[disabled]"
CSV_MENU_DELAY_MS = 1000
GENERATE_REPORT_PATH = "/api/reporting/generateReport"
