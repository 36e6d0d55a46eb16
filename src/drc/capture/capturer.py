"""Format-specific capture of the stabilized page."""

from __future__ import annotations

import logging
from datetime import datetime

from playwright.async_api import Page

from drc.constants import (
    CSV_DOWNLOAD_BUTTON,
    CSV_GENERATE_BUTTON,
    CSV_GENERATE_DISABLED,
    CSV_MENU_DELAY_MS,
    GENERATE_REPORT_PATH,
    PDF_WIDTH,
    ReportFormat,
)
from drc.errors import ExportNotReadyError
from drc.schemas.capture import CaptureResult

logger = logging.getLogger(__name__)


async def capture_report(
    page: Page,
    fmt: ReportFormat,
    *,
    time_created: datetime | None = None,
) -> CaptureResult:
    """Render ``page`` as a PDF, PNG or CSV buffer."""
    match fmt:
        case ReportFormat.PDF:
            buffer = await _capture_pdf(page)
        case ReportFormat.PNG:
            buffer = await page.screenshot(full_page=True)
        case ReportFormat.CSV:
            buffer = (await _capture_csv(page)).encode("utf-8")
        case _:
            raise ValueError(f"Unsupported report format: {fmt!r}")

    logger.info("Captured %s report (%d bytes)", fmt.value, len(buffer))
    return CaptureResult(format=fmt, buffer=buffer, time_created=time_created or datetime.now())


async def capture_email_body(page: Page, *, time_created: datetime | None = None) -> CaptureResult:
    """Full-page PNG used as the inline image of a report email."""
    buffer = await page.screenshot(full_page=True)
    return CaptureResult(format=ReportFormat.PNG, buffer=buffer, time_created=time_created or datetime.now())


async def _capture_pdf(page: Page) -> bytes:
    # One page exactly as tall as the document.
    scroll_height = await page.evaluate("() => document.documentElement.scrollHeight")
    return await page.pdf(
        width=f"{PDF_WIDTH}px",
        height=f"{scroll_height}px",
        print_background=True,
        page_ranges="1",
    )


async def _capture_csv(page: Page) -> str:
    await page.click(CSV_DOWNLOAD_BUTTON)
    await page.wait_for_timeout(CSV_MENU_DELAY_MS)

    enabled = await page.evaluate(
        "(selector) => document.querySelector(selector) == null", CSV_GENERATE_DISABLED
    )
    if not enabled:
        raise ExportNotReadyError()

    async with page.expect_response(lambda r: GENERATE_REPORT_PATH in r.request.url) as response_info:
        await page.click(CSV_GENERATE_BUTTON)
    response = await response_info.value
    payload = await response.json()
    return payload["data"]
