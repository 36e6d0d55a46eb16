"""Capture pipeline — one browser session, one report, one artifact."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from playwright.async_api import Page

from drc.capture.auth import Authenticator
from drc.capture.capturer import capture_email_body, capture_report
from drc.capture.classifier import classify_report_source, should_prune
from drc.capture.persist import ensure_writable, persist
from drc.capture.stability import wait_for_dynamic_content
from drc.constants import ReportSource
from drc.errors import DestinationCollisionError
from drc.schemas.request import BrowserSettings, ReportRequest
from drc.shared.browser import BrowserSession
from drc.shared.progress import StatusReporter

logger = logging.getLogger(__name__)

SessionFactory = Callable[[ReportRequest, BrowserSettings], BrowserSession]

_PRUNE_SCRIPT = """([source, visualization]) => {
    // buttons
    document.querySelectorAll("[class^='euiButton']").forEach((e) => e.remove());
    // top nav bar
    document.querySelectorAll("[class^='euiHeader']").forEach((e) => e.remove());
    // visualization editor
    if (source === visualization) {
        document.querySelector('[data-test-subj="splitPanelResizer"]')?.remove();
        document.querySelector('.visEditor__collapsibleSidebar')?.remove();
    }
    document.body.style.paddingTop = '0px';
}"""


async def prune_report_chrome(page: Page, source: ReportSource) -> bool:
    """Strip buttons, header and (for visualizations) the editor panel.

    Returns ``False`` without touching the page for sources that are not
    pruned.
    """
    if not should_prune(source):
        return False
    await page.evaluate(_PRUNE_SCRIPT, [source.value, ReportSource.VISUALIZATION.value])
    logger.debug("Pruned page chrome for %s", source.value)
    return True


async def download_report(
    request: ReportRequest,
    reporter: StatusReporter,
    *,
    settings: BrowserSettings | None = None,
    session_factory: SessionFactory = BrowserSession,
) -> Path:
    """Capture ``request.url`` and write it to ``request.destination``.

    Raises on every failure; the browser session is closed either way.
    """
    settings = settings or BrowserSettings.from_env()
    destination = ensure_writable(request.destination)
    email_destination = request.email_body_destination
    if email_destination is not None:
        if email_destination.resolve() == destination.resolve():
            raise DestinationCollisionError(destination)
        ensure_writable(email_destination)

    reporter.start(f"Connecting to url {request.url}")
    async with session_factory(request, settings) as session:
        page = session.page

        if request.has_credentials:
            authenticator = Authenticator.for_scheme(request.auth, reporter, timeout=request.timeout)
            await authenticator.authenticate(page, session.verify_page, request)
            reporter.info("Credentials are verified")
        else:
            await page.goto(request.url, wait_until="networkidle")

        reporter.info(f"Connected to url {request.url}")
        reporter.start("Loading page")
        await page.set_viewport_size({"width": request.width, "height": request.height})

        source = classify_report_source(request.url)
        await prune_report_chrome(page, source)

        # Let the browser reflow after the DOM removals before sampling.
        await page.wait_for_timeout(settings.settle_delay_ms)
        await wait_for_dynamic_content(page, request.timeout)

        reporter.update("Downloading Report...")
        result = await capture_report(page, request.format, time_created=request.time)
        persist(result, destination)

        if email_destination is not None:
            preview = await capture_email_body(page, time_created=request.time)
            persist(preview, email_destination)

    reporter.succeed("The report is downloaded")
    return destination
