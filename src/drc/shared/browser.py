"""Playwright browser session — one Chromium instance with a primary and a verification page."""

from __future__ import annotations

import logging
import os
from types import TracebackType

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from drc.schemas.request import BrowserSettings, ReportRequest

logger = logging.getLogger(__name__)

# Container-friendly Chromium flags.
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--no-zygote",
    "--font-render-hinting=none",
    "--enable-features=NetworkService",
    "--ignore-certificate-errors",
]


class BrowserSession:
    """Owns the browser for exactly one ReportRequest.

    Both pages live in the same browser context, so cookies set while
    logging in on ``page`` are visible to ``verify_page``.

    Usage::

        async with BrowserSession(request) as session:
            await session.page.goto(request.url)
    """

    def __init__(self, request: ReportRequest, settings: BrowserSettings | None = None) -> None:
        self.request = request
        self.settings = settings or BrowserSettings.from_env()
        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self.page: Page | None = None
        self.verify_page: Page | None = None

    async def __aenter__(self) -> "BrowserSession":
        try:
            await self._open()
        except BaseException as exc:
            await self.__aexit__(type(exc), exc, exc.__traceback__)
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_val is None:
            await self.close()
            return
        # Keep the failure that ended the session; a teardown error is only logged.
        try:
            await self.close()
        except Exception:
            logger.exception("Browser teardown failed after %s", exc_type.__name__)

    async def _open(self) -> None:
        self._pw = await async_playwright().start()
        self._browser = await self._pw.chromium.launch(
            headless=True,
            args=CHROMIUM_ARGS,
            executable_path=self.settings.executable_path,
            env={**os.environ, "TZ": self.settings.timezone},
        )
        self._context = await self._browser.new_context(
            ignore_https_errors=True,
            timezone_id=self.settings.timezone,
            viewport={"width": self.request.width, "height": self.request.height},
        )
        self.page = await self._context.new_page()
        self.verify_page = await self._context.new_page()
        for page in (self.page, self.verify_page):
            page.set_default_navigation_timeout(self.request.timeout)
            page.set_default_timeout(self.request.timeout)
        logger.info("Browser launched (tz=%s)", self.settings.timezone)

    async def close(self) -> None:
        context, browser, pw = self._context, self._browser, self._pw
        self._context = self._browser = self._pw = None
        try:
            if context:
                await context.close()
        finally:
            try:
                if browser:
                    await browser.close()
            finally:
                if pw:
                    await pw.stop()
                    logger.info("Browser closed")
