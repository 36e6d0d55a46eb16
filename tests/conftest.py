"""Shared test fixtures — a scripted stand-in for a Playwright page."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from drc.schemas.request import BrowserSettings, ReportRequest

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-body"
PDF_BYTES = b"%PDF-1.4\nfake-pdf-body"


class FakeResponse:
    def __init__(self, url: str, body: dict[str, Any]) -> None:
        self.request = type("FakeRequest", (), {"url": url})()
        self._body = body

    async def json(self) -> dict[str, Any]:
        return self._body


class _ResponseInfo:
    def __init__(self, response: FakeResponse) -> None:
        self._response = response

    @property
    async def value(self) -> FakeResponse:
        return self._response


class _ExpectResponse:
    def __init__(self, page: "FakePage", predicate: Callable[[Any], bool]) -> None:
        self._page = page
        self._predicate = predicate

    async def __aenter__(self) -> _ResponseInfo:
        return _ResponseInfo(self._page.response)

    async def __aexit__(self, *exc: object) -> None:
        if exc[0] is None:
            assert self._predicate(self._page.response), "no response matched"


class FakePage:
    """Records every call and answers from a small mutable DOM model.

    ``visible`` holds the selectors currently shown. ``on_click`` maps a
    selector to a callback run after it is clicked, which is how tests
    script page transitions (e.g. a login form disappearing).
    """

    def __init__(
        self,
        *,
        visible: set[str] | None = None,
        contents: list[str] | None = None,
        scroll_height: int = 2400,
    ) -> None:
        self.visible: set[str] = set(visible or ())
        self.broken: set[str] = set()
        self.on_click: dict[str, Callable[["FakePage"], None]] = {}
        self.on_reload: Callable[["FakePage"], None] | None = None
        self.contents = list(contents or ["<html><body>report</body></html>"])
        self.scroll_height = scroll_height
        self.generate_disabled = False
        self.response = FakeResponse("https://host/api/reporting/generateReport/abc", {"data": "a,b\n1,2\n"})
        self.calls: list[tuple[Any, ...]] = []
        self.fills: dict[str, str] = {}
        self.waits: list[int] = []
        self.content_samples = 0

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    async def goto(self, url: str, wait_until: str | None = None) -> None:
        self.calls.append(("goto", url, wait_until))

    async def reload(self, wait_until: str | None = None) -> None:
        self.calls.append(("reload", wait_until))
        if self.on_reload:
            self.on_reload(self)

    async def wait_for_load_state(self, state: str = "load") -> None:
        self.calls.append(("wait_for_load_state", state))

    async def wait_for_timeout(self, timeout: float) -> None:
        self.waits.append(timeout)

    async def wait_for_selector(self, selector: str, timeout: float | None = None, state: str = "visible") -> None:
        self.calls.append(("wait_for_selector", selector, timeout))
        if selector not in self.visible:
            raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")

    async def is_visible(self, selector: str) -> bool:
        return selector in self.visible

    async def fill(self, selector: str, value: str) -> None:
        self.calls.append(("fill", selector))
        if selector in self.broken:
            raise PlaywrightError(f"cannot fill {selector}")
        self.fills[selector] = value

    async def click(self, selector: str) -> None:
        self.calls.append(("click", selector))
        if selector in self.broken:
            raise PlaywrightError(f"cannot click {selector}")
        callback = self.on_click.get(selector)
        if callback:
            callback(self)

    async def content(self) -> str:
        self.content_samples += 1
        if len(self.contents) > 1:
            return self.contents.pop(0)
        return self.contents[0]

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", expression, arg))
        if "scrollHeight" in expression:
            return self.scroll_height
        if "querySelector(selector) == null" in expression:
            return not self.generate_disabled
        return None

    async def set_viewport_size(self, size: dict[str, int]) -> None:
        self.calls.append(("set_viewport_size", size))

    async def screenshot(self, **kwargs: Any) -> bytes:
        self.calls.append(("screenshot", kwargs))
        return PNG_BYTES

    async def pdf(self, **kwargs: Any) -> bytes:
        self.calls.append(("pdf", kwargs))
        return PDF_BYTES

    def expect_response(self, predicate: Callable[[Any], bool]) -> _ExpectResponse:
        self.calls.append(("expect_response",))
        return _ExpectResponse(self, predicate)


class FakeSession:
    """Stands in for BrowserSession; records whether it was closed."""

    def __init__(self, page: FakePage, verify_page: FakePage) -> None:
        self.page = page
        self.verify_page = verify_page
        self.entered = False
        self.closed = False

    async def __aenter__(self) -> "FakeSession":
        self.entered = True
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.closed = True


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def browser_settings() -> BrowserSettings:
    return BrowserSettings(executable_path=None, timezone="UTC", settle_delay_ms=2000)


@pytest.fixture
def session_factory():
    """Return a factory that hands out FakeSessions and remembers them."""

    class Factory:
        def __init__(self) -> None:
            self.sessions: list[FakeSession] = []
            self.page = FakePage()
            self.verify_page = FakePage()

        def __call__(self, request: ReportRequest, settings: BrowserSettings) -> FakeSession:
            session = FakeSession(self.page, self.verify_page)
            self.sessions.append(session)
            return session

    return Factory()


@pytest.fixture
def tmp_request_file(tmp_path: Path) -> Path:
    """Write a minimal valid request YAML and return its path."""
    path = tmp_path / "request.yml"
    path.write_text(
        """\
url: "https://dashboards.example.com/app/dashboards#/view/abc"
format: png
filename: "{out}"
""".format(out=str(tmp_path / "report.png"))
    )
    return path
