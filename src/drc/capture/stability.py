"""Bounded polling: rendered-markup quiescence and generic predicate waits.

All sleeping goes through ``page.wait_for_timeout`` so timing stays on the
browser's clock and callers can substitute a fake page in tests.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from playwright.async_api import Page

from drc.constants import STABILITY_CHECKS, STABILITY_INTERVAL_MS

logger = logging.getLogger(__name__)


async def wait_for_dynamic_content(
    page: Page,
    timeout: int,
    interval: int = STABILITY_INTERVAL_MS,
    checks: int = STABILITY_CHECKS,
) -> bool:
    """Wait until the serialized document length stops changing.

    Each sample equal to the previous one bumps a counter, any change (and
    the very first sample) resets it. Returns ``True`` once ``checks``
    consecutive unchanged samples are seen. After ``timeout / interval``
    polls it gives up and returns ``False``; a timeout here is not an error.
    """
    max_polls = int(timeout / interval) + 1
    passed = 0
    previous = 0

    for poll in range(max_polls):
        current = len(await page.content())
        if previous == 0 or previous != current:
            passed = 0
        else:
            passed += 1
        logger.debug("Stability poll %d: length=%d stable=%d", poll, current, passed)
        if passed >= checks:
            return True
        previous = current
        await page.wait_for_timeout(interval)

    logger.warning("Page content still changing after %d ms, capturing anyway", timeout)
    return False


async def poll_until(
    page: Page,
    predicate: Callable[[], Awaitable[bool]],
    *,
    timeout: int,
    interval: int = 500,
) -> bool:
    """Evaluate ``predicate`` every ``interval`` ms until it holds or ``timeout`` elapses."""
    elapsed = 0
    while True:
        if await predicate():
            return True
        if elapsed >= timeout:
            return False
        await page.wait_for_timeout(interval)
        elapsed += interval
