"""Login handshakes — one state machine, four scheme descriptors.

Each supported scheme (basic, SAML, Cognito, OpenID) differs only in its
form selectors, whether the form is split over two steps, how the tenant
prompt is probed, and how the session is confirmed at the end. Those
differences live in ``AuthScheme``; ``Authenticator`` runs the shared flow::

    START → CREDENTIALS_ENTERED → SUBMITTED
          → TENANT_PROMPT_DETECTED → TENANT_CONFIRMED
          | NO_TENANT_PROMPT → SKIPPED
          → VERIFIED → AUTHENTICATED

Any failure moves the machine to FAILED and raises. There is no retry and
no fallback scheme.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from drc.capture.stability import poll_until
from drc.constants import (
    BUILTIN_TENANTS,
    DEFAULT_TIMEOUT_MS,
    TENANT_COMBO_INPUT,
    TENANT_COMBO_TOGGLE,
    TENANT_CONFIRM,
    TENANT_CUSTOM_LABEL,
    TENANT_PROMPT,
    AuthType,
)
from drc.errors import AuthenticationError, InvalidCredentialsError, InvalidTenantError
from drc.schemas.auth import AuthOutcome, AuthState
from drc.schemas.request import ReportRequest
from drc.shared.progress import StatusReporter

logger = logging.getLogger(__name__)

# Upper bounds (ms) for the waits that follow a login transition.
LOGIN_SETTLE_TIMEOUT_MS = 30_000
TENANT_CONFIRM_TIMEOUT_MS = 25_000
VERIFY_TENANT_TIMEOUT_MS = 5_000
USERNAME_FIELD_TIMEOUT_MS = 20_000
PASSWORD_FIELD_TIMEOUT_MS = 5_000
TENANT_PROBE_TIMEOUT_MS = 5_000


class VerifyStrategy(str, Enum):
    VERIFICATION_PAGE = "verification_page"  # re-open the target in the second page
    FRAGMENT_LINK = "fragment_link"  # follow the in-app link to the URL fragment
    RELOAD = "reload"  # re-navigate the primary page


@dataclass(frozen=True)
class AuthScheme:
    """Everything that distinguishes one login handshake from another."""

    name: AuthType
    username_field: str
    password_field: str
    submit: str
    verify: VerifyStrategy
    # Identity providers that show the password field only after a first submit.
    two_step: bool = False
    # Go back to the target after submitting (the IdP lands somewhere else).
    renavigate_after_submit: bool = False
    # 0 polls for the tenant prompt up to the login settle bound; otherwise it is awaited this long.
    tenant_probe_timeout: int = 0
    # Short wait for the login form, followed by one reload; None waits the full timeout.
    username_timeout: int | None = None


SCHEMES: dict[AuthType, AuthScheme] = {
    AuthType.BASIC: AuthScheme(
        name=AuthType.BASIC,
        username_field='input[data-test-subj="user-name"]',
        password_field='[data-test-subj="password"]',
        submit="button[type=submit]",
        verify=VerifyStrategy.VERIFICATION_PAGE,
    ),
    AuthType.SAML: AuthScheme(
        name=AuthType.SAML,
        username_field='[name="identifier"]',
        password_field='[name="credentials.passcode"]',
        submit='[value="Sign in"]',
        verify=VerifyStrategy.FRAGMENT_LINK,
    ),
    AuthType.COGNITO: AuthScheme(
        name=AuthType.COGNITO,
        username_field='[name="username"]',
        password_field='[name="password"]',
        submit='[name="signInSubmitButton"]',
        verify=VerifyStrategy.VERIFICATION_PAGE,
    ),
    AuthType.OPENID: AuthScheme(
        name=AuthType.OPENID,
        username_field='[name="username"]',
        password_field='[name="password"]',
        submit='[name="login"]',
        verify=VerifyStrategy.RELOAD,
        two_step=True,
        renavigate_after_submit=True,
        tenant_probe_timeout=TENANT_PROBE_TIMEOUT_MS,
        username_timeout=USERNAME_FIELD_TIMEOUT_MS,
    ),
}


def fragment_ref(url: str) -> str:
    """Return ``#<fragment>``, the part of ``url`` between the first and second ``#``."""
    parts = url.split("#")
    return "#" + (parts[1] if len(parts) > 1 else "")


async def _visible(page: Page, selector: str) -> bool:
    # The page may be mid-navigation while polling; treat that as "not yet".
    try:
        return await page.is_visible(selector)
    except PlaywrightError:
        return False


class Authenticator:
    """Runs one login handshake for a given scheme."""

    def __init__(
        self,
        scheme: AuthScheme,
        reporter: StatusReporter | None = None,
        *,
        timeout: int = DEFAULT_TIMEOUT_MS,
        poll_interval: int = 500,
    ) -> None:
        self.scheme = scheme
        self.reporter = reporter
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.state = AuthState.START
        self.history: list[AuthState] = [AuthState.START]

    @classmethod
    def for_scheme(
        cls,
        auth: AuthType,
        reporter: StatusReporter | None = None,
        *,
        timeout: int = DEFAULT_TIMEOUT_MS,
    ) -> "Authenticator":
        try:
            scheme = SCHEMES[auth]
        except KeyError:
            raise ValueError(f"No login handshake for auth type {auth.value!r}") from None
        return cls(scheme, reporter, timeout=timeout)

    def _transition(self, state: AuthState) -> None:
        logger.debug("%s auth: %s -> %s", self.scheme.name.value, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _status(self, text: str) -> None:
        if self.reporter is not None:
            self.reporter.update(text)

    async def authenticate(self, page: Page, verify_page: Page, request: ReportRequest) -> AuthOutcome:
        """Log in on ``page`` and confirm the session; raise on any failure."""
        outcome = AuthOutcome(scheme=self.scheme.name)
        try:
            self._status(f"Signing in to {request.url}")
            await self._enter_credentials(page, request)
            await self._submit(page, request.url)

            outcome.tenant_prompt = await self._detect_tenant_prompt(
                page, multitenancy=request.multitenancy
            )
            if request.multitenancy and outcome.tenant_prompt:
                self._transition(AuthState.TENANT_PROMPT_DETECTED)
                await self._select_tenant(page, request.tenant)
                outcome.tenant = request.tenant
                self._transition(AuthState.TENANT_CONFIRMED)
            else:
                self._transition(AuthState.NO_TENANT_PROMPT)
                if await _visible(page, self.scheme.submit):
                    raise InvalidCredentialsError()
                self._transition(AuthState.SKIPPED)

            await self._verify(page, verify_page, request.url, tenant_selected=outcome.tenant is not None)
            self._transition(AuthState.VERIFIED)
            await page.reload(wait_until="networkidle")
            self._transition(AuthState.AUTHENTICATED)
        except Exception as exc:
            self._transition(AuthState.FAILED)
            outcome.state = AuthState.FAILED
            if isinstance(exc, AuthenticationError):
                exc.outcome = outcome
            raise

        outcome.success = True
        outcome.state = self.state
        return outcome

    async def _enter_credentials(self, page: Page, request: ReportRequest) -> None:
        s = self.scheme
        await page.goto(request.url, wait_until="networkidle")

        if s.username_timeout is None:
            await page.wait_for_selector(s.username_field)
        else:
            try:
                await page.wait_for_selector(s.username_field, timeout=s.username_timeout)
            except PlaywrightTimeoutError:
                logger.info("Login form did not appear, reloading %s", request.url)
                await page.reload(wait_until="networkidle")
                await page.wait_for_selector(s.username_field)
        await page.fill(s.username_field, request.username or "")

        if s.two_step:
            try:
                await page.wait_for_selector(s.password_field, timeout=PASSWORD_FIELD_TIMEOUT_MS)
            except PlaywrightTimeoutError:
                # Realm redirect: the IdP wants the username submitted first.
                logger.info("Password field not shown, submitting username first")
                await page.click(s.submit)
                await page.wait_for_selector(s.password_field)
        await page.fill(s.password_field, request.password or "")
        self._transition(AuthState.CREDENTIALS_ENTERED)

    async def _submit(self, page: Page, url: str) -> None:
        s = self.scheme
        await page.click(s.submit)
        self._transition(AuthState.SUBMITTED)
        await page.wait_for_load_state("networkidle")

        if s.renavigate_after_submit:
            await page.goto(url, wait_until="networkidle")
            return

        async def settled() -> bool:
            return await _visible(page, TENANT_PROMPT) or not await _visible(page, s.submit)

        if not await poll_until(
            page,
            settled,
            timeout=min(self.timeout, LOGIN_SETTLE_TIMEOUT_MS),
            interval=self.poll_interval,
        ):
            logger.debug("Login form still showing after submit")

    async def _detect_tenant_prompt(self, page: Page, *, multitenancy: bool) -> bool:
        """Report whether the tenant prompt is showing.

        With multitenancy on, "no prompt" is only concluded once a bounded
        wait for the marker has expired.
        """
        if not multitenancy:
            return await _visible(page, TENANT_PROMPT)

        wait = self.scheme.tenant_probe_timeout
        if wait:
            try:
                await page.wait_for_selector(TENANT_PROMPT, timeout=wait)
            except PlaywrightTimeoutError:
                return False
            return True

        async def prompted() -> bool:
            return await _visible(page, TENANT_PROMPT)

        return await poll_until(
            page,
            prompted,
            timeout=min(self.timeout, LOGIN_SETTLE_TIMEOUT_MS),
            interval=self.poll_interval,
        )

    async def _select_tenant(self, page: Page, tenant: str) -> None:
        self._status(f"Selecting tenant {tenant}")
        try:
            if tenant in BUILTIN_TENANTS:
                await page.click(f'label[for="{tenant}"]')
            else:
                await page.click(TENANT_CUSTOM_LABEL)
                await page.click(TENANT_COMBO_TOGGLE)
                await page.fill(TENANT_COMBO_INPUT, tenant)
        except PlaywrightError as exc:
            logger.debug("Tenant selection failed: %s", exc)
            raise InvalidCredentialsError() from exc

        await page.click(TENANT_CONFIRM)

        async def dismissed() -> bool:
            return not await _visible(page, TENANT_CONFIRM)

        if not await poll_until(
            page,
            dismissed,
            timeout=min(self.timeout, TENANT_CONFIRM_TIMEOUT_MS),
            interval=self.poll_interval,
        ):
            logger.warning("Tenant confirmation still showing for %r", tenant)

    async def _verify(self, page: Page, verify_page: Page, url: str, *, tenant_selected: bool) -> None:
        match self.scheme.verify:
            case VerifyStrategy.VERIFICATION_PAGE:
                await verify_page.goto(url, wait_until="networkidle")
                if tenant_selected:

                    async def pending() -> bool:
                        return await _visible(verify_page, TENANT_CONFIRM)

                    if await poll_until(
                        verify_page,
                        pending,
                        timeout=min(self.timeout, VERIFY_TENANT_TIMEOUT_MS),
                        interval=self.poll_interval,
                    ):
                        raise InvalidTenantError()
                await page.goto(url, wait_until="networkidle")
            case VerifyStrategy.FRAGMENT_LINK:
                await page.click(f"a[href='{fragment_ref(url)}']")
            case VerifyStrategy.RELOAD:
                await page.goto(url, wait_until="networkidle")
