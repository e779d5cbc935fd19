"""Log into the gym website by filling out its login form."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import structlog
from bs4 import BeautifulSoup

from .config import SiteConfig
from .errors import FormFetchFailed, TransportError, Unauthenticated, UnexpectedFormShape
from .models import BookingRequest, SessionState
from .transport import ensure_ok, send

LOGGER = structlog.get_logger(__name__)

MASK = "****"


@dataclass
class LoginForm:
    """Submission details scraped from the login page."""

    action: str
    method: str
    inputs: dict[str, str] = field(default_factory=dict)


class LoginAgent:
    """Fetches, fills in and submits the login form, then checks the session cookies."""

    def __init__(self, site: SiteConfig):
        self._site = site

    async def login(self, client: httpx.AsyncClient, request: BookingRequest) -> SessionState:
        html = await self._fetch_form(client)
        form = self.fill_form(html, request)
        await self._submit(client, form)
        return self._session_from(client)

    async def _fetch_form(self, client: httpx.AsyncClient) -> str:
        LOGGER.info("login.form.start", uri=self._site.login_form_uri)
        try:
            response = await send(client, "GET", self._site.login_form_uri)
        except TransportError as exc:
            raise FormFetchFailed(f"Could not get login form: {exc}") from exc
        if not response.is_success:
            LOGGER.error("login.form.failed", status_code=response.status_code, body=response.text)
            raise FormFetchFailed(f"Could not get login form: Resp statusCode {response.status_code}")
        LOGGER.info("login.form.success")
        return response.text

    def fill_form(self, html: str, request: BookingRequest) -> LoginForm:
        """Copy every input of the login form, putting our credentials in the right fields."""
        soup = BeautifulSoup(html, "html.parser")
        form_tag = soup.find("form")
        if form_tag is None:
            LOGGER.error("login.form.missing")
            raise UnexpectedFormShape("Login form is not as expected")

        form = LoginForm(
            action=form_tag.get("action") or self._site.login_form_uri,
            method=(form_tag.get("method") or "GET").upper(),
        )

        username_present = False
        password_present = False

        for input_tag in form_tag.find_all("input"):
            name = input_tag.get("name")
            if not name:
                continue
            logged_value = input_tag.get("value", "")

            if name == self._site.username_field:
                form.inputs[name] = request.username
                username_present = True
                logged_value = MASK
            elif name == self._site.password_field:
                form.inputs[name] = request.password.get_secret_value()
                password_present = True
                logged_value = MASK
            elif name == self._site.remember_me_field:
                form.inputs[name] = "false"
                logged_value = "false"
            else:
                form.inputs[name] = input_tag.get("value", "")

            LOGGER.debug("login.form.field", name=name, value=logged_value)

        if not (username_present and password_present):
            LOGGER.error("login.form.unexpected", fields=sorted(form.inputs))
            raise UnexpectedFormShape("Login form is not as expected")

        return form

    async def _submit(self, client: httpx.AsyncClient, form: LoginForm) -> None:
        LOGGER.info("login.submit.start", action=form.action, method=form.method)
        if form.method == "GET":
            response = await send(client, "GET", form.action, params=form.inputs)
        else:
            response = await send(client, form.method, form.action, data=form.inputs)
        ensure_ok(response)
        LOGGER.info("login.submit.complete", redirects=len(response.history))

    def _session_from(self, client: httpx.AsyncClient) -> SessionState:
        cookies = {cookie.name: cookie.value or "" for cookie in client.cookies.jar}
        LOGGER.debug("login.cookies", names=sorted(cookies))

        for name in self._site.session_cookies:
            if name not in cookies:
                LOGGER.error("login.cookie_missing", cookie=name)
                raise Unauthenticated(f"Login cookie {name} not found")

        LOGGER.info("login.success")
        return SessionState(cookies=dict(cookies))
