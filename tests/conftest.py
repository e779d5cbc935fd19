"""
Pytest configuration and fixtures.
"""

from pathlib import Path
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest

from gym_class_booker.config import SiteConfig
from gym_class_booker.models import BookingRequest

DATA_DIR = Path(__file__).parent / "data"
BASE_URL = "https://www.gym.test"

Handler = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeSite:
    """Routes requests to canned responses and remembers what was asked for."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), path)] = handler

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text="not found")
        if callable(handler):
            return handler(request)
        return handler

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def read_data(name: str) -> str:
    return (DATA_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def fake_site():
    """Empty fake gym website."""
    return FakeSite()


@pytest.fixture
def api_site():
    """Site configuration for the JSON API website."""
    return SiteConfig.for_variant("api", base_url=BASE_URL)


@pytest.fixture
def timetable_site():
    """Site configuration for the legacy timetable website."""
    return SiteConfig.for_variant("timetable", base_url=BASE_URL)


@pytest.fixture
def booking_request():
    """Request for the Core class at Fiction Club."""
    return BookingRequest(
        club_name="Fiction Club",
        class_name="Core",
        date="2018-02-08",
        time="13:05",
        username="test_user@fakeEmail.com",
        password="testPassword",
    )


def login_routes(site: FakeSite, form: str = "login_form.html", cookies=None) -> None:
    """Serve the login form and answer the submission with session cookies."""
    if cookies is None:
        cookies = [
            ".AspNet.Cookies=aspnet; Path=/; HttpOnly",
            "va-auth=auth; Path=/",
            "SF-TokenId=token; Path=/",
        ]
    site.add("GET", "/login", httpx.Response(200, text=read_data(form)))
    site.add(
        "POST",
        "/login",
        httpx.Response(200, text="welcome", headers=[("set-cookie", cookie) for cookie in cookies]),
    )
