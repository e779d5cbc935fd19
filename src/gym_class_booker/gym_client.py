"""Common interface for the two generations of the gym website."""

from __future__ import annotations

import abc
from typing import Optional

import httpx
import structlog

from .config import SiteConfig
from .login import LoginAgent
from .models import BookingOutcome, BookingRequest, Club, ResolvedClassOccurrence, SessionState
from .transport import open_session

LOGGER = structlog.get_logger(__name__)


class GymClient(abc.ABC):
    """
    One logged-in conversation with the gym website.

    Use as an async context manager: the underlying HTTP client (and with it
    the session cookies) lives exactly as long as the ``async with`` block.
    """

    def __init__(self, site: SiteConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._site = site
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._login_agent = LoginAgent(site)

    async def __aenter__(self) -> "GymClient":
        self._client = open_session(self._site, transport=self._transport)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def site(self) -> SiteConfig:
        return self._site

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("GymClient must be used inside 'async with'")
        return self._client

    async def login(self, request: BookingRequest) -> SessionState:
        """Log in with the request's credentials."""
        return await self._login_agent.login(self.http, request)

    @abc.abstractmethod
    async def resolve_club(self, name: str) -> Club:
        """Find the club called exactly ``name``."""

    @abc.abstractmethod
    async def resolve_class(self, club: Club, name: str, start_time: str) -> ResolvedClassOccurrence:
        """Find the occurrence of class ``name`` at ``start_time`` in ``club``."""

    @abc.abstractmethod
    async def submit_booking(self, occurrence: ResolvedClassOccurrence, session: SessionState) -> BookingOutcome:
        """Ask the site to book ``occurrence``."""


def create_gym_client(site: SiteConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> GymClient:
    """Pick the client implementation for the configured site variant."""
    from .api_client import ApiGymClient
    from .timetable_client import TimetableGymClient

    LOGGER.debug("gym_client.create", variant=site.variant, base_url=site.base_url)
    if site.variant == "timetable":
        return TimetableGymClient(site, transport=transport)
    return ApiGymClient(site, transport=transport)
