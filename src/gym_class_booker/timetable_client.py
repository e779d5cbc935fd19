"""Client for the legacy gym website, which embeds its timetable in the club page."""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import structlog
from bs4 import BeautifulSoup

from .booking import classify_booking_title
from .config import SiteConfig
from .errors import ClassNotFound, ClubNotFound, TransportError
from .gym_client import GymClient
from .models import Availability, BookingOutcome, Club, ResolvedClassOccurrence, SessionState
from .transport import ensure_ok, send
from .utils import club_slug, normalise_whitespace

LOGGER = structlog.get_logger(__name__)

TIMETABLE_SELECTOR = "script.timetable_data"
BOOKING_TITLE_SELECTOR = "h1.class-booking__title"


class TimetableGymClient(GymClient):
    """Scrapes the club timetable page and books through the timetable widget."""

    def __init__(self, site: SiteConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(site, transport=transport)
        self._classes: list[dict[str, Any]] = []
        self._club: Optional[Club] = None

    async def resolve_club(self, name: str) -> Club:
        slug = club_slug(name)
        uri = self.site.timetable_uri.format(slug=slug)
        LOGGER.info("timetable.load.start", uri=uri)

        response = ensure_ok(await send(self.http, "GET", uri))
        self._classes = parse_timetable(response.text)
        if not self._classes:
            LOGGER.error("timetable.load.unexpected", uri=uri)
            raise ClubNotFound("Timetable not as expected")

        club_id = next((c.get("clubId") for c in self._classes if c.get("clubId") is not None), None)
        LOGGER.info("timetable.load.success", classes=len(self._classes), club_id=club_id)
        self._club = Club(name=name, club_id=club_id, slug=slug)
        return self._club

    async def resolve_class(self, club: Club, name: str, start_time: str) -> ResolvedClassOccurrence:
        LOGGER.info("class.lookup.start", class_name=name, start_time=start_time)
        for entry in self._classes:
            if entry.get("timetableName") == name and entry.get("startTime") == start_time:
                availability, raw_state = timetable_availability(entry)
                LOGGER.info("class.lookup.success", class_id=entry.get("classId"), state=raw_state)
                return ResolvedClassOccurrence(
                    class_id=entry.get("classId"),
                    club_id=entry.get("clubId", club.club_id),
                    name=name,
                    start_time=start_time,
                    availability=availability,
                    raw_state=raw_state,
                )

        LOGGER.error("class.lookup.not_found", class_name=name, start_time=start_time)
        raise ClassNotFound("Class not found")

    async def submit_booking(self, occurrence: ResolvedClassOccurrence, session: SessionState) -> BookingOutcome:
        LOGGER.info("booking.submit.start", class_id=occurrence.class_id, club_id=occurrence.club_id)
        response = await send(
            self.http,
            "GET",
            self.site.booking_uri,
            params={
                "classId": occurrence.class_id,
                "clubId": occurrence.club_id,
                "clubName": self._club_name,
                "renderingId": self.site.rendering_id,
            },
            headers={"cookie": session.cookie_header},
        )
        ensure_ok(response)

        title = booking_title(response.text)
        LOGGER.info("booking.submit.response", title=title)
        outcome = classify_booking_title(title)
        LOGGER.info("booking.submit.result", outcome=outcome.value)
        return outcome

    @property
    def _club_name(self) -> Optional[str]:
        return self._club.name if self._club else None


def parse_timetable(html: str) -> list[dict[str, Any]]:
    """Return every class listed in the page's embedded timetable blobs."""
    soup = BeautifulSoup(html, "html.parser")
    classes: list[dict[str, Any]] = []
    for script in soup.select(TIMETABLE_SELECTOR):
        try:
            payload = json.loads(script.string or script.get_text())
        except json.JSONDecodeError as exc:
            raise TransportError("Timetable data is not valid JSON") from exc
        entries = payload.get("classes") if isinstance(payload, dict) else None
        if isinstance(entries, list):
            classes.extend(entry for entry in entries if isinstance(entry, dict))
    return classes


def timetable_availability(entry: dict[str, Any]) -> tuple[Availability, Optional[str]]:
    """Availability of a timetable entry, preferring the member's own participation."""
    participation = entry.get("participationState")
    if Availability.parse(participation) is Availability.BOOKED:
        return Availability.BOOKED, participation
    state = entry.get("classState")
    return Availability.parse(state), state


def booking_title(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    heading = soup.select_one(BOOKING_TITLE_SELECTOR)
    if heading is None:
        return ""
    return normalise_whitespace(heading.get_text())
