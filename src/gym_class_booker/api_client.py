"""Client for the JSON API behind the current gym website."""

from __future__ import annotations

from typing import Any, Iterable, Optional

import structlog

from .booking import classify_booking_state
from .dates import same_start_time
from .errors import ClassNotFound, ClassTimingNotFound, ClubNotFound, TransportError
from .gym_client import GymClient
from .models import Availability, BookingOutcome, Club, ResolvedClassOccurrence, SessionState
from .transport import read_json, send

LOGGER = structlog.get_logger(__name__)


class ApiGymClient(GymClient):
    """Looks clubs and classes up through the site's JSON endpoints and books with a POST."""

    async def resolve_club(self, name: str) -> Club:
        LOGGER.info("club.lookup.start", club_name=name)
        response = await send(self.http, "GET", self.site.club_list_uri)
        body = read_json(response)

        club = _find(_data_list(body, "clubs"), lambda item: item.get("name") == name)
        if club is None:
            LOGGER.error("club.lookup.not_found", club_name=name)
            raise ClubNotFound()

        LOGGER.info("club.lookup.success", club_id=club.get("clubId"), club_name=name)
        return Club(name=name, club_id=club.get("clubId"))

    async def resolve_class(self, club: Club, name: str, start_time: str) -> ResolvedClassOccurrence:
        LOGGER.info("class.lookup.start", club_id=club.club_id, class_name=name, start_time=start_time)
        response = await send(self.http, "GET", self.site.class_list_uri, params={"id": club.club_id})
        body = read_json(response)

        found_class = _find(_data_list(body, "classes"), lambda item: item.get("name") == name)
        if found_class is None:
            LOGGER.error("class.lookup.not_found", class_name=name)
            raise ClassNotFound()

        class_id = found_class.get("id")
        timing = _find(
            _data_list(body, "classTimes"),
            lambda item: str(item.get("classId")) == str(class_id)
            and isinstance(item.get("startTime"), str)
            and same_start_time(item["startTime"], start_time),
        )
        if timing is None:
            LOGGER.error("class.lookup.timing_not_found", class_id=class_id, start_time=start_time)
            raise ClassTimingNotFound()

        status = timing.get("status")
        LOGGER.info("class.lookup.success", class_time_id=timing.get("id"), status=status)
        return ResolvedClassOccurrence(
            class_id=timing.get("id"),
            club_id=club.club_id,
            name=name,
            start_time=timing["startTime"],
            availability=Availability.parse(status),
            raw_state=status,
        )

    async def submit_booking(self, occurrence: ResolvedClassOccurrence, session: SessionState) -> BookingOutcome:
        LOGGER.info("booking.submit.start", class_id=occurrence.class_id, club_id=occurrence.club_id)
        response = await send(
            self.http,
            "POST",
            self.site.book_class_uri,
            json={"clubId": str(occurrence.club_id), "classId": occurrence.class_id},
            headers={"dnt": "1", "cookie": session.cookie_header},
        )
        body = read_json(response)

        data = body.get("data")
        if not isinstance(data, dict):
            raise TransportError("Booking response is missing its data", status_code=response.status_code)

        outcome = classify_booking_state(data.get("state"))
        LOGGER.info("booking.submit.result", outcome=outcome.value)
        return outcome


def _data_list(body: dict[str, Any], key: str) -> list[dict[str, Any]]:
    data = body.get("data")
    if not isinstance(data, dict):
        return []
    items = data.get(key)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _find(items: Iterable[dict[str, Any]], predicate) -> Optional[dict[str, Any]]:
    for item in items:
        if predicate(item):
            return item
    return None
