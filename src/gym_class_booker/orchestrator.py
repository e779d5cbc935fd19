"""The booking workflow: log in, find the club, find the class, book it."""

from __future__ import annotations

import httpx
import structlog

from .booking import precheck
from .errors import ClassNotFound, ClassTimingNotFound, GymSiteError, Stage, StageFailure, TransportError
from .gym_client import GymClient
from .models import BookingOutcome, BookingRequest, BookingResult

LOGGER = structlog.get_logger(__name__)


class BookingWorkflow:
    """
    Runs one booking attempt from start to finish.

    The stages always run in order and the first failure ends the run, so
    ``stage`` after a :class:`StageFailure` names the step that failed.
    Nothing is retried here; retrying means running the whole workflow again.
    """

    def __init__(self, client: GymClient, request: BookingRequest):
        self._client = client
        self._request = request
        self.stage = Stage.INIT

    async def run(self) -> BookingResult:
        request = self._request
        try:
            start_time = request.start_time
        except ValueError as exc:
            LOGGER.error("workflow.bad_date", date=request.date, time=request.time, error=str(exc))
            raise StageFailure(self.stage, exc) from exc

        LOGGER.info(
            "workflow.start",
            club_name=request.club_name,
            class_name=request.class_name,
            start_time=start_time,
        )

        self.stage = Stage.LOGGING_IN
        session = await self._attempt(self._client.login(request))

        self.stage = Stage.RESOLVING_CLUB
        club = await self._attempt(self._client.resolve_club(request.club_name))

        self.stage = Stage.RESOLVING_CLASS
        try:
            occurrence = await self._attempt(self._client.resolve_class(club, request.class_name, start_time))
        except StageFailure as failure:
            if isinstance(failure.cause, (ClassNotFound, ClassTimingNotFound)):
                self.stage = Stage.DONE
                LOGGER.warning("workflow.class_not_found", reason=str(failure.cause))
                return BookingResult(BookingOutcome.NOT_FOUND, request.class_name, start_time, reason=failure)
            raise

        self.stage = Stage.BOOKING
        outcome = await self._attempt(self._book(occurrence, session))

        self.stage = Stage.DONE
        LOGGER.info("workflow.complete", outcome=outcome.value, start_time=occurrence.start_time)
        return BookingResult(outcome, request.class_name, occurrence.start_time, occurrence)

    async def _book(self, occurrence, session) -> BookingOutcome:
        outcome = precheck(occurrence)
        if outcome is not None:
            return outcome
        return await self._client.submit_booking(occurrence, session)

    async def _attempt(self, step):
        try:
            return await step
        except GymSiteError as exc:
            LOGGER.error("workflow.failed", stage=self.stage.value, error=str(exc))
            raise StageFailure(self.stage, exc) from exc
        except httpx.HTTPError as exc:
            LOGGER.error("workflow.failed", stage=self.stage.value, error=str(exc))
            raise StageFailure(self.stage, TransportError(str(exc))) from exc


async def process(client: GymClient, request: BookingRequest) -> BookingResult:
    """Run the booking workflow once with an already opened client."""
    return await BookingWorkflow(client, request).run()
