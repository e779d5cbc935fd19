"""Interpreting class availability and booking responses."""

from __future__ import annotations

import re
from typing import Optional

import structlog

from .errors import UnknownBookingState, UnknownClassState
from .models import Availability, BookingOutcome, ResolvedClassOccurrence

LOGGER = structlog.get_logger(__name__)

BOOKED_TITLE = "You're booked"
WAITING_LIST_TITLE = re.compile(r"You're number \d+ on the waiting list")

BOOKING_STATES = {
    "BOOKED": BookingOutcome.BOOKED,
    "OVERBOOKED_WAITINGLIST": BookingOutcome.WAITING_LIST,
}


def precheck(occurrence: ResolvedClassOccurrence) -> Optional[BookingOutcome]:
    """
    Decide whether a booking request is worth sending.

    Returns the final outcome when the class is full or already booked, and
    ``None`` when the booking should go ahead.
    """
    availability = occurrence.availability
    if availability is Availability.FULL:
        LOGGER.info("booking.precheck.full", class_id=occurrence.class_id)
        return BookingOutcome.FULL
    if availability is Availability.BOOKED:
        LOGGER.info("booking.precheck.already_booked", class_id=occurrence.class_id)
        return BookingOutcome.BOOKED
    if availability in (Availability.AVAILABLE, Availability.WAITLIST):
        return None
    raise UnknownClassState(occurrence.raw_state)


def classify_booking_state(state: object) -> BookingOutcome:
    """Map the JSON API's ``data.state`` onto an outcome."""
    try:
        return BOOKING_STATES[state]  # type: ignore[index]
    except (KeyError, TypeError):
        raise UnknownBookingState(state) from None


def classify_booking_title(title: str) -> BookingOutcome:
    """Map the heading of the legacy booking confirmation page onto an outcome."""
    if title == BOOKED_TITLE:
        return BookingOutcome.BOOKED
    if WAITING_LIST_TITLE.search(title):
        return BookingOutcome.WAITING_LIST
    raise UnknownBookingState(title)
