"""Exceptions raised while talking to the gym website."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Stage(str, Enum):
    """Steps of a single booking run, in the order they happen."""

    INIT = "init"
    LOGGING_IN = "logging_in"
    RESOLVING_CLUB = "resolving_club"
    RESOLVING_CLASS = "resolving_class"
    BOOKING = "booking"
    DONE = "done"

    @property
    def label(self) -> str:
        return STAGE_LABELS[self]


STAGE_LABELS = {
    Stage.INIT: "Could not start",
    Stage.LOGGING_IN: "Could not log in",
    Stage.RESOLVING_CLUB: "Could not get club",
    Stage.RESOLVING_CLASS: "Could not get class",
    Stage.BOOKING: "Could not book class",
    Stage.DONE: "Finished",
}


class GymSiteError(Exception):
    """Base class for everything that can go wrong on the gym website."""

    default_message = "Gym website error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class FormFetchFailed(GymSiteError):
    default_message = "Could not get login form"


class UnexpectedFormShape(GymSiteError):
    default_message = "Login form is not as expected"


class Unauthenticated(GymSiteError):
    default_message = "Login unsuccessful"


class ClubNotFound(GymSiteError):
    default_message = "Club Id not found"


class ClassNotFound(GymSiteError):
    default_message = "Class Id not found"


class ClassTimingNotFound(GymSiteError):
    default_message = "Class timing not found"


class UnknownBookingState(GymSiteError):
    """The booking response did not match any known state."""

    def __init__(self, state: object):
        self.state = state
        super().__init__(f"Unknown booking status: {state}")


class UnknownClassState(GymSiteError):
    """The class listing reported an availability we do not understand."""

    def __init__(self, state: object):
        self.state = state
        super().__init__(f"Unknown class status: {state}")


class TransportError(GymSiteError):
    """HTTP failure: timeout, connection problem, bad status or an ``error`` payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class StageFailure(Exception):
    """A booking run stopped at ``stage`` because of ``cause``."""

    def __init__(self, stage: Stage, cause: Exception):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage.label}: {cause}")
