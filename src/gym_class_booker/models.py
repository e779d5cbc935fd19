"""Shared data models used across the booker."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

from .dates import resolve_start_time
from .errors import StageFailure


class BookingRequest(BaseModel):
    """What to book and who to book it for."""

    model_config = ConfigDict(frozen=True)

    club_name: str
    class_name: str
    date: str
    time: str
    username: str
    password: SecretStr

    @field_validator("club_name", "class_name", "date", "time", "username", "password", mode="before")
    @classmethod
    def not_blank(cls, value: object, info) -> object:
        """Reject missing or empty parameters."""
        raw = value.get_secret_value() if isinstance(value, SecretStr) else value
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise ValueError(f"Expected parameter {info.field_name} not supplied")
        return value

    @property
    def start_time(self) -> str:
        return resolve_start_time(self.date, self.time)


class Availability(str, Enum):
    """Seat availability reported for a class occurrence."""

    AVAILABLE = "Available"
    WAITLIST = "Waitlist"
    FULL = "Full"
    BOOKED = "Booked"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Availability":
        if raw is None:
            return cls.UNKNOWN
        return _AVAILABILITY_ALIASES.get(str(raw).strip().lower(), cls.UNKNOWN)


_AVAILABILITY_ALIASES = {
    "available": Availability.AVAILABLE,
    "bookable": Availability.AVAILABLE,
    "waitlist": Availability.WAITLIST,
    "full": Availability.FULL,
    "booked": Availability.BOOKED,
}


class BookingOutcome(str, Enum):
    """Terminal classification of a booking attempt."""

    BOOKED = "booked"
    WAITING_LIST = "waitingList"
    FULL = "full"
    NOT_FOUND = "notFound"


@dataclass(frozen=True)
class Club:
    """A club as the site identifies it."""

    name: str
    club_id: Optional[Union[int, str]] = None
    slug: Optional[str] = None


@dataclass(frozen=True)
class ResolvedClassOccurrence:
    """A single scheduled class, matched by name and start time."""

    class_id: Union[int, str]
    club_id: Union[int, str]
    name: str
    start_time: str
    availability: Availability
    raw_state: Optional[str] = None


@dataclass(frozen=True)
class SessionState:
    """Authentication cookies obtained by logging in."""

    cookies: Mapping[str, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.cookies)

    @property
    def cookie_header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self.cookies.items())


@dataclass(frozen=True)
class BookingResult:
    """Result of one run of the booking workflow."""

    outcome: BookingOutcome
    class_name: str
    start_time: str
    occurrence: Optional[ResolvedClassOccurrence] = None
    reason: Optional[StageFailure] = None

    @property
    def summary(self) -> str:
        return f"{self.class_name} ({self.start_time}) booking status: {self.outcome.value}"
