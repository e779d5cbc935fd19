from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from conftest import login_routes, read_data
from gym_class_booker.errors import (
    ClassTimingNotFound,
    ClubNotFound,
    Stage,
    StageFailure,
    TransportError,
    Unauthenticated,
    UnknownClassState,
)
from gym_class_booker.gym_client import GymClient, create_gym_client
from gym_class_booker.models import (
    Availability,
    BookingOutcome,
    BookingRequest,
    Club,
    ResolvedClassOccurrence,
    SessionState,
)
from gym_class_booker.orchestrator import BookingWorkflow, process


def resolved(availability=Availability.AVAILABLE, raw_state="Available"):
    return ResolvedClassOccurrence(
        class_id=1003,
        club_id=42,
        name="Core",
        start_time="2018-02-08T13:05:00.000",
        availability=availability,
        raw_state=raw_state,
    )


@pytest.fixture
def gym_client():
    """Gym client whose every call succeeds."""
    client = Mock(spec=GymClient)
    client.login = AsyncMock(return_value=SessionState(cookies={"va-auth": "x"}))
    client.resolve_club = AsyncMock(return_value=Club("Fiction Club", 42))
    client.resolve_class = AsyncMock(return_value=resolved())
    client.submit_booking = AsyncMock(return_value=BookingOutcome.BOOKED)
    return client


async def test_runs_every_stage_in_order(gym_client, booking_request):
    workflow = BookingWorkflow(gym_client, booking_request)

    result = await workflow.run()

    assert result.outcome is BookingOutcome.BOOKED
    assert result.start_time == "2018-02-08T13:05:00.000"
    assert result.summary == "Core (2018-02-08T13:05:00.000) booking status: booked"
    assert workflow.stage is Stage.DONE
    gym_client.resolve_club.assert_awaited_once_with("Fiction Club")
    gym_client.resolve_class.assert_awaited_once_with(Club("Fiction Club", 42), "Core", "2018-02-08T13:05:00")
    gym_client.submit_booking.assert_awaited_once_with(resolved(), SessionState(cookies={"va-auth": "x"}))


async def test_login_failure_stops_everything(gym_client, booking_request):
    gym_client.login.side_effect = Unauthenticated("Login cookie va-auth not found")
    workflow = BookingWorkflow(gym_client, booking_request)

    with pytest.raises(StageFailure) as excinfo:
        await workflow.run()

    assert excinfo.value.stage is Stage.LOGGING_IN
    assert str(excinfo.value) == "Could not log in: Login cookie va-auth not found"
    assert workflow.stage is Stage.LOGGING_IN
    gym_client.resolve_club.assert_not_awaited()
    gym_client.resolve_class.assert_not_awaited()
    gym_client.submit_booking.assert_not_awaited()


async def test_club_failure_stops_class_and_booking(gym_client, booking_request):
    gym_client.resolve_club.side_effect = ClubNotFound()

    with pytest.raises(StageFailure) as excinfo:
        await process(gym_client, booking_request)

    assert excinfo.value.stage is Stage.RESOLVING_CLUB
    assert isinstance(excinfo.value.cause, ClubNotFound)
    gym_client.resolve_class.assert_not_awaited()
    gym_client.submit_booking.assert_not_awaited()


async def test_missing_class_is_not_found(gym_client, booking_request):
    gym_client.resolve_class.side_effect = ClassTimingNotFound()

    result = await process(gym_client, booking_request)

    assert result.outcome is BookingOutcome.NOT_FOUND
    assert result.occurrence is None
    assert result.reason.stage is Stage.RESOLVING_CLASS
    assert isinstance(result.reason.cause, ClassTimingNotFound)
    gym_client.submit_booking.assert_not_awaited()


async def test_class_lookup_transport_error_is_a_failure(gym_client, booking_request):
    gym_client.resolve_class.side_effect = TransportError("Resp statusCode 502", status_code=502)

    with pytest.raises(StageFailure) as excinfo:
        await process(gym_client, booking_request)

    assert excinfo.value.stage is Stage.RESOLVING_CLASS
    assert str(excinfo.value) == "Could not get class: Resp statusCode 502"


@pytest.mark.parametrize(
    "availability,expected",
    [(Availability.FULL, BookingOutcome.FULL), (Availability.BOOKED, BookingOutcome.BOOKED)],
)
async def test_precheck_skips_booking(gym_client, booking_request, availability, expected):
    gym_client.resolve_class.return_value = resolved(availability, availability.value)

    result = await process(gym_client, booking_request)

    assert result.outcome is expected
    gym_client.submit_booking.assert_not_awaited()


async def test_unknown_class_state_fails_in_booking_stage(gym_client, booking_request):
    gym_client.resolve_class.return_value = resolved(Availability.UNKNOWN, "Cancelled")

    with pytest.raises(StageFailure) as excinfo:
        await process(gym_client, booking_request)

    assert excinfo.value.stage is Stage.BOOKING
    assert isinstance(excinfo.value.cause, UnknownClassState)
    gym_client.submit_booking.assert_not_awaited()


async def test_raw_httpx_errors_are_wrapped(gym_client, booking_request):
    gym_client.submit_booking.side_effect = httpx.ConnectError("connection refused")

    with pytest.raises(StageFailure) as excinfo:
        await process(gym_client, booking_request)

    assert excinfo.value.stage is Stage.BOOKING
    assert isinstance(excinfo.value.cause, TransportError)


async def test_invalid_date_fails_before_login(gym_client):
    request = BookingRequest(
        club_name="Fiction Club",
        class_name="Core",
        date="2018-13-45",
        time="13:05",
        username="me",
        password="secret",
    )

    with pytest.raises(StageFailure) as excinfo:
        await process(gym_client, request)

    assert excinfo.value.stage is Stage.INIT
    assert isinstance(excinfo.value.cause, ValueError)
    gym_client.login.assert_not_awaited()


async def test_full_class_end_to_end_never_calls_booking(api_site, fake_site, booking_request):
    login_routes(fake_site)
    fake_site.add(
        "GET",
        "/api/club/getclubs",
        httpx.Response(200, json={"data": {"clubs": [{"clubId": 42, "name": "Fiction Club"}]}}),
    )
    fake_site.add(
        "GET",
        "/api/club/getclubtimetable",
        httpx.Response(
            200,
            json={
                "data": {
                    "classes": [{"id": 901, "name": "Core"}],
                    "classTimes": [
                        {"id": 1003, "classId": 901, "startTime": "2018-02-08T13:05:00", "status": "Full"}
                    ],
                }
            },
        ),
    )
    fake_site.add("POST", "/api/booking/bookclass", httpx.Response(200, json={"data": {"state": "BOOKED"}}))

    async with create_gym_client(api_site, transport=fake_site.transport) as client:
        result = await process(client, booking_request)

    assert result.outcome is BookingOutcome.FULL
    assert len(fake_site.calls("POST", "/api/booking/bookclass")) == 0


async def test_timetable_end_to_end(timetable_site, fake_site):
    login_routes(
        fake_site,
        form="login_form_legacy.html",
        cookies=[".ASPXAUTH=abcdefg; path=/; HttpOnly", "_user=abcdefg"],
    )
    fake_site.add("GET", "/clubs/fiction-club/timetable", httpx.Response(200, text=read_data("timetable.html")))
    fake_site.add(
        "GET",
        "/api/sitecore/VaClub/ViewTimetableBook",
        httpx.Response(200, text=read_data("booking_waiting_list.html")),
    )
    request = BookingRequest(
        club_name="Fiction Club",
        class_name="Row",
        date="2018-02-08",
        time="12:30",
        username="HulkHogan",
        password="testPassword",
    )

    async with create_gym_client(timetable_site, transport=fake_site.transport) as client:
        result = await process(client, request)

    assert result.outcome is BookingOutcome.WAITING_LIST
    [booking] = fake_site.calls("GET", "/api/sitecore/VaClub/ViewTimetableBook")
    assert ".ASPXAUTH=abcdefg" in booking.headers["cookie"]
