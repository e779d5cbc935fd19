"""A complete booking run: check the trigger, book, report back."""

from __future__ import annotations

import asyncio
from enum import Enum

import structlog

from .errors import StageFailure
from .gym_client import GymClient
from .inbox import InboxWatcher
from .models import BookingOutcome, BookingRequest
from .notifier import Notifier
from .orchestrator import process

LOGGER = structlog.get_logger(__name__)

GATE_ERROR_PREFIX = "Error checking processing is required: "
BOOKING_ERROR_PREFIX = "Error booking class: "


class JobStatus(str, Enum):
    SKIPPED = "skipped"
    COMPLETED = "completed"
    FAILED = "failed"


async def run_job(
    request: BookingRequest,
    *,
    client: GymClient,
    watcher: InboxWatcher,
    notifier: Notifier,
) -> JobStatus:
    """
    Book the requested class if the trigger says so and report what happened.

    The notifier hears about every run that gets past the trigger check exactly
    once, with either a completion or an error message. The trigger is only
    marked processed after a booking or a waiting list place.
    """
    LOGGER.info("job.start")

    try:
        required = await watcher.processing_required()
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("job.gate_failed", error=str(exc))
        return await _report_error(notifier, f"{GATE_ERROR_PREFIX}{exc}")

    if not required:
        LOGGER.info("job.skipped", reason="processing not required")
        return JobStatus.SKIPPED

    LOGGER.info("job.booking")
    try:
        async with client:
            result = await process(client, request)
    except StageFailure as failure:
        return await _report_error(notifier, f"{BOOKING_ERROR_PREFIX}{failure}")
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("job.unexpected_error", error=str(exc))
        return await _report_error(notifier, f"{BOOKING_ERROR_PREFIX}{exc}")

    message = result.summary
    LOGGER.info("job.result", outcome=result.outcome.value, message=message)

    if result.outcome not in (BookingOutcome.BOOKED, BookingOutcome.WAITING_LIST):
        if result.reason is not None:
            message = f"{BOOKING_ERROR_PREFIX}{result.reason}"
        return await _report_error(notifier, message)

    completion, labelling = await asyncio.gather(
        notifier.send_completion(message),
        watcher.mark_processed(),
        return_exceptions=True,
    )
    status = JobStatus.COMPLETED
    if isinstance(completion, Exception):
        LOGGER.error("job.completion_notice_failed", error=str(completion))
        status = JobStatus.FAILED
    if isinstance(labelling, Exception):
        LOGGER.error("job.mark_processed_failed", error=str(labelling))
        status = JobStatus.FAILED

    LOGGER.info("job.end", status=status.value)
    return status


async def _report_error(notifier: Notifier, message: str) -> JobStatus:
    LOGGER.error("job.error", message=message)
    try:
        await notifier.send_error(message)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("job.error_notice_failed", error=str(exc))
    else:
        LOGGER.info("job.error_notice_sent")
    LOGGER.info("job.end", status=JobStatus.FAILED.value)
    return JobStatus.FAILED
