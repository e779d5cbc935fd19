"""Entry point for the gym class booker."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional

import structlog

from .config import Settings
from .gym_client import create_gym_client
from .inbox import ManualTrigger
from .job import JobStatus, run_job
from .notifier import build_notifier


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog + stdlib logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


LOGGER = structlog.get_logger(__name__)


async def run(settings: Settings) -> JobStatus:
    """Book the configured class once."""
    client = create_gym_client(settings.site_config())
    return await run_job(
        settings.booking_request(),
        client=client,
        watcher=ManualTrigger(label=settings.app_name),
        notifier=build_notifier(settings),
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """CLI argument parsing."""
    parser = argparse.ArgumentParser(description="Book a class at the gym.")
    parser.add_argument("--variant", choices=("api", "timetable"), help="Which version of the gym website to use.")
    parser.add_argument("--date", help='Class date (YYYY-MM-DD) or "one week later".')
    parser.add_argument("--time", help="Class start time (HH:MM).")
    parser.add_argument("--class-name", help="Class name exactly as shown in the timetable.")
    parser.add_argument("--debug", action="store_true", help="Log at debug level.")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment, with command line overrides on top."""
    overrides = {
        "variant": args.variant,
        "class_date": args.date,
        "class_time": args.time,
        "class_name": args.class_name,
    }
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


def cli(argv: Optional[list[str]] = None) -> int:
    """Console script entrypoint."""
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.INFO)

    try:
        settings = load_settings(args)
        settings.booking_request()
    except Exception as exc:  # pragma: no cover - startup validation
        LOGGER.exception("settings.error", error=str(exc))
        return 2

    try:
        status = asyncio.run(run(settings))
    except Exception as exc:  # pragma: no cover - top level
        LOGGER.exception("booker.failed", error=str(exc))
        return 1

    LOGGER.info("booker.finished", status=status.value)
    return 0 if status in (JobStatus.COMPLETED, JobStatus.SKIPPED) else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(cli())
