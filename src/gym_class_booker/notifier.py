"""Reporting the result of a booking run."""

from __future__ import annotations

from typing import Optional, Protocol

import httpx
import structlog
from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from .config import Settings

LOGGER = structlog.get_logger(__name__)


class Notifier(Protocol):
    """Somewhere to send the completion or error message of a run."""

    async def send_completion(self, text: str) -> None:
        ...

    async def send_error(self, text: str) -> None:
        ...


class LogNotifier:
    """Notifier that only writes to the log."""

    async def send_completion(self, text: str) -> None:
        LOGGER.info("notify.completion", text=text)

    async def send_error(self, text: str) -> None:
        LOGGER.error("notify.error", text=text)


class TelegramNotifier:
    """Sends run results to a Telegram chat through the Bot API."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        wait: Optional[wait_base] = None,
    ):
        self._settings = settings
        self._transport = transport
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, min=1, max=8)

    async def send_completion(self, text: str) -> None:
        await self._post(f"{self._settings.app_name}: {text}")

    async def send_error(self, text: str) -> None:
        await self._post(f"{self._settings.app_name} error: {text}")

    async def _post(self, text: str) -> None:
        payload = {
            "chat_id": self._settings.telegram_chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        LOGGER.info("telegram.send.start")

        try:
            async for attempt in AsyncRetrying(
                wait=self._wait,
                stop=stop_after_attempt(3),
            ):
                with attempt:
                    async with httpx.AsyncClient(
                        base_url=self._settings.telegram_api_endpoint,
                        timeout=15.0,
                        transport=self._transport,
                    ) as client:
                        response = await client.post("/sendMessage", json=payload)
                    response.raise_for_status()
        except RetryError as exc:
            last = exc.last_attempt.exception()
            LOGGER.error("telegram.send.failed", error=str(last))
            raise RuntimeError(f"Telegram send failed: {last}") from exc

        LOGGER.info("telegram.send.success")


def build_notifier(settings: Settings) -> Notifier:
    """Telegram when it is configured, otherwise just the log."""
    if settings.telegram_enabled:
        return TelegramNotifier(settings)
    LOGGER.warning("notify.telegram_disabled")
    return LogNotifier()
