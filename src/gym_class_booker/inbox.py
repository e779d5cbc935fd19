"""Where the signal to book a class comes from."""

from __future__ import annotations

from typing import Protocol

import structlog

LOGGER = structlog.get_logger(__name__)


class InboxWatcher(Protocol):
    """Source of booking triggers, e.g. a mailbox with a notification email."""

    async def processing_required(self) -> bool:
        """True while there is an unprocessed trigger."""
        ...

    async def mark_processed(self) -> None:
        """Record that the trigger has been dealt with."""
        ...


class ManualTrigger:
    """Trigger used when the booker is started by hand or by a scheduler."""

    def __init__(self, label: str = "manual"):
        self.label = label
        self.processed = False

    async def processing_required(self) -> bool:
        return not self.processed

    async def mark_processed(self) -> None:
        self.processed = True
        LOGGER.info("trigger.processed", label=self.label)
