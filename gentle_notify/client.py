"""
Caller-facing notification API.

A NotificationClient is built around an explicit NotificationCenter. Nothing
is shared implicitly: tests and callers pass the center they want, and
``create_default_client`` covers the usual scheduler-backed setup.
"""

import logging
from collections.abc import Iterable
from datetime import timedelta

from .categories import NotificationCategory
from .center import SchedulerNotificationCenter
from .config import NotifyConfig
from .enums import InterruptionLevel
from .gateway import NotificationCenter
from .models import (
    NotificationContent,
    NotificationItem,
    NotificationRequest,
    TimeInterval,
)
from .policy import PolicyEngine

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_PLACEHOLDER = "Reminder"


class NotificationClient:
    def __init__(
        self,
        center: NotificationCenter,
        engine: PolicyEngine | None = None,
        tz_name: str | None = None,
    ):
        self.center = center
        self.engine = engine or PolicyEngine(center, tz_name=tz_name)

    async def schedule(self, request: NotificationRequest) -> str:
        """
        Admit a request through its policy and enqueue it.

        Returns:
            The request's identifier

        Raises:
            MaxPendingCountReached, DuplicateIdentifier, ServiceFailure
        """
        admission = await self.engine.admit(request)
        return admission.request.identifier

    async def schedule_simple(
        self,
        title: str,
        body: str,
        offset: timedelta = timedelta(seconds=1),
        thread_id: str | None = None,
        interruption_level: InterruptionLevel = InterruptionLevel.active,
    ) -> str:
        """
        Schedule a one-shot reminder with the default policy.

        Previews are hidden behind a generic "Reminder" placeholder.
        """
        content = NotificationContent(
            title=title,
            body=body,
            thread_id=thread_id,
            interruption_level=interruption_level,
            hidden_preview_placeholder=DEFAULT_PREVIEW_PLACEHOLDER,
        )
        request = NotificationRequest(
            content=content,
            schedule=TimeInterval(offset, repeats=False),
        )
        return await self.schedule(request)

    async def cancel(self, identifiers: Iterable[str]) -> None:
        """Remove pending notifications. Unknown identifiers are ignored."""
        identifiers = set(identifiers)
        if identifiers:
            await self.center.remove_pending(identifiers)

    async def cancel_all(self) -> int:
        """
        Remove every pending notification.

        Returns:
            Number of notifications that were pending
        """
        pending = await self.center.list_pending()
        if pending:
            await self.center.remove_pending({item.identifier for item in pending})
        logger.info(f"Cancelled {len(pending)} pending notifications")
        return len(pending)

    async def pending(self) -> list[NotificationItem]:
        return await self.center.list_pending()

    async def delivered(self) -> list[NotificationItem]:
        return await self.center.list_delivered()

    async def register_categories(self, *categories: NotificationCategory) -> None:
        await self.center.register_categories(categories)

    async def categories(self) -> list[NotificationCategory]:
        return await self.center.categories()


def create_default_client(
    config: NotifyConfig | None = None,
) -> tuple[NotificationClient, SchedulerNotificationCenter]:
    """
    Build a client over a scheduler-backed center.

    The center is returned too so the caller can start and shut it down.

    Args:
        config: Settings to use; defaults to NotifyConfig.from_env()
    """
    config = config or NotifyConfig.from_env()
    center = SchedulerNotificationCenter(config)
    return NotificationClient(center, tz_name=config.timezone_name), center
