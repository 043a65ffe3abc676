"""
Contract between the policy engine and the notification service.

The engine only ever talks to a NotificationStore, so a real scheduler-backed
center and an in-memory test double are interchangeable.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from .categories import NotificationCategory
from .models import NotificationItem, NotificationRequest
from .triggers import Trigger


@runtime_checkable
class NotificationStore(Protocol):
    """Read/write primitives the policy engine needs. Every call hits the live service."""

    async def list_pending(self) -> list[NotificationItem]: ...

    async def list_delivered(self) -> list[NotificationItem]: ...

    async def remove_pending(self, identifiers: set[str]) -> None: ...

    async def remove_delivered(self, identifiers: set[str]) -> None: ...

    async def add(self, request: NotificationRequest, trigger: Trigger) -> None:
        """
        Enqueue a request with the service.

        Raises:
            ServiceFailure: If the service refuses the request
        """
        ...


@runtime_checkable
class NotificationCenter(NotificationStore, Protocol):
    """A NotificationStore that also keeps the app's notification categories."""

    async def register_categories(
        self, categories: Iterable[NotificationCategory]
    ) -> None: ...

    async def categories(self) -> list[NotificationCategory]: ...
