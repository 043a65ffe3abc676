"""
Admission policy engine.

Decides whether a notification request is accepted, adjusted or rejected,
using a live view of the notification service's pending and delivered queues.
Checks always run in this order:

1. Capacity    - global ceiling on pending items (MaxPendingCountReached)
2. Duplicates  - identifier already pending (DuplicateIdentifier)
3. Coalescing  - retract older items sharing the request's thread
4. Clamping    - shorten title and body
5. Enqueue     - map the schedule to a trigger and add it to the service

Rejections happen before anything is mutated. Items retracted in step 3 stay
retracted if step 5 fails.
"""

import logging
from dataclasses import dataclass, replace

import sentry_sdk

from .errors import DuplicateIdentifier, MaxPendingCountReached, ServiceFailure
from .gateway import NotificationStore
from .models import NotificationContent, NotificationItem, NotificationRequest
from .triggers import Trigger, make_trigger

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 60
BODY_MAX_LENGTH = 200


def clamp_content(
    content: NotificationContent,
    title_limit: int = TITLE_MAX_LENGTH,
    body_limit: int = BODY_MAX_LENGTH,
) -> NotificationContent:
    """
    Truncate title and body to their limits.

    Limits count code points, not user-perceived characters, so a grapheme
    built from several code points (a flag or a ZWJ emoji sequence) can be
    cut in half at the boundary.

    Returns the same object when nothing needs shortening, so clamping is
    idempotent.
    """
    if len(content.title) <= title_limit and len(content.body) <= body_limit:
        return content
    return replace(
        content,
        title=content.title[:title_limit],
        body=content.body[:body_limit],
    )


def _same_thread(
    items: list[NotificationItem], thread_id: str, exclude_identifier: str
) -> frozenset[str]:
    return frozenset(
        item.identifier
        for item in items
        if item.thread_id == thread_id and item.identifier != exclude_identifier
    )


@dataclass(frozen=True)
class Admission:
    """Outcome of a successful admission."""

    request: NotificationRequest  # as enqueued, after clamping
    trigger: Trigger
    retracted_pending: frozenset[str] = frozenset()
    retracted_delivered: frozenset[str] = frozenset()


class PolicyEngine:
    """
    Runs the admission pipeline against a NotificationStore.

    Holds no state between calls: every admission queries the store afresh.
    Concurrent admissions of the same identifier are not fenced against each
    other; both may see "not pending" and both may be added.
    """

    def __init__(self, store: NotificationStore, tz_name: str | None = None):
        self.store = store
        self.tz_name = tz_name

    async def admit(self, request: NotificationRequest) -> Admission:
        """
        Admit a request, applying its policy.

        Raises:
            MaxPendingCountReached: Pending count is at or above the policy limit
            DuplicateIdentifier: The identifier is already pending
            ServiceFailure: The store failed to enqueue the adjusted request
        """
        policy = request.policy
        pending: list[NotificationItem] | None = None

        # 1. Capacity (counts every pending item, not just this thread)
        if policy.max_pending_count is not None:
            pending = await self.store.list_pending()
            if len(pending) >= policy.max_pending_count:
                logger.info(
                    f"Rejected {request.identifier}: {len(pending)} pending, "
                    f"limit {policy.max_pending_count}"
                )
                raise MaxPendingCountReached(len(pending), policy.max_pending_count)

        # 2. Duplicates (pending only; delivered items may share the identifier)
        if policy.avoid_duplicates:
            if pending is None:
                pending = await self.store.list_pending()
            if any(item.identifier == request.identifier for item in pending):
                logger.info(f"Rejected {request.identifier}: already pending")
                raise DuplicateIdentifier(request.identifier)

        # 3. Coalescing
        retracted_pending: frozenset[str] = frozenset()
        retracted_delivered: frozenset[str] = frozenset()
        thread_id = request.content.thread_id
        if policy.coalesce_by_thread_id and thread_id:
            if pending is None:
                pending = await self.store.list_pending()
            retracted_pending = _same_thread(pending, thread_id, request.identifier)
            if retracted_pending:
                await self.store.remove_pending(set(retracted_pending))

            delivered = await self.store.list_delivered()
            retracted_delivered = _same_thread(delivered, thread_id, request.identifier)
            if retracted_delivered:
                await self.store.remove_delivered(set(retracted_delivered))

            if retracted_pending or retracted_delivered:
                logger.info(
                    f"Coalesced thread {thread_id} for {request.identifier}: "
                    f"retracted {len(retracted_pending)} pending, "
                    f"{len(retracted_delivered)} delivered"
                )

        # 4. Clamping
        adjusted = request
        if policy.clamp_text_length:
            clamped = clamp_content(request.content)
            if clamped is not request.content:
                adjusted = replace(request, content=clamped)

        # 5. Trigger conversion + enqueue
        trigger = make_trigger(adjusted.schedule, self.tz_name)
        try:
            await self.store.add(adjusted, trigger)
        except ServiceFailure as e:
            logger.error(f"Notification service rejected {request.identifier}: {e}")
            sentry_sdk.capture_exception(e)
            raise
        except Exception as e:
            logger.error(f"Failed to enqueue {request.identifier}: {e}")
            sentry_sdk.capture_exception(e)
            raise ServiceFailure(str(e)) from e

        logger.info(f"Enqueued notification {request.identifier}")
        return Admission(
            request=adjusted,
            trigger=trigger,
            retracted_pending=retracted_pending,
            retracted_delivered=retracted_delivered,
        )
