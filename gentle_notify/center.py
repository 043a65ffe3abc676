"""
APScheduler-backed notification center.

Pending notifications are scheduler jobs, persisted to the configured database
so they survive restarts (or kept in memory when no database is set). When a
job fires, the notification is delivered through Discord (or logged) and
remembered in a bounded, in-memory delivered history.

Job payloads carry everything delivery needs, so the job function stays a
plain module-level coroutine that the job store can persist by reference.
"""

import logging
from collections import OrderedDict
from collections.abc import Iterable

import sentry_sdk
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .categories import NotificationCategory
from .channels.discord import DiscordTarget, is_bot_configured, send_to_target
from .config import NotifyConfig
from .errors import ServiceFailure
from .models import NotificationItem, NotificationRequest
from .templates import render_notification
from .timezone import get_timezone
from .triggers import Trigger, to_apscheduler_trigger

logger = logging.getLogger(__name__)


JOB_DEFAULTS = {
    "coalesce": True,  # Combine missed runs into one
    "max_instances": 1,
    "misfire_grace_time": 3600,  # Allow 1 hour late delivery
}

JOBSTORE_TABLE = "notification_jobs"


# =============================================================================
# Job execution
# =============================================================================


async def deliver_notification(payload: dict) -> dict:
    """
    Deliver a notification whose trigger fired.

    This is the job function called by APScheduler. A ``discord_user_id`` in
    the content's user_info routes the message to that user's DMs; otherwise
    it goes to the center's Discord channel. Without a Discord bot the
    delivery is logged.

    Returns:
        The payload plus a ``delivery`` entry (channel, sent, reason), so the
        center can record the delivery
    """
    identifier = payload["identifier"]
    content = payload["content"]
    target = DiscordTarget.from_payload(payload)

    if is_bot_configured() and target.kind:
        message = render_notification(content, "discord", payload.get("action_titles"))
        result = await send_to_target(target, message)
        if not result.sent:
            logger.warning(
                f"Discord {target.kind} delivery failed for notification "
                f"{identifier}: {result.reason.value}"
            )
        delivery = {"channel": f"discord_{target.kind}", **result.to_payload()}
    else:
        logger.info(
            f"Delivered notification {identifier}: {render_notification(content, 'log')}"
        )
        delivery = {"channel": "log", "sent": True, "reason": None}

    return {**payload, "delivery": delivery}


# =============================================================================
# Notification center
# =============================================================================


def _create_scheduler(database_url: str, tz_name: str) -> AsyncIOScheduler:
    jobstores = {}
    if database_url:
        jobstores["default"] = SQLAlchemyJobStore(
            url=database_url,
            tablename=JOBSTORE_TABLE,
        )
    return AsyncIOScheduler(
        jobstores=jobstores,
        job_defaults=JOB_DEFAULTS,
        timezone=get_timezone(tz_name),
    )


class SchedulerNotificationCenter:
    """
    Notification service implemented on an AsyncIOScheduler.

    Satisfies the NotificationCenter protocol. Call ``start()`` from a running
    event loop (e.g., in the FastAPI lifespan) before scheduling.
    """

    def __init__(
        self,
        config: NotifyConfig | None = None,
        scheduler: AsyncIOScheduler | None = None,
    ):
        self.config = config or NotifyConfig()
        self._delivered: OrderedDict[str, NotificationItem] = OrderedDict()
        self._categories: dict[str, NotificationCategory] = {}
        self._scheduler = scheduler or _create_scheduler(
            self.config.database_url, self.config.timezone_name
        )
        self._scheduler.add_listener(
            self._on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR
        )

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    @property
    def running(self) -> bool:
        return self._scheduler.running

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self, paused: bool = False, skip_if_db_unavailable: bool = True) -> None:
        """
        Start the scheduler.

        Args:
            paused: Start without firing jobs until ``resume()`` is called
            skip_if_db_unavailable: If the job store database times out, fall
                back to an in-memory scheduler instead of failing
        """
        if self._scheduler.running:
            return

        try:
            self._scheduler.start(paused=paused)
            logger.info("Notification center started")
        except Exception as e:
            if (
                skip_if_db_unavailable
                and self.config.database_url
                and "timeout" in str(e).lower()
            ):
                logger.warning(
                    "Could not connect to job store database: timeout expired. "
                    "Notification center running in memory-only mode (jobs won't persist)"
                )
                self._scheduler = _create_scheduler("", self.config.timezone_name)
                self._scheduler.add_listener(
                    self._on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR
                )
                self._scheduler.start(paused=paused)
                logger.info("Notification center started (memory-only)")
            else:
                raise

    def resume(self) -> None:
        self._scheduler.resume()

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the scheduler gracefully."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Notification center stopped")

    # -------------------------------------------------------------------------
    # NotificationStore
    # -------------------------------------------------------------------------

    async def list_pending(self) -> list[NotificationItem]:
        items = []
        for job in self._scheduler.get_jobs():
            payload = job.kwargs.get("payload") or {}
            items.append(
                NotificationItem(identifier=job.id, thread_id=payload.get("thread_id"))
            )
        return items

    async def list_delivered(self) -> list[NotificationItem]:
        return list(self._delivered.values())

    async def remove_pending(self, identifiers: set[str]) -> None:
        for identifier in identifiers:
            try:
                self._scheduler.remove_job(identifier)
            except JobLookupError:
                pass  # Already fired or cancelled
        logger.info(f"Removed pending notifications: {sorted(identifiers)}")

    async def remove_delivered(self, identifiers: set[str]) -> None:
        for identifier in identifiers:
            self._delivered.pop(identifier, None)
        logger.info(f"Removed delivered notifications: {sorted(identifiers)}")

    async def add(self, request: NotificationRequest, trigger: Trigger) -> None:
        """
        Schedule a job for the request. An existing job with the same
        identifier is replaced.

        Raises:
            ServiceFailure: If the trigger never fires, its fire time is out of
                datetime range, or the scheduler refuses the job
        """
        try:
            scheduler_trigger = to_apscheduler_trigger(
                trigger, self.config.timezone_name
            )
        except OverflowError as e:
            raise ServiceFailure(
                f"Trigger for notification {request.identifier} is out of range"
            ) from e
        if scheduler_trigger is None:
            raise ServiceFailure(
                f"Trigger for notification {request.identifier} never fires"
            )

        try:
            self._scheduler.add_job(
                deliver_notification,
                trigger=scheduler_trigger,
                id=request.identifier,
                name=request.content.title,
                replace_existing=True,
                kwargs={"payload": self._build_payload(request)},
            )
        except Exception as e:
            raise ServiceFailure(
                f"Could not schedule notification {request.identifier}: {e}"
            ) from e

        logger.info(f"Scheduled notification {request.identifier} with {trigger}")

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def register_categories(
        self, categories: Iterable[NotificationCategory]
    ) -> None:
        """Merge categories into the registry; same identifier replaces the old one."""
        for category in categories:
            self._categories[category.identifier] = category
        logger.info(f"Registered notification categories: {sorted(self._categories)}")

    async def categories(self) -> list[NotificationCategory]:
        return list(self._categories.values())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _build_payload(self, request: NotificationRequest) -> dict:
        category_id = request.content.category_id
        category = self._categories.get(category_id) if category_id else None
        return {
            "identifier": request.identifier,
            "thread_id": request.content.thread_id,
            "content": request.content.to_payload(),
            "discord_channel_id": self.config.discord_channel_id,
            "action_titles": [a.title for a in category.actions] if category else [],
        }

    def _record_delivery(self, payload: dict) -> None:
        identifier = payload["identifier"]
        # Repeating notifications move to the end on every delivery
        self._delivered.pop(identifier, None)
        self._delivered[identifier] = NotificationItem(
            identifier=identifier, thread_id=payload.get("thread_id")
        )
        while len(self._delivered) > self.config.delivered_history_limit:
            self._delivered.popitem(last=False)

    def _on_job_event(self, event: JobExecutionEvent) -> None:
        if event.code == EVENT_JOB_ERROR:
            logger.error(f"Delivery of notification {event.job_id} failed: {event.exception}")
            sentry_sdk.capture_exception(event.exception)
            return

        payload = event.retval
        if not isinstance(payload, dict) or "identifier" not in payload:
            return
        delivery = payload.get("delivery") or {}
        if delivery.get("sent") is False:
            # Dropped by the channel; it never reached the user
            logger.warning(
                f"Notification {event.job_id} not recorded as delivered: "
                f"{delivery.get('reason')}"
            )
            return
        self._record_delivery(payload)
