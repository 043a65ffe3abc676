"""
Notification API routes.

Endpoints:
- POST /api/notifications - Schedule a notification through its admission policy
- GET /api/notifications/pending - List pending notifications
- GET /api/notifications/delivered - List delivered notifications
- POST /api/notifications/cancel - Cancel pending notifications by identifier
- DELETE /api/notifications/{identifier} - Cancel one pending notification
- DELETE /api/notifications - Cancel every pending notification
- GET /api/notifications/categories - List registered categories
- POST /api/notifications/categories - Register categories
"""

import logging
from datetime import datetime, timedelta
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from gentle_notify import (
    CalendarSchedule,
    DateComponents,
    DuplicateIdentifier,
    ExactDate,
    MaxPendingCountReached,
    NotificationAction,
    NotificationCategory,
    NotificationClient,
    NotificationContent,
    NotificationItem,
    NotificationPolicy,
    NotificationRequest,
    NotificationSound,
    ServiceFailure,
    TimeInterval,
)
from gentle_notify.enums import (
    ActionOption,
    ActionStyle,
    CategoryOption,
    InterruptionLevel,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


# --- Pydantic models ---


class IntervalScheduleBody(BaseModel):
    type: Literal["interval"]
    seconds: float
    repeats: bool = False


class CalendarScheduleBody(BaseModel):
    type: Literal["calendar"]
    year: int | None = None
    month: int | None = None
    day: int | None = None
    weekday: int | None = None  # 0 = Monday
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    repeats: bool = False


class DateScheduleBody(BaseModel):
    type: Literal["date"]
    at: datetime


ScheduleBody = Annotated[
    IntervalScheduleBody | CalendarScheduleBody | DateScheduleBody,
    Field(discriminator="type"),
]


class PolicyBody(BaseModel):
    avoidDuplicates: bool = True
    maxPendingCount: int | None = None
    coalesceByThreadId: bool = True
    clampTextLength: bool = True


class ScheduleNotificationRequest(BaseModel):
    """Request body for scheduling a notification."""

    identifier: str | None = None
    title: str
    body: str
    subtitle: str | None = None
    threadId: str | None = None
    categoryId: str | None = None
    userInfo: dict[str, Any] = Field(default_factory=dict)
    badge: int | None = None
    sound: str | None = "default"  # "default", a sound name, or null for silent
    interruptionLevel: InterruptionLevel = InterruptionLevel.active
    hiddenPreviewPlaceholder: str | None = None
    schedule: ScheduleBody
    policy: PolicyBody = Field(default_factory=PolicyBody)


class CancelRequest(BaseModel):
    identifiers: list[str]


class ActionBody(BaseModel):
    identifier: str
    title: str
    style: ActionStyle = ActionStyle.normal
    options: list[ActionOption] = Field(default_factory=list)
    symbolName: str | None = None


class CategoryBody(BaseModel):
    identifier: str
    actions: list[ActionBody] = Field(default_factory=list)
    intentIdentifiers: list[str] = Field(default_factory=list)
    options: list[CategoryOption] = Field(default_factory=list)


class RegisterCategoriesRequest(BaseModel):
    categories: list[CategoryBody]


# --- Mapping ---


def _to_schedule(body: IntervalScheduleBody | CalendarScheduleBody | DateScheduleBody):
    if isinstance(body, IntervalScheduleBody):
        return TimeInterval(timedelta(seconds=body.seconds), repeats=body.repeats)
    if isinstance(body, CalendarScheduleBody):
        components = DateComponents(
            year=body.year,
            month=body.month,
            day=body.day,
            weekday=body.weekday,
            hour=body.hour,
            minute=body.minute,
            second=body.second,
        )
        return CalendarSchedule(components, repeats=body.repeats)
    return ExactDate(body.at)


def _to_sound(name: str | None) -> NotificationSound | None:
    if name is None:
        return None
    if name == "default":
        return NotificationSound.default()
    return NotificationSound.named(name)


def _to_request(body: ScheduleNotificationRequest) -> NotificationRequest:
    """
    Build a NotificationRequest from the API body.

    Raises:
        ValueError, TypeError: If the model rejects a field
        OverflowError: If the interval does not fit in a timedelta
    """
    content = NotificationContent(
        title=body.title,
        body=body.body,
        subtitle=body.subtitle,
        thread_id=body.threadId,
        category_id=body.categoryId,
        user_info=body.userInfo,
        badge=body.badge,
        sound=_to_sound(body.sound),
        interruption_level=body.interruptionLevel,
        hidden_preview_placeholder=body.hiddenPreviewPlaceholder,
    )
    policy = NotificationPolicy(
        avoid_duplicates=body.policy.avoidDuplicates,
        max_pending_count=body.policy.maxPendingCount,
        coalesce_by_thread_id=body.policy.coalesceByThreadId,
        clamp_text_length=body.policy.clampTextLength,
    )
    kwargs = {"identifier": body.identifier} if body.identifier else {}
    return NotificationRequest(
        content=content,
        schedule=_to_schedule(body.schedule),
        policy=policy,
        **kwargs,
    )


def _item_response(item: NotificationItem) -> dict:
    return {"identifier": item.identifier, "threadId": item.thread_id}


def _category_response(category: NotificationCategory) -> dict:
    return {
        "identifier": category.identifier,
        "actions": [
            {
                "identifier": action.identifier,
                "title": action.title,
                "style": action.style.value,
                "options": sorted(o.value for o in action.effective_options()),
                "symbolName": action.symbol_name,
            }
            for action in category.actions
        ],
        "intentIdentifiers": list(category.intent_identifiers),
        "options": sorted(o.value for o in category.options),
    }


# --- Dependencies ---


def get_notification_client(request: Request) -> NotificationClient:
    """Notification client installed on app.state by the app's lifespan."""
    client = getattr(request.app.state, "notification_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Notification service not available")
    return client


ClientDep = Annotated[NotificationClient, Depends(get_notification_client)]


# --- Routes ---


@router.post("", status_code=201)
async def schedule_notification(body: ScheduleNotificationRequest, client: ClientDep):
    """Schedule a notification. Rejections leave the queues untouched."""
    try:
        request = _to_request(body)
    except (ValueError, TypeError, OverflowError) as e:
        raise HTTPException(
            status_code=422, detail={"error": "invalid_request", "message": str(e)}
        )

    try:
        identifier = await client.schedule(request)
    except (MaxPendingCountReached, DuplicateIdentifier) as e:
        raise HTTPException(status_code=409, detail={"error": e.code, "message": str(e)})
    except ServiceFailure as e:
        raise HTTPException(status_code=502, detail={"error": e.code, "message": str(e)})

    return {"identifier": identifier}


@router.get("/pending")
async def list_pending(client: ClientDep):
    return [_item_response(item) for item in await client.pending()]


@router.get("/delivered")
async def list_delivered(client: ClientDep):
    return [_item_response(item) for item in await client.delivered()]


@router.post("/cancel")
async def cancel_notifications(body: CancelRequest, client: ClientDep):
    await client.cancel(body.identifiers)
    return {"status": "ok"}


@router.delete("/{identifier}")
async def cancel_notification(identifier: str, client: ClientDep):
    await client.cancel([identifier])
    return {"status": "ok"}


@router.delete("")
async def cancel_all_notifications(client: ClientDep):
    cancelled = await client.cancel_all()
    return {"cancelled": cancelled}


@router.get("/categories")
async def list_categories(client: ClientDep):
    return [_category_response(c) for c in await client.categories()]


@router.post("/categories")
async def register_categories(body: RegisterCategoriesRequest, client: ClientDep):
    categories = [
        NotificationCategory(
            identifier=c.identifier,
            actions=tuple(
                NotificationAction(
                    identifier=a.identifier,
                    title=a.title,
                    style=a.style,
                    options=frozenset(a.options),
                    symbol_name=a.symbolName,
                )
                for a in c.actions
            ),
            intent_identifiers=tuple(c.intentIdentifiers),
            options=frozenset(c.options),
        )
        for c in body.categories
    ]
    await client.register_categories(*categories)
    logger.info(f"Registered {len(categories)} categories via API")
    return [_category_response(c) for c in categories]
