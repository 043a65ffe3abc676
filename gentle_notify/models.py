"""
Value types describing a single scheduled notification.

Every type here is immutable. Changing content means building a new value,
either with one of the ``with_*`` helpers or ``dataclasses.replace``.
"""

import copy
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Union

from .enums import InterruptionLevel

# Closed set of values allowed in NotificationContent.user_info
UserInfoValue = Union[str, int, float, bool, dict[str, "UserInfoValue"]]


def normalize_user_info(data: Mapping[str, Any] | None) -> dict[str, UserInfoValue]:
    """
    Validate and deep-copy a user_info mapping.

    Raises:
        TypeError: If a key is not a string or a value is outside the closed
            variant (str, int, float, bool, nested mapping).
    """
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"user_info must be a mapping, got {type(data).__name__}")

    normalized: dict[str, UserInfoValue] = {}
    for key, value in data.items():
        if not isinstance(key, str):
            raise TypeError(f"user_info keys must be strings, got {key!r}")
        if isinstance(value, (str, bool, int, float)):
            normalized[key] = value
        elif isinstance(value, Mapping):
            normalized[key] = normalize_user_info(value)
        else:
            raise TypeError(
                f"Unsupported user_info value for {key!r}: {type(value).__name__}"
            )
    return normalized


class NotificationSound:
    """
    Opaque sound token handed through to the notification service.

    Sounds carry no structure of their own, so equality falls back to
    comparing textual descriptions. Two tokens built differently but
    describing the same sound compare equal; this is a known weakness.
    """

    __slots__ = ("_description",)

    def __init__(self, description: str):
        self._description = description

    @classmethod
    def default(cls) -> "NotificationSound":
        return cls("default")

    @classmethod
    def named(cls, name: str) -> "NotificationSound":
        return cls(f"named:{name}")

    @classmethod
    def critical(cls, name: str | None = None, volume: float = 1.0) -> "NotificationSound":
        if not 0.0 <= volume <= 1.0:
            raise ValueError(f"Critical sound volume must be within 0..1, got {volume}")
        return cls(f"critical:{name or 'default'}@{volume:g}")

    @property
    def description(self) -> str:
        return self._description

    def __str__(self) -> str:
        return self._description

    def __repr__(self) -> str:
        return f"NotificationSound({self._description!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NotificationSound):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))


@dataclass(frozen=True)
class NotificationContent:
    """What the user sees when the notification is delivered."""

    title: str
    body: str
    subtitle: str | None = None
    thread_id: str | None = None
    category_id: str | None = None
    user_info: dict[str, UserInfoValue] = field(default_factory=dict)
    badge: int | None = None
    sound: NotificationSound | None = field(default_factory=NotificationSound.default)
    interruption_level: InterruptionLevel = InterruptionLevel.active
    # Shown instead of the body when previews are hidden; never merged into body
    hidden_preview_placeholder: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "user_info", normalize_user_info(self.user_info))
        object.__setattr__(
            self, "interruption_level", InterruptionLevel(self.interruption_level)
        )
        if self.badge is not None and self.badge < 0:
            raise ValueError(f"Badge count cannot be negative, got {self.badge}")

    def with_thread_id(self, thread_id: str | None) -> "NotificationContent":
        return replace(self, thread_id=thread_id)

    def with_category(self, category_id: str | None) -> "NotificationContent":
        return replace(self, category_id=category_id)

    def with_badge(self, badge: int | None) -> "NotificationContent":
        return replace(self, badge=badge)

    def with_sound(self, sound: NotificationSound | None) -> "NotificationContent":
        return replace(self, sound=sound)

    def with_user_info(self, user_info: Mapping[str, Any]) -> "NotificationContent":
        return replace(self, user_info=user_info)

    def with_hidden_preview_placeholder(
        self, placeholder: str | None
    ) -> "NotificationContent":
        return replace(self, hidden_preview_placeholder=placeholder)

    def to_payload(self) -> dict:
        """Plain-dict form stored with the notification service."""
        return {
            "title": self.title,
            "body": self.body,
            "subtitle": self.subtitle,
            "thread_id": self.thread_id,
            "category_id": self.category_id,
            "user_info": copy.deepcopy(self.user_info),
            "badge": self.badge,
            "sound": str(self.sound) if self.sound is not None else None,
            "interruption_level": self.interruption_level.value,
            "hidden_preview_placeholder": self.hidden_preview_placeholder,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "NotificationContent":
        sound = payload.get("sound")
        return cls(
            title=payload["title"],
            body=payload["body"],
            subtitle=payload.get("subtitle"),
            thread_id=payload.get("thread_id"),
            category_id=payload.get("category_id"),
            user_info=payload.get("user_info") or {},
            badge=payload.get("badge"),
            sound=NotificationSound(sound) if sound is not None else None,
            interruption_level=payload.get("interruption_level", "active"),
            hidden_preview_placeholder=payload.get("hidden_preview_placeholder"),
        )


# =============================================================================
# Schedules
# =============================================================================

_COMPONENT_RANGES = {
    "year": (1, 9999),
    "month": (1, 12),
    "day": (1, 31),
    "weekday": (0, 6),
    "hour": (0, 23),
    "minute": (0, 59),
    "second": (0, 59),
}


@dataclass(frozen=True)
class DateComponents:
    """
    Wall-clock fields to match. Unset fields are not constrained.

    weekday follows Python's convention: 0 is Monday, 6 is Sunday.
    """

    year: int | None = None
    month: int | None = None
    day: int | None = None
    weekday: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None

    def __post_init__(self):
        fields_set = self.as_dict()
        if not fields_set:
            raise ValueError("DateComponents needs at least one field set")
        for name, value in fields_set.items():
            low, high = _COMPONENT_RANGES[name]
            if not low <= value <= high:
                raise ValueError(f"{name}={value} is outside {low}..{high}")

    def as_dict(self) -> dict[str, int]:
        """Set fields only, in most-significant-first order."""
        return {
            name: getattr(self, name)
            for name in _COMPONENT_RANGES
            if getattr(self, name) is not None
        }


@dataclass(frozen=True)
class TimeInterval:
    """Fire after ``offset`` has elapsed, optionally every ``offset`` after that."""

    offset: timedelta
    repeats: bool = False

    def __post_init__(self):
        if isinstance(self.offset, (int, float)) and not isinstance(self.offset, bool):
            object.__setattr__(self, "offset", timedelta(seconds=self.offset))
        if not isinstance(self.offset, timedelta):
            raise TypeError(
                f"TimeInterval offset must be a timedelta or seconds, got {self.offset!r}"
            )

    @classmethod
    def after(
        cls,
        seconds: float = 0,
        minutes: float = 0,
        hours: float = 0,
        repeats: bool = False,
    ) -> "TimeInterval":
        return cls(timedelta(seconds=seconds, minutes=minutes, hours=hours), repeats)

    @property
    def offset_seconds(self) -> float:
        return self.offset.total_seconds()


@dataclass(frozen=True)
class CalendarSchedule:
    """Fire when the wall clock matches ``components``."""

    components: DateComponents
    repeats: bool = False


@dataclass(frozen=True)
class ExactDate:
    """Fire once at ``instant``. Naive datetimes are treated as UTC."""

    instant: datetime


Schedule = TimeInterval | CalendarSchedule | ExactDate


# =============================================================================
# Policy and request
# =============================================================================


@dataclass(frozen=True)
class NotificationPolicy:
    """Admission rules applied when the request is scheduled."""

    avoid_duplicates: bool = True
    max_pending_count: int | None = None  # None means unbounded
    coalesce_by_thread_id: bool = True
    clamp_text_length: bool = True

    def __post_init__(self):
        if self.max_pending_count is not None and self.max_pending_count < 0:
            raise ValueError(
                f"max_pending_count cannot be negative, got {self.max_pending_count}"
            )


@dataclass(frozen=True)
class NotificationRequest:
    content: NotificationContent
    schedule: Schedule
    identifier: str = field(default_factory=lambda: str(uuid.uuid4()))
    policy: NotificationPolicy = field(default_factory=NotificationPolicy)

    def __post_init__(self):
        if not isinstance(self.identifier, str) or not self.identifier:
            raise ValueError("Notification identifier must be a non-empty string")
        if not isinstance(self.schedule, (TimeInterval, CalendarSchedule, ExactDate)):
            raise TypeError(f"Unsupported schedule: {self.schedule!r}")


@dataclass(frozen=True)
class NotificationItem:
    """A pending or delivered notification as listed by the notification service."""

    identifier: str
    thread_id: str | None = None
