"""
Policy-driven notification scheduling.

Public API:
    NotificationClient(center) - schedule / cancel / cancel_all
    create_default_client(config) - client over an APScheduler-backed center
    PolicyEngine(store).admit(request) - the admission pipeline on its own

Model:
    NotificationRequest, NotificationContent, NotificationPolicy
    TimeInterval, CalendarSchedule, ExactDate, DateComponents
    NotificationCategory, NotificationAction

Errors:
    MaxPendingCountReached, DuplicateIdentifier, ServiceFailure
"""

from .categories import NotificationAction, NotificationCategory
from .center import SchedulerNotificationCenter
from .client import NotificationClient, create_default_client
from .config import NotifyConfig
from .enums import ActionOption, ActionStyle, CategoryOption, InterruptionLevel
from .errors import (
    DuplicateIdentifier,
    MaxPendingCountReached,
    NotificationError,
    ServiceFailure,
)
from .gateway import NotificationCenter, NotificationStore
from .models import (
    CalendarSchedule,
    DateComponents,
    ExactDate,
    NotificationContent,
    NotificationItem,
    NotificationPolicy,
    NotificationRequest,
    NotificationSound,
    TimeInterval,
)
from .policy import Admission, PolicyEngine, clamp_content
from .triggers import CalendarTrigger, IntervalTrigger, make_trigger

__all__ = [
    # Client
    "NotificationClient",
    "create_default_client",
    "NotifyConfig",
    # Engine and service contract
    "PolicyEngine",
    "Admission",
    "clamp_content",
    "NotificationStore",
    "NotificationCenter",
    "SchedulerNotificationCenter",
    # Model
    "NotificationRequest",
    "NotificationContent",
    "NotificationPolicy",
    "NotificationSound",
    "NotificationItem",
    "TimeInterval",
    "CalendarSchedule",
    "ExactDate",
    "DateComponents",
    "InterruptionLevel",
    "NotificationAction",
    "NotificationCategory",
    "ActionStyle",
    "ActionOption",
    "CategoryOption",
    # Triggers
    "make_trigger",
    "IntervalTrigger",
    "CalendarTrigger",
    # Errors
    "NotificationError",
    "MaxPendingCountReached",
    "DuplicateIdentifier",
    "ServiceFailure",
]
