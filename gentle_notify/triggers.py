"""
Trigger mapping: from a request's schedule to the notification service's
concrete "when does this fire" representation.

Stateless and policy-free. ``make_trigger`` produces our own trigger values;
``to_apscheduler_trigger`` turns those into APScheduler triggers for the
scheduler-backed notification center.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger as RecurringIntervalTrigger

from .models import CalendarSchedule, DateComponents, ExactDate, Schedule, TimeInterval
from .timezone import decompose, get_timezone

# Shortest delay accepted for time-interval schedules, in seconds
MIN_INTERVAL_SECONDS = 1.0


@dataclass(frozen=True)
class IntervalTrigger:
    seconds: float
    repeats: bool = False


@dataclass(frozen=True)
class CalendarTrigger:
    components: DateComponents
    repeats: bool = False


Trigger = IntervalTrigger | CalendarTrigger


def make_trigger(schedule: Schedule, tz_name: str | None = None) -> Trigger:
    """
    Convert a schedule into a trigger.

    Args:
        schedule: The request's schedule
        tz_name: Wall-clock timezone used to decompose exact dates

    Returns:
        IntervalTrigger for time intervals (floored to MIN_INTERVAL_SECONDS),
        CalendarTrigger for calendar schedules and exact dates
    """
    if isinstance(schedule, TimeInterval):
        return IntervalTrigger(
            seconds=max(schedule.offset_seconds, MIN_INTERVAL_SECONDS),
            repeats=schedule.repeats,
        )
    if isinstance(schedule, CalendarSchedule):
        return CalendarTrigger(components=schedule.components, repeats=schedule.repeats)
    if isinstance(schedule, ExactDate):
        return CalendarTrigger(
            components=decompose(schedule.instant, tz_name), repeats=False
        )
    raise TypeError(f"Unsupported schedule: {schedule!r}")


def _cron_fields(components: DateComponents) -> dict[str, int]:
    fields = components.as_dict()
    if "weekday" in fields:
        fields["day_of_week"] = fields.pop("weekday")
    return fields


def to_apscheduler_trigger(
    trigger: Trigger,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> BaseTrigger | None:
    """
    Build the APScheduler trigger for ``trigger``.

    Calendar fields follow cron semantics: unset fields larger than the
    smallest set field match anything, unset smaller fields take their
    minimum. One-shot calendar triggers are pinned to their next match.

    Returns:
        The APScheduler trigger, or None if a one-shot calendar trigger has no
        future match
    """
    tz = get_timezone(tz_name)
    now = now or datetime.now(tz)

    if isinstance(trigger, IntervalTrigger):
        first_fire = now + timedelta(seconds=trigger.seconds)
        if trigger.repeats:
            return RecurringIntervalTrigger(
                seconds=trigger.seconds, start_date=first_fire, timezone=tz
            )
        return DateTrigger(run_date=first_fire, timezone=tz)

    if isinstance(trigger, CalendarTrigger):
        cron = CronTrigger(timezone=tz, **_cron_fields(trigger.components))
        if trigger.repeats:
            return cron
        next_fire = cron.get_next_fire_time(None, now)
        if next_fire is None:
            return None
        return DateTrigger(run_date=next_fire, timezone=tz)

    raise TypeError(f"Unsupported trigger: {trigger!r}")
