"""
Wall-clock helpers for turning instants into calendar fields.
"""

import logging
from datetime import datetime, timedelta

import pytz

from .models import DateComponents

logger = logging.getLogger(__name__)


def get_timezone(tz_name: str | None):
    """
    Resolve a timezone name, falling back to UTC.

    Args:
        tz_name: Timezone string (e.g., "America/New_York"), or None for UTC

    Returns:
        A pytz timezone
    """
    if not tz_name:
        return pytz.UTC
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {tz_name!r}, using UTC")
        return pytz.UTC


def to_wall_clock(instant: datetime, tz_name: str | None) -> datetime:
    """
    Convert an instant to the wall clock of ``tz_name``.

    Naive datetimes are treated as UTC.
    """
    if instant.tzinfo is None:
        instant = pytz.UTC.localize(instant)
    return instant.astimezone(get_timezone(tz_name))


def decompose(instant: datetime, tz_name: str | None) -> DateComponents:
    """
    Split an instant into year/month/day/hour/minute/second wall-clock fields.

    Fractional seconds round up to the next whole second, so the fields never
    name a moment earlier than the instant itself.
    """
    if instant.microsecond:
        instant = instant.replace(microsecond=0) + timedelta(seconds=1)
    local_dt = to_wall_clock(instant, tz_name)
    return DateComponents(
        year=local_dt.year,
        month=local_dt.month,
        day=local_dt.day,
        hour=local_dt.hour,
        minute=local_dt.minute,
        second=local_dt.second,
    )
