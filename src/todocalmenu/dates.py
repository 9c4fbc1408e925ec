"""Date/time normalization between iCalendar values and local timestamps.

Calendar files encode date-times in several shapes:

* ``20250101T080000Z`` -- UTC
* ``TZID=America/New_York:20240918T190000`` -- local time in a named zone
* ``20240918`` -- a bare date
* ``20240918T190000`` -- a floating date-time

All of them are normalized to timezone-aware datetimes in the local zone.
Values are always written back as UTC, so a round trip keeps the instant but
not the original spelling.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import TodoValidationError

logger = logging.getLogger(__name__)

UTC_FORMAT = "%Y%m%dT%H%M%SZ"
DATETIME_FORMAT = "%Y%m%dT%H%M%S"
DATE_FORMAT = "%Y%m%d"
TZID_PREFIX = "TZID="

DISPLAY_DATE_FORMAT = "%Y-%m-%d"
DISPLAY_TIME_FORMAT = "%H:%M"


def now() -> dt.datetime:
    return dt.datetime.now().astimezone().replace(microsecond=0)


def _parse_floating(value: str) -> dt.datetime:
    if len(value) == len("20240918"):
        return dt.datetime.strptime(value, DATE_FORMAT)
    if len(value) == len("20240918T190000"):
        return dt.datetime.strptime(value, DATETIME_FORMAT)
    raise ValueError(f"unsupported date-time length: {value!r}")


def _parse_zoned(value: str) -> dt.datetime:
    zone_name, _, local_value = value[len(TZID_PREFIX) :].partition(":")
    zone_name = zone_name.strip().strip('"')
    if not zone_name or not local_value:
        raise ValueError(f"malformed zoned date-time: {value!r}")
    zone = ZoneInfo(zone_name)
    return _parse_floating(local_value.strip()).replace(tzinfo=zone).astimezone()


def parse_ical_datetime(raw: str | None) -> dt.datetime | None:
    """Return a local aware datetime, or None for empty or unparseable input."""
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    try:
        if value.startswith(TZID_PREFIX):
            return _parse_zoned(value)
        if value.endswith("Z"):
            parsed = dt.datetime.strptime(value, UTC_FORMAT)
            return parsed.replace(tzinfo=dt.timezone.utc).astimezone()
        return _parse_floating(value).astimezone()
    except (ValueError, ZoneInfoNotFoundError) as exc:
        logger.warning("Unable to parse date-time %r: %s", raw, exc)
        return None


def raw_property_value(prop: Any) -> str:
    """Render a decoded date property back into one of the raw shapes above."""
    if isinstance(prop, list):
        if not prop:
            return ""
        prop = prop[0]
    value = prop.to_ical()
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    params = getattr(prop, "params", None) or {}
    tzid = params.get("TZID")
    if tzid and not value.endswith("Z"):
        return f"{TZID_PREFIX}{tzid}:{value}"
    return value


def to_utc(value: dt.datetime) -> dt.datetime:
    return value.astimezone(dt.timezone.utc)


def format_utc(value: dt.datetime) -> str:
    return to_utc(value).strftime(UTC_FORMAT)


def format_date(value: dt.datetime | None) -> str:
    if value is None:
        return ""
    return value.astimezone().strftime(DISPLAY_DATE_FORMAT)


def format_time(value: dt.datetime | None) -> str:
    if value is None:
        return ""
    return value.astimezone().strftime(DISPLAY_TIME_FORMAT)


def parse_date(text: str) -> dt.date:
    try:
        return dt.datetime.strptime(text.strip(), DISPLAY_DATE_FORMAT).date()
    except ValueError as exc:
        raise TodoValidationError("Bad date format. Should be yyyy-mm-dd.") from exc


def parse_time(text: str) -> dt.time:
    try:
        return dt.datetime.strptime(text.strip(), DISPLAY_TIME_FORMAT).time()
    except ValueError as exc:
        raise TodoValidationError("Bad time format. Should be hh:mm.") from exc


def local_midnight(day: dt.date) -> dt.datetime:
    return dt.datetime.combine(day, dt.time()).astimezone()


def combine_date(existing: dt.datetime | None, day: dt.date) -> dt.datetime:
    """Move ``existing`` to ``day`` keeping its local time of day."""
    if existing is None:
        return local_midnight(day)
    return dt.datetime.combine(day, existing.astimezone().time()).astimezone()


def combine_time(existing: dt.datetime | None, clock: dt.time) -> dt.datetime:
    """Set the local time of day, anchoring to today when there is no date yet."""
    day = existing.astimezone().date() if existing is not None else now().date()
    return dt.datetime.combine(day, clock).astimezone()


def is_future(value: dt.datetime | None) -> bool:
    if value is None:
        return False
    return value > dt.datetime.now(value.tzinfo)
