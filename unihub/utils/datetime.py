"""Time helpers anchored on the configured application timezone.

Notifications are compared and serialised as aware datetimes, while SQLite
columns keep the wall-clock value of the app timezone without an offset.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from unihub.config import get_settings

DEFAULT_TIMEZONE_NAME: Final[str] = "Asia/Manila"
DEFAULT_TIMEZONE_OFFSET: Final[timedelta] = timedelta(hours=8)
DISPLAY_FORMAT: Final[str] = "%b %d, %Y, %I:%M %p"

_UTC_OFFSET: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)?\s*(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


def parse_utc_offset(value: str) -> timezone | None:
    """Turn ``UTC+08:00`` / ``GMT-5`` / ``+0530`` into a fixed offset zone."""

    match = _UTC_OFFSET.match(value.strip())
    if match is None:
        return None
    delta = timedelta(hours=int(match["hours"]), minutes=int(match["minutes"] or 0))
    return timezone(-delta if match["sign"] == "-" else delta)


def _lookup_timezone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        pass
    offset = parse_utc_offset(name)
    if offset is not None:
        return offset
    try:
        return ZoneInfo(DEFAULT_TIMEZONE_NAME)
    except ZoneInfoNotFoundError:
        # Hosts without a tz database still get the default wall clock.
        return timezone(DEFAULT_TIMEZONE_OFFSET, DEFAULT_TIMEZONE_NAME)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the zone named by ``APP_TIMEZONE`` (``Asia/Manila`` by default)."""

    name = (get_settings().app_timezone or "").strip()
    return _lookup_timezone(name or DEFAULT_TIMEZONE_NAME)


def reset_app_timezone_cache() -> None:
    get_app_timezone.cache_clear()


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def to_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app timezone; naive values are assumed local."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def to_storage_datetime(value: datetime | None) -> datetime | None:
    """Return the naive wall-clock value written to ``DATETIME`` columns."""

    localized = to_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None


def storage_now() -> datetime:
    """Column default: the current wall-clock time of the app timezone."""

    return now_in_app_timezone().replace(tzinfo=None)


def isoformat_or_none(value: datetime | None) -> str | None:
    localized = to_app_timezone(value)
    return localized.isoformat() if localized is not None else None


def format_display_datetime(value: datetime | None) -> str | None:
    """Render ``value`` like ``Mar 01, 2025, 09:00 AM`` in the app timezone."""

    localized = to_app_timezone(value)
    return localized.strftime(DISPLAY_FORMAT) if localized is not None else None


__all__ = [
    "DISPLAY_FORMAT",
    "format_display_datetime",
    "get_app_timezone",
    "isoformat_or_none",
    "now_in_app_timezone",
    "parse_utc_offset",
    "reset_app_timezone_cache",
    "storage_now",
    "to_app_timezone",
    "to_storage_datetime",
]
