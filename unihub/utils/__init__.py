"""Utility helpers for reusable functionality."""

from .datetime import (
    DISPLAY_FORMAT,
    format_display_datetime,
    get_app_timezone,
    isoformat_or_none,
    now_in_app_timezone,
    parse_utc_offset,
    reset_app_timezone_cache,
    storage_now,
    to_app_timezone,
    to_storage_datetime,
)

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
