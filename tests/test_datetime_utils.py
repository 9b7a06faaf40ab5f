"""Tests for the application timezone helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from unihub.utils import (
    format_display_datetime,
    isoformat_or_none,
    parse_utc_offset,
    to_app_timezone,
    to_storage_datetime,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("UTC+08:00", timedelta(hours=8)),
        ("GMT-5", timedelta(hours=-5)),
        ("+0530", timedelta(hours=5, minutes=30)),
    ],
)
def test_parse_utc_offset(value, expected):
    assert parse_utc_offset(value).utcoffset(None) == expected


def test_parse_utc_offset_rejects_names():
    assert parse_utc_offset("Asia/Manila") is None


def test_storage_round_trip_keeps_the_instant():
    instant = datetime(2025, 3, 1, 1, 0, tzinfo=timezone.utc)

    stored = to_storage_datetime(instant)

    assert stored.tzinfo is None
    assert to_app_timezone(stored) == instant


def test_rendering_helpers_handle_none():
    assert isoformat_or_none(None) is None
    assert format_display_datetime(None) is None
    assert format_display_datetime(datetime(2025, 3, 1, 1, 0, tzinfo=timezone.utc)) == "Mar 01, 2025, 09:00 AM"


def test_app_timezone_follows_offset_setting(monkeypatch: pytest.MonkeyPatch):
    from unihub.config import reset_settings_cache
    from unihub.utils import get_app_timezone, reset_app_timezone_cache

    monkeypatch.setenv("APP_TIMEZONE", "UTC-03:00")
    reset_settings_cache()
    reset_app_timezone_cache()
    try:
        assert get_app_timezone().utcoffset(None) == timedelta(hours=-3)
    finally:
        monkeypatch.delenv("APP_TIMEZONE")
        reset_settings_cache()
        reset_app_timezone_cache()

    assert to_app_timezone(datetime(2025, 3, 1, 1, 0, tzinfo=timezone.utc)).hour == 9
