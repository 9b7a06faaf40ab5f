"""Tests for the application settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from unihub.config import Settings, get_settings, reset_settings_cache


def test_defaults():
    settings = Settings()

    assert settings.app_timezone == "Asia/Manila"
    assert settings.notification_page_size == 50
    assert settings.smtp_port == 587
    assert settings.smtp_configured is False


def test_smtp_sender_defaults_to_username():
    settings = Settings(smtp_host="smtp.example.com", smtp_username="mailer@example.com")

    assert settings.smtp_sender == "mailer@example.com"
    assert settings.smtp_configured is True


def test_sendgrid_requires_both_values():
    with pytest.raises(ValidationError):
        Settings(sendgrid_api_key="SG.fake")


def test_settings_cache_can_be_reset(monkeypatch: pytest.MonkeyPatch):
    reset_settings_cache()
    monkeypatch.setenv("NOTIFICATION_PAGE_SIZE", "10")
    try:
        assert get_settings().notification_page_size == 10
    finally:
        reset_settings_cache()
