"""Shared fixtures: every test run uses a throwaway SQLite database."""

from __future__ import annotations

import importlib
import os
import tempfile
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="unihub-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
for _name in ("SMTP_HOST", "SMTP_USERNAME", "SMTP_FROM", "SENDGRID_API_KEY", "SENDGRID_SENDER"):
    os.environ.pop(_name, None)


@pytest.fixture(autouse=True)
def clean_database():
    """Recreate every table before each test."""

    from unihub.infrastructure import database

    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.Base.metadata.create_all(bind=database.engine)
    yield


@pytest.fixture(autouse=True)
def reset_mailer():
    from unihub.infrastructure.email import reset_mail_transport_cache

    reset_mail_transport_cache()
    yield
    reset_mail_transport_cache()


@pytest.fixture()
def session():
    from unihub.infrastructure.database import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def side_effects(monkeypatch: pytest.MonkeyPatch):
    """Record broadcasts and emails instead of scheduling them."""

    module = importlib.import_module(
        "unihub.application.use_cases.notifications.create_notification"
    )
    recorded: dict[str, list] = {"broadcasts": [], "emails": []}

    monkeypatch.setattr(module, "dispatch_notification", recorded["broadcasts"].append)

    def _record_email(notification, *, project_name=None):
        recorded["emails"].append((notification, project_name))

    monkeypatch.setattr(module, "dispatch_notification_email", _record_email)
    return recorded
