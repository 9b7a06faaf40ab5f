"""Utility script to record a notification from the command line."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from unihub.application.use_cases.notifications import create_notification
from unihub.domain.exceptions import ValidationError
from unihub.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for notification creation."""

    parser = argparse.ArgumentParser(
        description="Record a UniHub notification and deliver it to connected clients.",
    )
    parser.add_argument("--title", required=True, help="Notification title")
    parser.add_argument("--message", required=True, help="Notification body")
    parser.add_argument(
        "--project",
        default=None,
        help="Identifier of the project the notification refers to (optional)",
    )
    parser.add_argument(
        "--recipient-email",
        default=None,
        help="Single recipient; also receives the notification by email (optional)",
    )
    return parser.parse_args()


def main() -> None:
    """Create a notification using the provided command line arguments."""

    args = parse_args()

    initialize_database()

    session = SessionLocal()
    try:
        notification = create_notification(
            session,
            title=args.title,
            message=args.message,
            project_id=args.project,
            recipient_email=args.recipient_email,
        )
    except ValidationError as exc:
        session.rollback()
        raise SystemExit(f"Could not create the notification: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Failed to store the notification: {exc}") from exc
    else:
        print(
            "Notification created:\n"
            f"  ID: {notification.id}\n"
            f"  Title: {notification.title}\n"
            f"  Project: {notification.project_id or '-'}\n"
            f"  Recipient: {notification.recipient_email or '-'}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
