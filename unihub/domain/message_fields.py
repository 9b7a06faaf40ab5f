"""Recover structured values from notification messages.

Older notifications encode the participant email, the activity title and the
join decision inside the free-text ``message``. These helpers parse them back
out so that records created without the structured fields still classify and
render like the ones that have them.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Final

from .entities import (
    DECISION_APPROVED,
    DECISION_DECLINED,
    TITLE_ACTIVITY_JOIN,
    TITLE_ATTENDANCE_UPDATED,
    TITLE_JOIN_REQUEST,
    TITLE_JOIN_REQUEST_APPROVED,
    TITLE_JOIN_REQUEST_DECLINED,
    Notification,
)

JOIN_REQUEST_SUFFIX: Final[str] = " wants to join"
RESPONSE_SEPARATOR: Final[str] = " - "

_ACTIVITY_JOIN_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?P<email>.*?) joined activity")
_QUOTED_ACTIVITY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"activity [\"'](?P<title>.*?)[\"']"
)
_BRACKETED_ACTIVITY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\[(?P<project>[^\]]*)\]\s*(?P<title>.+?)(?::\s|\s\(|$)"
)
_EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[^@\s]+@[^@\s]+$")

_DECISIONS_BY_TITLE: Final[dict[str, str]] = {
    TITLE_JOIN_REQUEST_APPROVED: DECISION_APPROVED,
    TITLE_JOIN_REQUEST_DECLINED: DECISION_DECLINED,
}


def join_request_email(message: str | None) -> str | None:
    """Return the email encoded in a ``"<email> wants to join"`` message."""

    text = (message or "").strip()
    if text.endswith(JOIN_REQUEST_SUFFIX.strip()):
        text = text[: -len(JOIN_REQUEST_SUFFIX.strip())].strip()
    return text or None


def response_email(message: str | None) -> str | None:
    """Return the email in front of the ``" - "`` separator of a response."""

    text = (message or "").strip()
    if not text:
        return None
    head = text.split(RESPONSE_SEPARATOR, 1)[0].strip()
    return head or None


def extract_actor_email(title: str, message: str | None) -> str | None:
    """Return the participant email encoded in ``message`` for ``title``."""

    if title == TITLE_JOIN_REQUEST:
        candidate = join_request_email(message)
    elif title in _DECISIONS_BY_TITLE or title == TITLE_ATTENDANCE_UPDATED:
        if RESPONSE_SEPARATOR not in (message or ""):
            return None
        candidate = response_email(message)
    elif title == TITLE_ACTIVITY_JOIN:
        match = _ACTIVITY_JOIN_PATTERN.match(message or "")
        candidate = match.group("email").strip() if match else None
    else:
        return None

    if candidate and _EMAIL_PATTERN.match(candidate):
        return candidate
    return None


def extract_activity_title(message: str | None) -> str | None:
    """Return the activity title embedded in ``message`` if one can be found.

    Two encodings are recognised: a quoted title following the word
    ``activity`` and a title following a ``[Project]`` prefix, terminated by
    ``": "`` or ``" ("``.
    """

    text = (message or "").strip()
    if not text:
        return None

    quoted = _QUOTED_ACTIVITY_PATTERN.search(text)
    if quoted and quoted.group("title").strip():
        return quoted.group("title").strip()

    bracketed = _BRACKETED_ACTIVITY_PATTERN.match(text)
    if bracketed and bracketed.group("title").strip():
        return bracketed.group("title").strip()
    return None


def extract_project_label(message: str | None) -> str | None:
    """Return the ``[Project]`` prefix of reminder style messages."""

    bracketed = _BRACKETED_ACTIVITY_PATTERN.match((message or "").strip())
    if bracketed and bracketed.group("project").strip():
        return bracketed.group("project").strip()
    return None


def extract_decision(title: str) -> str | None:
    return _DECISIONS_BY_TITLE.get(title)


def with_structured_fields(notification: Notification) -> Notification:
    """Return ``notification`` with missing structured fields filled in."""

    actor_email = notification.actor_email or extract_actor_email(
        notification.title, notification.message
    )
    activity_title = notification.activity_title or extract_activity_title(
        notification.message
    )
    decision = notification.decision or extract_decision(notification.title)
    if (
        actor_email == notification.actor_email
        and activity_title == notification.activity_title
        and decision == notification.decision
    ):
        return notification
    return replace(
        notification,
        actor_email=actor_email,
        activity_title=activity_title,
        decision=decision,
    )


__all__ = [
    "JOIN_REQUEST_SUFFIX",
    "RESPONSE_SEPARATOR",
    "extract_activity_title",
    "extract_actor_email",
    "extract_decision",
    "extract_project_label",
    "join_request_email",
    "response_email",
    "with_structured_fields",
]
