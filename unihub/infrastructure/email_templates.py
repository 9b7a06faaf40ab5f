"""HTML templates for notification emails keyed on the notification title."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Callable

from unihub.domain.entities import (
    REMINDER_TITLES,
    TITLE_ACTIVITY_EVALUATION,
    TITLE_ACTIVITY_JOIN,
    TITLE_ATTENDANCE_UPDATED,
    TITLE_JOIN_REQUEST,
    TITLE_JOIN_REQUEST_APPROVED,
    TITLE_JOIN_REQUEST_DECLINED,
    TITLE_SCHEDULE_UPDATED,
    Notification,
)
from unihub.domain.message_fields import with_structured_fields

_GENERIC_PROJECT = "a project"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class _TemplateContext:
    notification: Notification
    project_name: str
    base_url: str

    def activity(self, fallback: str) -> str:
        return escape(self.notification.activity_title or fallback)

    def link(self, path: str, label: str) -> str:
        href = escape(f"{self.base_url.rstrip('/')}{path}", quote=True)
        return f'<a href="{href}" class="button">{escape(label)}</a>'


def _base_email(subject: str, content: str) -> str:
    year = datetime.now().year
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="UTF-8"></head>'
        '<body style="font-family: Helvetica, Arial, sans-serif; background-color: #f8f9fa;">'
        '<div class="container" style="max-width: 600px; margin: 20px auto; background: #ffffff;">'
        '<div class="header" style="background-color: #ffc107; padding: 24px; text-align: center;">'
        "<strong>UNIHUB</strong></div>"
        f'<div class="content" style="padding: 32px;"><h2>{escape(subject)}</h2>{content}</div>'
        '<div class="footer" style="padding: 24px; font-size: 12px; color: #6c757d;">'
        f"<p>&copy; {year} UNIHUB. All rights reserved.</p>"
        "<p>This is an automated notification. Please do not reply to this email.</p>"
        "</div></div></body></html>"
    )


def _join_request(ctx: _TemplateContext) -> str:
    requester = ctx.notification.actor_email or ctx.notification.recipient_email or "A participant"
    return (
        "<p>You have a new request to join your project, "
        f"<strong>{escape(ctx.project_name)}</strong>.</p>"
        f"<p><strong>{escape(requester)}</strong> wants to join.</p>"
        + ctx.link("/project-leader/participants", "View Join Requests")
    )


def _join_approved(ctx: _TemplateContext) -> str:
    return (
        "<p>Congratulations!</p>"
        "<p>Your request to join the project "
        f"<strong>{escape(ctx.project_name)}</strong> has been approved.</p>"
        + ctx.link("/participant/Feeds", "View My Projects")
    )


def _join_declined(ctx: _TemplateContext) -> str:
    return (
        "<p>Your request to join the project "
        f"<strong>{escape(ctx.project_name)}</strong> was declined.</p>"
        + ctx.link("/participant/Feeds", "Browse Projects")
    )


def _activity_join(ctx: _TemplateContext) -> str:
    participant = ctx.notification.actor_email or ctx.notification.recipient_email or "A participant"
    return (
        "<p>A participant has joined an activity in your project, "
        f"<strong>{escape(ctx.project_name)}</strong>.</p>"
        f"<p><strong>{escape(participant)}</strong> joined '{ctx.activity('an activity')}'.</p>"
        + ctx.link("/project-leader/participants", "View Participants")
    )


def _activity_evaluation(ctx: _TemplateContext) -> str:
    return (
        "<p>An activity you participated in has concluded.</p>"
        "<p>Please take a moment to complete the evaluation form for "
        f"<strong>{ctx.activity('this activity')}</strong> in project "
        f"<strong>{escape(ctx.project_name)}</strong>.</p>"
        + ctx.link("/participant/Feeds", "Complete Evaluation")
    )


def _reminder_detail(message: str) -> str:
    _, separator, detail = message.partition(": ")
    return detail.strip() if separator else message


def _activity_reminder(ctx: _TemplateContext) -> str:
    return (
        "<p>This is a reminder for an activity in project "
        f"<strong>{escape(ctx.project_name)}</strong>.</p>"
        f"<p><strong>{ctx.activity('An activity')}</strong>: "
        f"{escape(_reminder_detail(ctx.notification.message))}</p>"
        + ctx.link("/participant/Feeds", "View Activity Feeds")
    )


def _schedule_updated(ctx: _TemplateContext) -> str:
    return (
        f"<p>The schedule of <strong>{ctx.activity('an activity you joined')}</strong> in project "
        f"<strong>{escape(ctx.project_name)}</strong> has changed.</p>"
        f"<p>{escape(ctx.notification.message)}</p>"
        + ctx.link("/participant/Feeds", "View Activity Feeds")
    )


def _attendance_updated(ctx: _TemplateContext) -> str:
    return (
        f"<p>Your attendance for <strong>{ctx.activity('an activity')}</strong> in project "
        f"<strong>{escape(ctx.project_name)}</strong> was updated.</p>"
        f"<p>{escape(ctx.notification.message)}</p>"
        + ctx.link("/participant/Feeds", "View Activity Feeds")
    )


_TEMPLATES: dict[str, tuple[str, Callable[[_TemplateContext], str]]] = {
    TITLE_JOIN_REQUEST: ("New Join Request for Your Project", _join_request),
    TITLE_JOIN_REQUEST_APPROVED: ("Your Join Request Was Approved", _join_approved),
    TITLE_JOIN_REQUEST_DECLINED: ("Your Join Request Was Declined", _join_declined),
    TITLE_ACTIVITY_JOIN: ("New Participant Joined an Activity", _activity_join),
    TITLE_ACTIVITY_EVALUATION: ("Please Evaluate Your Recent Activity", _activity_evaluation),
    TITLE_SCHEDULE_UPDATED: ("Activity Schedule Updated", _schedule_updated),
    TITLE_ATTENDANCE_UPDATED: ("Activity Attendance Updated", _attendance_updated),
}


def render_notification_email(
    notification: Notification,
    *,
    project_name: str | None = None,
    base_url: str = "http://localhost:3000",
) -> RenderedEmail:
    """Render the subject, HTML body and plain text body for ``notification``.

    Unknown titles use the title as subject and the literal message as body.
    """

    enriched = with_structured_fields(notification)
    ctx = _TemplateContext(
        notification=enriched,
        project_name=(project_name or "").strip() or _GENERIC_PROJECT,
        base_url=base_url,
    )

    title = enriched.title
    if title in REMINDER_TITLES:
        subject = f"Activity Reminder: {title}"
        content = _activity_reminder(ctx)
    elif title in _TEMPLATES:
        subject, builder = _TEMPLATES[title]
        content = builder(ctx)
    else:
        subject = title
        content = f"<p>{escape(enriched.message)}</p>"

    return RenderedEmail(
        subject=subject,
        html=_base_email(subject, content),
        text=enriched.message,
    )


__all__ = ["RenderedEmail", "render_notification_email"]
