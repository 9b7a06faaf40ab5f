"""Timed activity reminders raised on behalf of a participant."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from unihub.domain.entities import (
    TITLE_ACTIVITY_ENDED,
    TITLE_ACTIVITY_ENDING_SOON,
    TITLE_ACTIVITY_EVALUATION,
    TITLE_ACTIVITY_STARTED,
    TITLE_ACTIVITY_STARTING_SOON,
)

from .api import NotificationApiClient

logger = logging.getLogger(__name__)

START_OFFSETS: tuple[tuple[timedelta, str, str], ...] = (
    (timedelta(minutes=30), TITLE_ACTIVITY_STARTING_SOON, "This activity will start in about 30 minutes."),
    (timedelta(minutes=10), TITLE_ACTIVITY_STARTING_SOON, "This activity will start in about 10 minutes."),
    (timedelta(0), TITLE_ACTIVITY_STARTED, "This activity is starting now."),
)
ENDING_SOON_OFFSET = timedelta(minutes=10)


@dataclass(frozen=True)
class JoinedActivity:
    """Schedule of an activity the participant joined."""

    activity_id: str
    title: str
    project_name: str
    project_id: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None


@dataclass(frozen=True)
class PlannedReminder:
    fire_at: datetime
    title: str
    message: str
    project_id: str | None


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _reminder(activity: JoinedActivity, fire_at: datetime, title: str, text: str) -> PlannedReminder:
    return PlannedReminder(
        fire_at=fire_at,
        title=title,
        message=f"[{activity.project_name}] {activity.title}: {text}",
        project_id=activity.project_id,
    )


def plan_reminders(activity: JoinedActivity, *, now: datetime) -> list[PlannedReminder]:
    """Return the reminders of ``activity`` that are still in the future.

    Start reminders are only planned while the activity has not started, and
    end reminders while it has not ended. The end of an activity raises both
    the ended notice and the evaluation prompt.
    """

    now = _aware(now)
    planned: list[PlannedReminder] = []

    if activity.start_at is not None:
        start_at = _aware(activity.start_at)
        if start_at > now:
            for offset, title, text in START_OFFSETS:
                fire_at = start_at - offset
                if fire_at > now:
                    planned.append(_reminder(activity, fire_at, title, text))

    if activity.end_at is not None:
        end_at = _aware(activity.end_at)
        if end_at > now:
            ending_soon = end_at - ENDING_SOON_OFFSET
            if ending_soon > now:
                planned.append(
                    _reminder(
                        activity,
                        ending_soon,
                        TITLE_ACTIVITY_ENDING_SOON,
                        "This activity will end in about 10 minutes.",
                    )
                )
            planned.append(
                _reminder(activity, end_at, TITLE_ACTIVITY_ENDED, "This activity has ended.")
            )
            planned.append(
                _reminder(
                    activity,
                    end_at,
                    TITLE_ACTIVITY_EVALUATION,
                    "Please complete the evaluation form for this activity.",
                )
            )

    return sorted(planned, key=lambda reminder: reminder.fire_at)


class ReminderScheduler:
    """Arm one loop timer per planned reminder of the joined activities."""

    def __init__(
        self,
        api: NotificationApiClient,
        recipient_email: str | None,
        *,
        clock: Callable[[], datetime] | None = None,
        on_reminder: Callable[[PlannedReminder], None] | None = None,
    ) -> None:
        self._api = api
        self._recipient_email = recipient_email
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._on_reminder = on_reminder
        self._timers: dict[int, asyncio.TimerHandle] = {}
        self._timer_ids = itertools.count()
        self._calls: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._timers)

    def reschedule(self, activities: Iterable[JoinedActivity]) -> list[PlannedReminder]:
        """Cancel the armed timers and plan ``activities`` from scratch."""

        self.cancel()
        loop = asyncio.get_running_loop()
        now = _aware(self._clock())
        planned: list[PlannedReminder] = []
        for activity in activities:
            for reminder in plan_reminders(activity, now=now):
                delay = (reminder.fire_at - now).total_seconds()
                timer_id = next(self._timer_ids)
                self._timers[timer_id] = loop.call_later(delay, self._fire, timer_id, reminder)
                planned.append(reminder)
        logger.debug("Armed %s activity reminder(s)", len(planned))
        return planned

    def cancel(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers = {}

    def close(self) -> None:
        self.cancel()

    async def flush(self) -> None:
        if self._calls:
            await asyncio.gather(*list(self._calls), return_exceptions=True)

    def _fire(self, timer_id: int, reminder: PlannedReminder) -> None:
        self._timers.pop(timer_id, None)
        if self._on_reminder is not None:
            self._on_reminder(reminder)
        task = asyncio.ensure_future(
            self._api.create_notification(
                title=reminder.title,
                message=reminder.message,
                project_id=reminder.project_id,
                recipient_email=self._recipient_email,
            )
        )
        self._calls.add(task)
        task.add_done_callback(self._log_call_result)

    def _log_call_result(self, task: asyncio.Task[Any]) -> None:
        self._calls.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Failed to persist reminder notification: %s", exc)


__all__ = ["JoinedActivity", "PlannedReminder", "ReminderScheduler", "plan_reminders"]
