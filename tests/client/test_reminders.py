"""Tests for activity reminder planning and scheduling."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from unihub.client import JoinedActivity, ReminderScheduler, plan_reminders

NOW = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


def _activity(start_in: timedelta | None, end_in: timedelta | None) -> JoinedActivity:
    return JoinedActivity(
        activity_id="A1",
        title="Cleanup",
        project_name="Green Campus",
        project_id="P1",
        start_at=NOW + start_in if start_in is not None else None,
        end_at=NOW + end_in if end_in is not None else None,
    )


def test_future_activity_plans_every_reminder():
    planned = plan_reminders(_activity(timedelta(hours=1), timedelta(hours=3)), now=NOW)

    assert [(reminder.fire_at - NOW, reminder.title) for reminder in planned] == [
        (timedelta(minutes=30), "Activity Starting Soon"),
        (timedelta(minutes=50), "Activity Starting Soon"),
        (timedelta(hours=1), "Activity Started"),
        (timedelta(hours=2, minutes=50), "Activity Ending Soon"),
        (timedelta(hours=3), "Activity Ended"),
        (timedelta(hours=3), "Activity Evaluation"),
    ]
    assert planned[0].message == "[Green Campus] Cleanup: This activity will start in about 30 minutes."
    assert planned[-1].message == (
        "[Green Campus] Cleanup: Please complete the evaluation form for this activity."
    )


def test_reminders_in_the_past_are_skipped():
    planned = plan_reminders(_activity(timedelta(minutes=20), timedelta(hours=2)), now=NOW)

    assert [(reminder.fire_at - NOW, reminder.title) for reminder in planned] == [
        (timedelta(minutes=10), "Activity Starting Soon"),
        (timedelta(minutes=20), "Activity Started"),
        (timedelta(hours=1, minutes=50), "Activity Ending Soon"),
        (timedelta(hours=2), "Activity Ended"),
        (timedelta(hours=2), "Activity Evaluation"),
    ]


def test_started_activity_only_plans_end_reminders():
    planned = plan_reminders(_activity(timedelta(minutes=-5), timedelta(minutes=5)), now=NOW)

    assert [reminder.title for reminder in planned] == ["Activity Ended", "Activity Evaluation"]


def test_finished_activity_plans_nothing():
    assert plan_reminders(_activity(timedelta(hours=-2), timedelta(hours=-1)), now=NOW) == []
    assert plan_reminders(_activity(None, None), now=NOW) == []


class RecordingApi:
    def __init__(self) -> None:
        self.created: list[dict] = []

    async def create_notification(self, **fields):
        self.created.append(fields)


def test_scheduler_fires_and_persists_for_participant():
    api = RecordingApi()
    fired = []

    async def scenario():
        start = datetime.now(timezone.utc)
        scheduler = ReminderScheduler(
            api,
            "p@x.com",
            clock=lambda: start - timedelta(minutes=10, milliseconds=20),
            on_reminder=fired.append,
        )
        scheduler.reschedule([_activity_at(start, None)])
        await asyncio.sleep(0.1)
        await scheduler.flush()
        scheduler.close()

    asyncio.run(scenario())

    assert [reminder.title for reminder in fired] == ["Activity Starting Soon"]
    assert api.created == [
        {
            "title": "Activity Starting Soon",
            "message": "[Green Campus] Cleanup: This activity will start in about 10 minutes.",
            "project_id": "P1",
            "recipient_email": "p@x.com",
        }
    ]


def _activity_at(start_at: datetime, end_at: datetime | None) -> JoinedActivity:
    return JoinedActivity(
        activity_id="A1",
        title="Cleanup",
        project_name="Green Campus",
        project_id="P1",
        start_at=start_at,
        end_at=end_at,
    )


def test_reschedule_replaces_previous_timers():
    api = RecordingApi()

    async def scenario():
        scheduler = ReminderScheduler(api, "p@x.com", clock=lambda: NOW)
        scheduler.reschedule([_activity(timedelta(hours=1), timedelta(hours=3))])
        first = scheduler.pending
        scheduler.reschedule([_activity(timedelta(hours=1), None)])
        second = scheduler.pending
        scheduler.close()
        return first, second, scheduler.pending

    assert asyncio.run(scenario()) == (6, 3, 0)
    assert api.created == []


def test_pending_drops_reminders_that_already_fired():
    api = RecordingApi()

    async def scenario():
        start = datetime.now(timezone.utc)
        scheduler = ReminderScheduler(
            api, "p@x.com", clock=lambda: start - timedelta(minutes=10, milliseconds=20)
        )
        scheduler.reschedule([_activity_at(start, None)])
        armed = scheduler.pending
        await asyncio.sleep(0.1)
        await scheduler.flush()
        remaining = scheduler.pending
        scheduler.close()
        return armed, remaining

    assert asyncio.run(scenario()) == (2, 1)
    assert [fields["title"] for fields in api.created] == ["Activity Starting Soon"]
