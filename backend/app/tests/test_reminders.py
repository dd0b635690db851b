from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import select

from app.models import MentoringSession, Notification, SessionStatus, User
from app.services.notifications import SqlNotificationSink
from app.services.reminders import SessionReminderJob, format_session_time
from app.services.store import JournalStore
from app.tests.fakes import BrokenSink, FakeTransport

NEW_YORK = ZoneInfo("America/New_York")


def test_format_session_time() -> None:
    moment = datetime(2024, 6, 4, 15, 30, tzinfo=NEW_YORK)
    assert format_session_time(moment) == "Tuesday, June 4, 3:30 PM"


async def test_reminds_mentee_and_mentor_about_tomorrow(
    async_session, session_factory, transport, renderer
) -> None:
    async_session.add_all(
        [
            User(id="mentor", email="coach@example.com", display_name="Coach"),
            User(
                id="mentee",
                email="ana@example.com",
                display_name="Ana",
                mentor_id="mentor",
                mentor_name="Coach",
            ),
            MentoringSession(
                user_id="mentee",
                scheduled_by_id="mentor",
                # 2024-06-04 15:30 in New York
                date_time=datetime(2024, 6, 4, 19, 30, tzinfo=timezone.utc),
                topic="Risk management",
                video_link="https://meet.example.com/abc",
                status=SessionStatus.CONFIRMED,
            ),
            MentoringSession(
                user_id="mentee",
                scheduled_by_id="mentor",
                date_time=datetime(2024, 6, 4, 20, 0, tzinfo=timezone.utc),
                topic="Not confirmed yet",
                status=SessionStatus.PENDING,
            ),
            MentoringSession(
                user_id="mentee",
                scheduled_by_id="mentor",
                date_time=datetime(2024, 6, 6, 14, 0, tzinfo=timezone.utc),
                topic="Later this week",
                status=SessionStatus.CONFIRMED,
            ),
        ]
    )
    await async_session.commit()

    job = SessionReminderJob(
        store=JournalStore(async_session),
        transport=transport,
        notifications=SqlNotificationSink(session_factory),
        renderer=renderer,
    )
    result = await job.run(now=datetime(2024, 6, 3, 9, 0, tzinfo=NEW_YORK))

    assert result.sent == 1
    [email] = transport.sent
    assert email.to == "ana@example.com"
    assert email.subject == "⏰ Session Tomorrow with Coach"
    assert "Risk management" in email.html
    assert "https://meet.example.com/abc" in email.html

    rows = (await async_session.execute(select(Notification).order_by(Notification.id))).scalars().all()
    assert [(row.user_id, row.link) for row in rows] == [("mentee", "sessions"), ("mentor", "mentees")]
    assert rows[0].message == "Tuesday, June 4, 3:30 PM with Coach: Risk management"
    assert rows[1].message == "Tuesday, June 4, 3:30 PM with Ana: Risk management"
    assert all(row.type == "session_reminder" and not row.read for row in rows)


async def test_failed_reminder_email_still_notifies(async_session, session_factory, renderer) -> None:
    async_session.add_all(
        [
            User(id="mentee", email="ana@example.com", display_name="Ana", mentor_id="m", mentor_name="Coach"),
            MentoringSession(
                user_id="mentee",
                date_time=datetime(2024, 6, 4, 14, 0, tzinfo=timezone.utc),
                topic="Journaling",
                status=SessionStatus.CONFIRMED,
            ),
        ]
    )
    await async_session.commit()

    job = SessionReminderJob(
        store=JournalStore(async_session),
        transport=FakeTransport(failing={"ana@example.com"}),
        notifications=SqlNotificationSink(session_factory),
        renderer=renderer,
    )
    result = await job.run(now=datetime(2024, 6, 3, 9, 0, tzinfo=NEW_YORK))

    assert (result.sent, result.failed) == (0, 1)
    rows = (await async_session.execute(select(Notification))).scalars().all()
    assert [row.user_id for row in rows] == ["mentee"]


async def test_notification_failure_does_not_stop_other_mentees(async_session, transport, renderer) -> None:
    tomorrow_utc = datetime(2024, 6, 4, 14, 0, tzinfo=timezone.utc)
    async_session.add_all(
        [
            User(id="m1", email="m1@example.com", display_name="One", mentor_id="c", mentor_name="Coach"),
            User(id="m2", email="m2@example.com", display_name="Two", mentor_id="c", mentor_name="Coach"),
            MentoringSession(
                user_id="m1",
                scheduled_by_id="c",
                date_time=tomorrow_utc,
                topic="Entries",
                status=SessionStatus.CONFIRMED,
            ),
            MentoringSession(
                user_id="m2",
                scheduled_by_id="c",
                date_time=tomorrow_utc,
                topic="Exits",
                status=SessionStatus.CONFIRMED,
            ),
        ]
    )
    await async_session.commit()
    sink = BrokenSink()

    job = SessionReminderJob(
        store=JournalStore(async_session),
        transport=transport,
        notifications=sink,
        renderer=renderer,
    )
    result = await job.run(now=datetime(2024, 6, 3, 9, 0, tzinfo=NEW_YORK))

    assert (result.sent, result.failed) == (2, 0)
    assert sorted(email.to for email in transport.sent) == ["m1@example.com", "m2@example.com"]
    assert sink.calls == 4


class _SessionsUnavailable(JournalStore):
    async def get_confirmed_sessions(self, user_id: str):
        if user_id == "m1":
            raise RuntimeError("sessions unavailable")
        return await super().get_confirmed_sessions(user_id)


async def test_session_load_failure_is_counted_per_mentee(async_session, transport, sink, renderer) -> None:
    async_session.add_all(
        [
            User(id="m1", email="m1@example.com", display_name="One", mentor_id="c", mentor_name="Coach"),
            User(id="m2", email="m2@example.com", display_name="Two", mentor_id="c", mentor_name="Coach"),
            MentoringSession(
                user_id="m2",
                date_time=datetime(2024, 6, 4, 14, 0, tzinfo=timezone.utc),
                topic="Exits",
                status=SessionStatus.CONFIRMED,
            ),
        ]
    )
    await async_session.commit()

    job = SessionReminderJob(
        store=_SessionsUnavailable(async_session),
        transport=transport,
        notifications=sink,
        renderer=renderer,
    )
    result = await job.run(now=datetime(2024, 6, 3, 9, 0, tzinfo=NEW_YORK))

    assert (result.sent, result.failed) == (1, 1)
    assert [email.to for email in transport.sent] == ["m2@example.com"]
    assert [record.user_id for record in sink.records] == ["m2"]
