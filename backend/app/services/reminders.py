from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from app.models.enums import NotificationType
from app.services.email import EmailTransport, send_or_raise
from app.services.notifications import NotificationSink
from app.services.reports import BatchResult
from app.services.store import JournalStore
from app.services.templates import EmailRenderer

logger = logging.getLogger(__name__)


def format_session_time(moment: datetime) -> str:
    """``Tuesday, June 4, 3:30 PM`` style label."""
    hour = moment.strftime("%I").lstrip("0") or "12"
    return f"{moment:%A, %B} {moment.day}, {hour}:{moment:%M %p}"


class SessionReminderJob:
    """Reminds mentees and their mentors about confirmed sessions happening tomorrow."""

    def __init__(
        self,
        store: JournalStore,
        transport: EmailTransport,
        notifications: NotificationSink,
        renderer: EmailRenderer,
        timezone_name: str = "America/New_York",
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._transport = transport
        self._notifications = notifications
        self._renderer = renderer
        self._tz = ZoneInfo(timezone_name)
        self._now = now or (lambda: datetime.now(self._tz))

    async def run(self, now: datetime | None = None) -> BatchResult:
        logger.info("Checking for upcoming sessions...")
        current = now or self._now()
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        current = current.astimezone(self._tz)
        tomorrow = (current + timedelta(days=1)).date()
        result = BatchResult()

        for mentee in await self._store.list_mentees():
            try:
                sessions = await self._store.get_confirmed_sessions(mentee.id)
            except Exception:  # noqa: BLE001
                logger.exception("Failed to load sessions for mentee %s", mentee.id)
                result.failed += 1
                continue

            for session in sessions:
                if session.date_time is None:
                    continue
                starts_at = session.date_time
                if starts_at.tzinfo is None:
                    starts_at = starts_at.replace(tzinfo=timezone.utc)
                starts_at = starts_at.astimezone(self._tz)
                if starts_at.date() != tomorrow:
                    continue
                await self._remind(mentee, session, starts_at, result)

        logger.info(
            "Session reminder check completed: %d sent, %d failed", result.sent, result.failed
        )
        return result

    async def _remind(
        self, mentee: Any, session: Any, starts_at: datetime, result: BatchResult
    ) -> None:
        when = format_session_time(starts_at)
        mentor_name = mentee.mentor_name or "your mentor"
        if not mentee.email:
            result.skipped += 1
        else:
            try:
                email = self._renderer.session_reminder(
                    mentee.display_name or "there",
                    mentor_name,
                    when,
                    session.topic,
                    session.video_link,
                )
                await send_or_raise(self._transport, mentee.email, email.subject, email.html)
            except Exception:  # noqa: BLE001
                logger.exception("Failed to send session reminder for session %s", session.id)
                result.failed += 1
            else:
                logger.info("Session reminder sent to %s", mentee.email)
                result.sent += 1

        await self._notify(
            mentee.id,
            f"{when} with {mentor_name}: {session.topic}",
            "sessions",
        )
        if session.scheduled_by_id:
            await self._notify(
                session.scheduled_by_id,
                f"{when} with {mentee.display_name}: {session.topic}",
                "mentees",
            )

    async def _notify(self, user_id: str, message: str, link: str) -> None:
        try:
            await self._notifications.record(
                user_id,
                NotificationType.SESSION_REMINDER.value,
                "Session Tomorrow!",
                message,
                link,
            )
        except Exception:  # noqa: BLE001
            logger.exception("Failed to record session reminder notification for %s", user_id)
