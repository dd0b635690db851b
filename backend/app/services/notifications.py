from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models import Notification

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    async def record(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> None: ...


class SqlNotificationSink:
    """Persists in-app notifications, each in its own short-lived session.

    Failures are logged and swallowed so a notification never breaks the
    caller's flow.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> None:
        try:
            async with self._session_factory() as session:
                session.add(
                    Notification(user_id=user_id, type=type, title=title, message=message, link=link)
                )
                await session.commit()
        except Exception:  # noqa: BLE001
            logger.exception("Failed to create %s notification for %s", type, user_id)
            return
        logger.info("Notification created for %s: %s", user_id, type)


async def list_notifications(
    session: AsyncSession,
    user_id: str,
    unread_only: bool = False,
    limit: int = 50,
) -> Sequence[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()


async def mark_read(session: AsyncSession, user_id: str, notification_id: int) -> Notification | None:
    notification = await session.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        return None
    notification.read = True
    await session.commit()
    await session.refresh(notification)
    return notification
