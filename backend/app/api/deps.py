from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.db.session import SessionFactory, get_session
from app.services.email import EmailTransport, ResendEmailClient
from app.services.notifications import NotificationSink, SqlNotificationSink
from app.services.templates import EmailRenderer


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return SessionFactory


async def get_email_transport() -> AsyncGenerator[EmailTransport, None]:
    client = ResendEmailClient.from_settings(get_settings())
    try:
        yield client
    finally:
        await client.aclose()


def get_renderer() -> EmailRenderer:
    settings = get_settings()
    return EmailRenderer(settings.app_url, settings.brand_name)


def get_notification_sink() -> NotificationSink:
    return SqlNotificationSink(get_session_factory())
