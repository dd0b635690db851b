from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import Settings
from app.services.email import ResendEmailClient
from app.services.notifications import SqlNotificationSink
from app.services.reminders import SessionReminderJob
from app.services.reports import BatchResult, ReportJob
from app.services.store import JournalStore
from app.services.templates import EmailRenderer
from app.services.windows import local_today

logger = logging.getLogger(__name__)


@dataclass
class JobContext:
    store: JournalStore
    transport: ResendEmailClient
    notifications: SqlNotificationSink
    renderer: EmailRenderer


@asynccontextmanager
async def job_context(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[JobContext]:
    transport = ResendEmailClient.from_settings(settings)
    try:
        async with session_factory() as session:
            yield JobContext(
                store=JournalStore(session),
                transport=transport,
                notifications=SqlNotificationSink(session_factory),
                renderer=EmailRenderer(settings.app_url, settings.brand_name),
            )
    finally:
        await transport.aclose()


def _report_job(settings: Settings, ctx: JobContext) -> ReportJob:
    return ReportJob(
        store=ctx.store,
        transport=ctx.transport,
        notifications=ctx.notifications,
        renderer=ctx.renderer,
        clock=lambda: local_today(settings.scheduler_timezone),
        win_rate_precision=settings.win_rate_precision,
    )


async def run_weekly_recap(
    settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> BatchResult | None:
    try:
        async with job_context(settings, session_factory) as ctx:
            return await _report_job(settings, ctx).run_weekly()
    except Exception:  # noqa: BLE001
        logger.exception("Weekly recap job failed")
        return None


async def run_monthly_report(
    settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> BatchResult | None:
    try:
        async with job_context(settings, session_factory) as ctx:
            return await _report_job(settings, ctx).run_monthly()
    except Exception:  # noqa: BLE001
        logger.exception("Monthly report job failed")
        return None


async def run_session_reminders(
    settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> BatchResult | None:
    try:
        async with job_context(settings, session_factory) as ctx:
            job = SessionReminderJob(
                store=ctx.store,
                transport=ctx.transport,
                notifications=ctx.notifications,
                renderer=ctx.renderer,
                timezone_name=settings.scheduler_timezone,
            )
            return await job.run()
    except Exception:  # noqa: BLE001
        logger.exception("Session reminder job failed")
        return None


def create_scheduler(
    settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> AsyncIOScheduler:
    """Scheduler with the weekly, monthly and daily reminder jobs registered.

    The monthly job fires on days 28-31 and the job itself only proceeds on
    the real last day of the month.
    """
    tz = settings.scheduler_timezone
    scheduler = AsyncIOScheduler(timezone=tz)
    args = [settings, session_factory]

    scheduler.add_job(
        run_weekly_recap,
        trigger=CronTrigger(day_of_week="fri", hour=13, minute=0, timezone=tz),
        args=args,
        id="weekly_recap",
        name="Weekly recap emails",
        replace_existing=True,
    )
    scheduler.add_job(
        run_monthly_report,
        trigger=CronTrigger(day="28-31", hour=17, minute=0, timezone=tz),
        args=args,
        id="monthly_report",
        name="Monthly report emails",
        replace_existing=True,
    )
    scheduler.add_job(
        run_session_reminders,
        trigger=CronTrigger(hour=9, minute=0, timezone=tz),
        args=args,
        id="session_reminders",
        name="Session reminders for tomorrow",
        replace_existing=True,
    )
    logger.info("Scheduler configured with %d jobs in %s", len(scheduler.get_jobs()), tz)
    return scheduler
