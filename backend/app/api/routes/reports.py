from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_email_transport, get_notification_sink, get_renderer
from app.core.config import get_settings
from app.schemas.reports import BatchResultRead
from app.services.email import EmailTransport
from app.services.notifications import NotificationSink
from app.services.reminders import SessionReminderJob
from app.services.reports import ReportJob
from app.services.store import JournalStore
from app.services.templates import EmailRenderer
from app.services.windows import local_today

router = APIRouter(prefix="/api/reports", tags=["reports"])


def get_report_job(
    db: AsyncSession = Depends(get_db),
    transport: EmailTransport = Depends(get_email_transport),
    notifications: NotificationSink = Depends(get_notification_sink),
    renderer: EmailRenderer = Depends(get_renderer),
) -> ReportJob:
    settings = get_settings()
    return ReportJob(
        store=JournalStore(db),
        transport=transport,
        notifications=notifications,
        renderer=renderer,
        clock=lambda: local_today(settings.scheduler_timezone),
        win_rate_precision=settings.win_rate_precision,
    )


@router.post("/weekly/run", response_model=BatchResultRead)
async def run_weekly(
    today: date | None = Query(default=None),
    job: ReportJob = Depends(get_report_job),
) -> BatchResultRead:
    result = await job.run_weekly(today)
    return BatchResultRead(sent=result.sent, skipped=result.skipped, failed=result.failed)


@router.post("/monthly/run", response_model=BatchResultRead)
async def run_monthly(
    today: date | None = Query(default=None),
    job: ReportJob = Depends(get_report_job),
) -> BatchResultRead:
    result = await job.run_monthly(today)
    return BatchResultRead(sent=result.sent, skipped=result.skipped, failed=result.failed)


@router.post("/session-reminders/run", response_model=BatchResultRead)
async def run_session_reminders(
    now: datetime | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    transport: EmailTransport = Depends(get_email_transport),
    notifications: NotificationSink = Depends(get_notification_sink),
    renderer: EmailRenderer = Depends(get_renderer),
) -> BatchResultRead:
    job = SessionReminderJob(
        store=JournalStore(db),
        transport=transport,
        notifications=notifications,
        renderer=renderer,
        timezone_name=get_settings().scheduler_timezone,
    )
    result = await job.run(now)
    return BatchResultRead(sent=result.sent, skipped=result.skipped, failed=result.failed)
