from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import Enum as PyEnum
from typing import Any

from app.core.currency import format_signed_amount
from app.models.enums import NotificationType
from app.schemas.stats import PeriodStatsRead
from app.services.aggregation import summarize_period
from app.services.email import EmailDeliveryError, EmailTransport
from app.services.notifications import NotificationSink
from app.services.store import TradeStore
from app.services.templates import EmailRenderer, RenderedEmail
from app.services.windows import (
    DateWindow,
    filter_trades,
    is_last_day_of_month,
    month_window,
    week_window,
    year_window,
)

logger = logging.getLogger(__name__)


class ReportKind(str, PyEnum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass
class BatchResult:
    sent: int = 0
    skipped: int = 0
    failed: int = 0


class ReportJob:
    """Builds and delivers periodic performance digests for every user.

    Each user is processed on its own: a failure while loading, rendering or
    sending for one user is logged and counted, and the batch moves on.
    """

    def __init__(
        self,
        store: TradeStore,
        transport: EmailTransport,
        notifications: NotificationSink,
        renderer: EmailRenderer,
        clock: Callable[[], date] = date.today,
        win_rate_precision: int = 1,
    ) -> None:
        self._store = store
        self._transport = transport
        self._notifications = notifications
        self._renderer = renderer
        self._clock = clock
        self._precision = win_rate_precision

    async def run_weekly(self, today: date | None = None) -> BatchResult:
        window = week_window(today or self._clock())
        logger.info("Starting weekly recap emails for %s - %s", window.start, window.end)
        return await self._run(ReportKind.WEEKLY, window)

    async def run_monthly(self, today: date | None = None) -> BatchResult:
        today = today or self._clock()
        if not is_last_day_of_month(today):
            logger.info("Skipping monthly reports, %s is not the last day of the month", today)
            return BatchResult()
        window = month_window(today)
        logger.info("Starting monthly reports for %s - %s", window.start, window.end)
        return await self._run(ReportKind.MONTHLY, window)

    async def _run(self, kind: ReportKind, window: DateWindow) -> BatchResult:
        result = BatchResult()
        for user in await self._store.list_report_recipients():
            if not user.email or not user.display_name:
                result.skipped += 1
                continue
            try:
                delivered = await self._deliver(kind, user, window)
            except EmailDeliveryError as exc:
                logger.error("Failed to send %s report to %s: %s", kind.value, user.id, exc)
                result.failed += 1
                continue
            except Exception:  # noqa: BLE001
                logger.exception("Unexpected error building %s report for %s", kind.value, user.id)
                result.failed += 1
                continue
            if delivered:
                result.sent += 1
            else:
                result.skipped += 1

        logger.info(
            "%s reports completed: %d sent, %d skipped, %d failed",
            kind.value.capitalize(),
            result.sent,
            result.skipped,
            result.failed,
        )
        return result

    async def _deliver(self, kind: ReportKind, user: Any, window: DateWindow) -> bool:
        trades = await self._store.get_trades(user.id)
        window_trades = filter_trades(trades, window)
        if not window_trades:
            return False
        setups = await self._store.get_setups(user.id)

        if kind is ReportKind.MONTHLY:
            stats = summarize_period(
                window_trades,
                setups,
                yearly_goal=user.yearly_goal,
                year_trades=filter_trades(trades, year_window(window.end)),
            )
            display = PeriodStatsRead.from_stats(stats, self._precision)
            email = self._renderer.monthly_report(user.display_name, display, window)
            notification_type = NotificationType.MONTHLY_REPORT
            title = f"{window.end:%B} Report Ready"
            link = "dashboard"
        else:
            stats = summarize_period(window_trades, setups)
            display = PeriodStatsRead.from_stats(stats, self._precision)
            email = self._renderer.weekly_recap(user.display_name, display, window)
            notification_type = NotificationType.WEEKLY_RECAP
            title = "Weekly Recap Ready"
            link = "checkins"

        message = f"{stats.total_trades} trades, {format_signed_amount(stats.total_pnl)}"
        await self._dispatch(user, email, notification_type, title, message, link)
        logger.info("%s report sent to %s", kind.value.capitalize(), user.email)
        return True

    async def _dispatch(
        self,
        user: Any,
        email: RenderedEmail,
        notification_type: NotificationType,
        title: str,
        message: str,
        link: str,
    ) -> None:
        email_result, notification_result = await asyncio.gather(
            self._transport.send(user.email, email.subject, email.html),
            self._notifications.record(user.id, notification_type.value, title, message, link),
            return_exceptions=True,
        )
        if isinstance(notification_result, BaseException):
            logger.error(
                "Failed to record %s notification for %s: %s",
                notification_type.value,
                user.id,
                notification_result,
            )
        if isinstance(email_result, BaseException):
            raise email_result
        if not email_result.ok:
            raise EmailDeliveryError(user.email, email_result.reason)
