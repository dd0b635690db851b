from __future__ import annotations

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.core.config import get_settings
from app.schemas.stats import PeriodReport, PeriodStatsRead
from app.services.aggregation import summarize_period
from app.services.store import JournalStore
from app.services.windows import (
    filter_trades,
    local_today,
    month_window,
    week_window,
    year_window,
)

router = APIRouter(prefix="/api/users/{user_id}/stats", tags=["stats"])


@router.get("", response_model=PeriodReport)
async def get_period_stats(
    user_id: str,
    period: Literal["week", "month"] = Query(default="week"),
    today: date | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> PeriodReport:
    settings = get_settings()
    store = JournalStore(db)
    user = await store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    today = today or local_today(settings.scheduler_timezone)
    window = month_window(today) if period == "month" else week_window(today)
    trades = await store.get_trades(user_id)
    window_trades = filter_trades(trades, window)
    if not window_trades:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No trades in this period")

    setups = await store.get_setups(user_id)
    if period == "month":
        stats = summarize_period(
            window_trades,
            setups,
            yearly_goal=user.yearly_goal,
            year_trades=filter_trades(trades, year_window(today)),
        )
    else:
        stats = summarize_period(window_trades, setups)

    return PeriodReport(
        user_id=user_id,
        period=period,
        start=window.start,
        end=window.end,
        stats=PeriodStatsRead.from_stats(stats, settings.win_rate_precision),
    )
