from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from app.core.currency import round_currency, round_percent
from app.services.aggregation import PeriodStats


class PeriodStatsRead(BaseModel):
    """Presentation form of :class:`PeriodStats`.

    Currency is rounded to whole units and percentages to ``precision``
    decimals here and nowhere earlier.
    """

    total_pnl: int
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    best_day: int
    worst_day: int
    trading_days: int
    avg_per_day: int
    avg_win: int
    avg_loss: int
    top_setup: str | None
    goal_progress: float | None = None

    @classmethod
    def from_stats(cls, stats: PeriodStats, precision: int = 1) -> PeriodStatsRead:
        return cls(
            total_pnl=round_currency(stats.total_pnl),
            total_trades=stats.total_trades,
            wins=stats.wins,
            losses=stats.losses,
            win_rate=round_percent(stats.win_rate, precision),
            best_day=round_currency(stats.best_day),
            worst_day=round_currency(stats.worst_day),
            trading_days=stats.trading_days,
            avg_per_day=round_currency(stats.avg_per_day),
            avg_win=round_currency(stats.avg_win),
            avg_loss=round_currency(stats.avg_loss),
            top_setup=stats.top_setup,
            goal_progress=(
                round_percent(stats.goal_progress, 0) if stats.goal_progress is not None else None
            ),
        )


class PeriodReport(BaseModel):
    user_id: str
    period: str
    start: date
    end: date
    stats: PeriodStatsRead
