from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from app.models.enums import SHORT_POSITION_TYPES, PositionType


class EmptyWindowError(ValueError):
    """Raised when a period is summarized without any trades in it."""


@dataclass(frozen=True)
class TradeRecord:
    entry_date: date | None
    entry_price: float
    exit_price: float | None
    shares: float
    position_type: str = PositionType.LONG.value
    entry_fees: float = 0.0
    exit_fees: float = 0.0
    setup_id: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TradeRecord:
        """Build a record from a loosely-typed document.

        Both ``entryPrice`` and ``entry_price`` key styles are accepted. Fields
        that are missing or not numeric degrade to zero instead of failing.
        """

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data:
                    return data[key]
            return None

        setup_id = pick("setupId", "setup_id")
        return cls(
            entry_date=parse_entry_date(pick("entryDate", "entry_date", "date")),
            entry_price=to_number(pick("entryPrice", "entry_price")),
            exit_price=to_optional_number(pick("exitPrice", "exit_price")),
            shares=to_number(pick("shares")),
            position_type=position_type_value(pick("positionType", "position_type")),
            entry_fees=to_number(pick("entryFees", "entry_fees")),
            exit_fees=to_number(pick("exitFees", "exit_fees")),
            setup_id=str(setup_id) if setup_id not in (None, "") else None,
        )

    @classmethod
    def from_model(cls, trade: Any) -> TradeRecord:
        return cls(
            entry_date=parse_entry_date(trade.entry_date),
            entry_price=to_number(trade.entry_price),
            exit_price=to_optional_number(trade.exit_price),
            shares=to_number(trade.shares),
            position_type=position_type_value(trade.position_type),
            entry_fees=to_number(trade.entry_fees),
            exit_fees=to_number(trade.exit_fees),
            setup_id=trade.setup_id or None,
        )


@dataclass(frozen=True)
class SetupRecord:
    id: str
    name: str


@dataclass(frozen=True)
class PeriodStats:
    """Unrounded statistics for one user over one date window."""

    total_pnl: float
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    best_day: float
    worst_day: float
    trading_days: int
    avg_per_day: float
    avg_win: float
    avg_loss: float
    top_setup: str | None
    goal_progress: float | None = None


def to_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_optional_number(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def position_type_value(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    return str(value) if value else PositionType.LONG.value


def parse_entry_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def calculate_trade_pnl(trade: TradeRecord) -> float:
    """Net profit or loss of a single trade after fees."""
    entry_price = trade.entry_price
    shares = trade.shares
    if not entry_price or not shares:
        return 0.0

    exit_price = trade.exit_price if trade.exit_price is not None else entry_price
    direction = -1 if trade.position_type in SHORT_POSITION_TYPES else 1
    gross = (exit_price - entry_price) * shares * direction
    return gross - (trade.entry_fees + trade.exit_fees)


def summarize_period(
    trades: Iterable[TradeRecord],
    setups: Iterable[SetupRecord] = (),
    *,
    yearly_goal: float | None = None,
    year_trades: Iterable[TradeRecord] | None = None,
) -> PeriodStats:
    """Reduce the trades of one window into a :class:`PeriodStats`.

    The trades must already be filtered to the window and the window must not
    be empty; callers skip users without activity before getting here.

    ``yearly_goal`` enables goal progress, computed from ``year_trades``
    (falling back to the window itself when no year-to-date trades are given).
    """
    records = list(trades)
    if not records:
        raise EmptyWindowError("Cannot summarize a window without trades")

    total_pnl = 0.0
    win_pnls: list[float] = []
    loss_pnls: list[float] = []
    pnl_by_day: dict[date | None, float] = {}
    pnl_by_setup: dict[str, float] = {}

    for trade in records:
        pnl = calculate_trade_pnl(trade)
        total_pnl += pnl
        if pnl > 0:
            win_pnls.append(pnl)
        elif pnl < 0:
            loss_pnls.append(pnl)
        pnl_by_day[trade.entry_date] = pnl_by_day.get(trade.entry_date, 0.0) + pnl
        if trade.setup_id:
            pnl_by_setup[trade.setup_id] = pnl_by_setup.get(trade.setup_id, 0.0) + pnl

    total_trades = len(records)
    trading_days = len(pnl_by_day)
    # Zero is part of the extremum set so an all-losing period never shows a negative best day.
    day_totals = [0.0, *pnl_by_day.values()]

    return PeriodStats(
        total_pnl=total_pnl,
        total_trades=total_trades,
        wins=len(win_pnls),
        losses=len(loss_pnls),
        win_rate=len(win_pnls) / total_trades * 100 if total_trades else 0.0,
        best_day=max(day_totals),
        worst_day=min(day_totals),
        trading_days=trading_days,
        avg_per_day=total_pnl / trading_days if trading_days else 0.0,
        avg_win=sum(win_pnls) / len(win_pnls) if win_pnls else 0.0,
        avg_loss=sum(loss_pnls) / len(loss_pnls) if loss_pnls else 0.0,
        top_setup=_top_setup_name(pnl_by_setup, setups),
        goal_progress=_goal_progress(total_pnl, yearly_goal, year_trades),
    )


def _top_setup_name(pnl_by_setup: dict[str, float], setups: Iterable[SetupRecord]) -> str | None:
    best_id: str | None = None
    best_total = 0.0
    for setup_id, total in pnl_by_setup.items():
        if total > best_total:
            best_id, best_total = setup_id, total
    if best_id is None:
        return None
    names = {setup.id: setup.name for setup in setups}
    return names.get(best_id)


def _goal_progress(
    period_pnl: float,
    yearly_goal: float | None,
    year_trades: Iterable[TradeRecord] | None,
) -> float | None:
    goal = to_number(yearly_goal)
    if goal <= 0:
        return None
    if year_trades is None:
        year_to_date = period_pnl
    else:
        year_to_date = sum(calculate_trade_pnl(trade) for trade in year_trades)
    return year_to_date / goal * 100
