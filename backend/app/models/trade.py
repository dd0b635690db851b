from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.enums import PositionType
from app.models.user import User


class Setup(Base):
    __tablename__ = "setups"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(200))

    user: Mapped[User] = relationship(back_populates="setups")


class Trade(Base):
    __tablename__ = "trades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    symbol: Mapped[str | None] = mapped_column(String(50))
    entry_date: Mapped[date] = mapped_column(Date, index=True)
    entry_price: Mapped[float | None] = mapped_column(Numeric(18, 6))
    exit_price: Mapped[float | None] = mapped_column(Numeric(18, 6))
    shares: Mapped[float | None] = mapped_column(Numeric(18, 4))
    position_type: Mapped[str] = mapped_column(String(32), default=PositionType.LONG.value)
    entry_fees: Mapped[float] = mapped_column(Numeric(18, 6), default=0)
    exit_fees: Mapped[float] = mapped_column(Numeric(18, 6), default=0)
    setup_id: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    user: Mapped[User] = relationship(back_populates="trades")
