from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import MentoringSession, SessionStatus, Setup, Trade, User
from app.services.aggregation import SetupRecord, TradeRecord


class TradeStore(Protocol):
    async def list_report_recipients(self) -> Sequence[User]: ...

    async def get_trades(self, user_id: str) -> list[TradeRecord]: ...

    async def get_setups(self, user_id: str) -> list[SetupRecord]: ...


class JournalStore:
    """Read access to users, trades and mentoring sessions."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_user(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)

    async def list_report_recipients(self) -> Sequence[User]:
        stmt = (
            select(User)
            .where(User.email.is_not(None), User.display_name.is_not(None))
            .order_by(User.id)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def get_trades(self, user_id: str) -> list[TradeRecord]:
        stmt = select(Trade).where(Trade.user_id == user_id).order_by(Trade.entry_date, Trade.id)
        result = await self._session.execute(stmt)
        return [TradeRecord.from_model(trade) for trade in result.scalars().all()]

    async def get_setups(self, user_id: str) -> list[SetupRecord]:
        result = await self._session.execute(select(Setup).where(Setup.user_id == user_id))
        return [SetupRecord(id=setup.id, name=setup.name) for setup in result.scalars().all()]

    async def list_mentees(self) -> Sequence[User]:
        result = await self._session.execute(
            select(User).where(User.mentor_id.is_not(None)).order_by(User.id)
        )
        return result.scalars().all()

    async def get_confirmed_sessions(self, user_id: str) -> Sequence[MentoringSession]:
        stmt = select(MentoringSession).where(
            MentoringSession.user_id == user_id,
            MentoringSession.status == SessionStatus.CONFIRMED,
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()
