from __future__ import annotations

from dataclasses import dataclass, field

from app.services.aggregation import SetupRecord, TradeRecord
from app.services.email import EmailResult


@dataclass
class SentEmail:
    to: str
    subject: str
    html: str


@dataclass
class FakeTransport:
    failing: set[str] = field(default_factory=set)
    raising: set[str] = field(default_factory=set)
    sent: list[SentEmail] = field(default_factory=list)

    async def send(self, to: str, subject: str, html: str) -> EmailResult:
        if to in self.raising:
            raise ConnectionError(f"connection reset while sending to {to}")
        if to in self.failing:
            return EmailResult(ok=False, reason="rejected")
        self.sent.append(SentEmail(to=to, subject=subject, html=html))
        return EmailResult(ok=True, message_id=f"msg-{len(self.sent)}")


@dataclass
class RecordedNotification:
    user_id: str
    type: str
    title: str
    message: str
    link: str | None


@dataclass
class FakeSink:
    records: list[RecordedNotification] = field(default_factory=list)

    async def record(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> None:
        self.records.append(RecordedNotification(user_id, type, title, message, link))


@dataclass
class Recipient:
    id: str
    email: str | None
    display_name: str | None
    yearly_goal: float | None = None


@dataclass
class InMemoryStore:
    users: list[Recipient] = field(default_factory=list)
    trades: dict[str, list[TradeRecord]] = field(default_factory=dict)
    setups: dict[str, list[SetupRecord]] = field(default_factory=dict)
    broken_users: set[str] = field(default_factory=set)

    async def list_report_recipients(self) -> list[Recipient]:
        return list(self.users)

    async def get_trades(self, user_id: str) -> list[TradeRecord]:
        if user_id in self.broken_users:
            raise RuntimeError(f"store unavailable for {user_id}")
        return list(self.trades.get(user_id, []))

    async def get_setups(self, user_id: str) -> list[SetupRecord]:
        return list(self.setups.get(user_id, []))




@dataclass
class BrokenSink:
    calls: int = 0

    async def record(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> None:
        self.calls += 1
        raise RuntimeError("notification store down")
