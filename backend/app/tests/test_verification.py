from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.services.email import EmailDeliveryError
from app.services.verification import (
    VerificationExpired,
    VerificationInvalid,
    VerificationLocked,
    VerificationRateLimited,
    VerificationService,
    generate_code,
)
from app.tests.fakes import FakeTransport


class Clock:
    def __init__(self) -> None:
        self.current = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture()
def clock() -> Clock:
    return Clock()


@pytest.fixture()
def service(async_session, transport, renderer, clock) -> VerificationService:
    return VerificationService(
        async_session,
        transport,
        renderer,
        ttl_minutes=10,
        max_attempts=3,
        resend_cooldown_seconds=60,
        now=clock,
        code_factory=lambda: "123456",
    )


def test_generated_codes_are_six_digits() -> None:
    for _ in range(20):
        code = generate_code()
        assert len(code) == 6 and code.isdigit()


async def test_issue_emails_code_and_verify_consumes_it(service, transport) -> None:
    record = await service.issue("Ana@Example.com")

    assert record.email == "ana@example.com"
    assert record.code_hash != "123456"
    [email] = transport.sent
    assert email.to == "ana@example.com"
    assert "123456" in email.html

    assert await service.verify("ana@example.com", "123456") is True
    with pytest.raises(VerificationInvalid):
        await service.verify("ana@example.com", "123456")


async def test_resend_is_rate_limited(service, clock) -> None:
    await service.issue("ana@example.com")

    clock.advance(seconds=30)
    with pytest.raises(VerificationRateLimited) as excinfo:
        await service.issue("ana@example.com")
    assert 0 < excinfo.value.retry_after <= 31

    clock.advance(seconds=31)
    await service.issue("ana@example.com")


async def test_expired_code_is_rejected(service, clock) -> None:
    await service.issue("ana@example.com")
    clock.advance(minutes=10)

    with pytest.raises(VerificationExpired):
        await service.verify("ana@example.com", "123456")


async def test_code_locks_after_too_many_attempts(service) -> None:
    await service.issue("ana@example.com")

    with pytest.raises(VerificationInvalid):
        await service.verify("ana@example.com", "000000")
    with pytest.raises(VerificationInvalid):
        await service.verify("ana@example.com", "000001")
    with pytest.raises(VerificationLocked):
        await service.verify("ana@example.com", "000002")
    with pytest.raises(VerificationLocked):
        await service.verify("ana@example.com", "123456")


async def test_reissue_resets_attempts(service, clock) -> None:
    await service.issue("ana@example.com")
    with pytest.raises(VerificationInvalid):
        await service.verify("ana@example.com", "999999")

    clock.advance(minutes=2)
    record = await service.issue("ana@example.com")

    assert record.attempts == 0
    assert await service.verify("ana@example.com", "123456") is True


async def test_delivery_failure_is_raised(async_session, renderer, clock) -> None:
    service = VerificationService(
        async_session,
        FakeTransport(failing={"ana@example.com"}),
        renderer,
        now=clock,
    )

    with pytest.raises(EmailDeliveryError):
        await service.issue("ana@example.com")
