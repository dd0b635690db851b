from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import VerificationCode
from app.services.email import EmailTransport, send_or_raise
from app.services.templates import EmailRenderer

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


class VerificationError(Exception):
    pass


class VerificationRateLimited(VerificationError):
    def __init__(self, retry_after: int) -> None:
        super().__init__(f"A code was sent recently, retry in {retry_after} seconds")
        self.retry_after = retry_after


class VerificationExpired(VerificationError):
    pass


class VerificationLocked(VerificationError):
    pass


class VerificationInvalid(VerificationError):
    pass


def _hash_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def _aware(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back as naive UTC values.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def generate_code() -> str:
    return f"{secrets.randbelow(10 ** CODE_LENGTH):0{CODE_LENGTH}d}"


class VerificationService:
    def __init__(
        self,
        session: AsyncSession,
        transport: EmailTransport,
        renderer: EmailRenderer,
        ttl_minutes: int = 10,
        max_attempts: int = 5,
        resend_cooldown_seconds: int = 60,
        now: Callable[[], datetime] | None = None,
        code_factory: Callable[[], str] = generate_code,
    ) -> None:
        self._session = session
        self._transport = transport
        self._renderer = renderer
        self._ttl = timedelta(minutes=ttl_minutes)
        self._max_attempts = max_attempts
        self._cooldown = timedelta(seconds=resend_cooldown_seconds)
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._code_factory = code_factory

    async def _get(self, email: str) -> VerificationCode | None:
        result = await self._session.execute(
            select(VerificationCode).where(VerificationCode.email == email)
        )
        return result.scalar_one_or_none()

    async def issue(self, email: str) -> VerificationCode:
        """Create a fresh code for ``email``, replacing any previous one, and email it."""
        email = email.lower()
        now = self._now()
        record = await self._get(email)
        if record is not None:
            elapsed = now - _aware(record.created_at)
            if elapsed < self._cooldown:
                raise VerificationRateLimited(int((self._cooldown - elapsed).total_seconds()) + 1)

        code = self._code_factory()
        if record is None:
            record = VerificationCode(email=email)
            self._session.add(record)
        record.code_hash = _hash_code(code)
        record.attempts = 0
        record.created_at = now
        record.expires_at = now + self._ttl

        rendered = self._renderer.verification_code(code, int(self._ttl.total_seconds() // 60))
        await send_or_raise(self._transport, email, rendered.subject, rendered.html)
        await self._session.commit()
        logger.info("Verification code issued for %s", email)
        return record

    async def verify(self, email: str, code: str) -> bool:
        email = email.lower()
        record = await self._get(email)
        if record is None:
            raise VerificationInvalid("No verification code was requested for this email")
        if self._now() >= _aware(record.expires_at):
            await self._session.delete(record)
            await self._session.commit()
            raise VerificationExpired("Verification code has expired")
        if record.attempts >= self._max_attempts:
            raise VerificationLocked("Too many failed attempts, request a new code")

        if not hmac.compare_digest(record.code_hash, _hash_code(code)):
            record.attempts += 1
            await self._session.commit()
            logger.warning("Invalid verification code for %s (attempt %d)", email, record.attempts)
            if record.attempts >= self._max_attempts:
                raise VerificationLocked("Too many failed attempts, request a new code")
            raise VerificationInvalid("Invalid verification code")

        await self._session.delete(record)
        await self._session.commit()
        logger.info("Verification code accepted for %s", email)
        return True
