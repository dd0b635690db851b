from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_email_transport, get_renderer
from app.core.config import get_settings
from app.schemas.verification import (
    VerificationCheckRequest,
    VerificationCheckResult,
    VerificationCodeIssued,
    VerificationCodeRequest,
)
from app.services.email import EmailDeliveryError, EmailTransport
from app.services.templates import EmailRenderer
from app.services.verification import (
    VerificationError,
    VerificationRateLimited,
    VerificationService,
)

router = APIRouter(prefix="/api/verification", tags=["verification"])

logger = logging.getLogger(__name__)


def get_verification_service(
    db: AsyncSession = Depends(get_db),
    transport: EmailTransport = Depends(get_email_transport),
    renderer: EmailRenderer = Depends(get_renderer),
) -> VerificationService:
    settings = get_settings()
    return VerificationService(
        db,
        transport,
        renderer,
        ttl_minutes=settings.verification_code_ttl_minutes,
        max_attempts=settings.verification_max_attempts,
        resend_cooldown_seconds=settings.verification_resend_cooldown_seconds,
    )


@router.post("/codes", response_model=VerificationCodeIssued, status_code=status.HTTP_201_CREATED)
async def request_code(
    payload: VerificationCodeRequest,
    db: AsyncSession = Depends(get_db),
    service: VerificationService = Depends(get_verification_service),
) -> VerificationCodeIssued:
    try:
        record = await service.issue(payload.email)
    except VerificationRateLimited as exc:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(exc),
            headers={"Retry-After": str(exc.retry_after)},
        ) from exc
    except EmailDeliveryError as exc:
        await db.rollback()
        logger.warning("Verification email failed for %s: %s", payload.email, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send email") from exc
    return VerificationCodeIssued(email=record.email, expires_at=record.expires_at)


@router.post("/verify", response_model=VerificationCheckResult)
async def verify_code(
    payload: VerificationCheckRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerificationCheckResult:
    try:
        verified = await service.verify(payload.email, payload.code)
    except VerificationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return VerificationCheckResult(verified=verified)
