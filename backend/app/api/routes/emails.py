from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_email_transport, get_renderer
from app.schemas.emails import (
    DailyTargetEmailRequest,
    EmailSentResponse,
    InviteAcceptedEmailRequest,
    MentorInviteEmailRequest,
    RawEmailRequest,
    RegistrationEmailRequest,
)
from app.services.email import EmailDeliveryError, EmailTransport, send_or_raise
from app.services.templates import EmailRenderer, RenderedEmail

router = APIRouter(prefix="/api", tags=["emails"])

logger = logging.getLogger(__name__)


async def _deliver(transport: EmailTransport, to: str, email: RenderedEmail) -> EmailSentResponse:
    try:
        await send_or_raise(transport, to, email.subject, email.html)
    except EmailDeliveryError as exc:
        logger.warning("Email delivery failed for %s: %s", to, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send email") from exc
    return EmailSentResponse()


@router.post("/emails/registration", response_model=EmailSentResponse)
async def send_registration_email(
    payload: RegistrationEmailRequest,
    transport: EmailTransport = Depends(get_email_transport),
    renderer: EmailRenderer = Depends(get_renderer),
) -> EmailSentResponse:
    return await _deliver(transport, payload.email, renderer.registration(payload.name))


@router.post("/emails/mentor-invite", response_model=EmailSentResponse)
async def send_mentor_invite_email(
    payload: MentorInviteEmailRequest,
    transport: EmailTransport = Depends(get_email_transport),
    renderer: EmailRenderer = Depends(get_renderer),
) -> EmailSentResponse:
    email = renderer.mentor_invite(payload.mentor_name, payload.mentee_email)
    return await _deliver(transport, payload.mentee_email, email)


@router.post("/emails/invite-accepted", response_model=EmailSentResponse)
async def send_invite_accepted_email(
    payload: InviteAcceptedEmailRequest,
    transport: EmailTransport = Depends(get_email_transport),
    renderer: EmailRenderer = Depends(get_renderer),
) -> EmailSentResponse:
    return await _deliver(transport, payload.mentor_email, renderer.invite_accepted(payload.mentee_name))


@router.post("/emails/daily-target", response_model=EmailSentResponse)
async def send_daily_target_email(
    payload: DailyTargetEmailRequest,
    transport: EmailTransport = Depends(get_email_transport),
    renderer: EmailRenderer = Depends(get_renderer),
) -> EmailSentResponse:
    email = renderer.daily_target(payload.name, payload.profit, payload.target)
    return await _deliver(transport, payload.email, email)


@router.post("/send-email", response_model=EmailSentResponse)
async def relay_email(
    payload: RawEmailRequest,
    transport: EmailTransport = Depends(get_email_transport),
) -> EmailSentResponse:
    return await _deliver(transport, payload.to, RenderedEmail(subject=payload.subject, html=payload.html))
