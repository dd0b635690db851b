from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailResult:
    ok: bool
    message_id: str | None = None
    reason: str | None = None


class EmailDeliveryError(Exception):
    def __init__(self, to: str, reason: str | None) -> None:
        super().__init__(f"Failed to send email to {to}: {reason or 'unknown error'}")
        self.reason = reason


class EmailTransport(Protocol):
    async def send(self, to: str, subject: str, html: str) -> EmailResult: ...


async def send_or_raise(transport: EmailTransport, to: str, subject: str, html: str) -> EmailResult:
    result = await transport.send(to, subject, html)
    if not result.ok:
        raise EmailDeliveryError(to, result.reason)
    return result


class ResendEmailClient:
    """Email transport backed by the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._sender = sender
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = {"Authorization": f"Bearer {api_key}"}

    @classmethod
    def from_settings(cls, settings: Settings) -> ResendEmailClient:
        return cls(
            api_key=settings.resend_api_key.get_secret_value(),
            sender=settings.email_from,
            base_url=settings.resend_api_url,
            timeout=settings.email_timeout,
        )

    async def send(self, to: str, subject: str, html: str) -> EmailResult:
        payload = {"from": self._sender, "to": to, "subject": subject, "html": html}
        try:
            response = await self._client.post("/emails", json=payload, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.error("Email transport error sending to %s: %s", to, exc)
            return EmailResult(ok=False, reason=str(exc) or exc.__class__.__name__)

        if response.is_success:
            message_id = _json_field(response, "id")
            logger.info("Email sent to %s (id=%s)", to, message_id)
            return EmailResult(ok=True, message_id=message_id)

        reason = _json_field(response, "message") or response.text or f"HTTP {response.status_code}"
        logger.error("Email API rejected message to %s: %s %s", to, response.status_code, reason)
        return EmailResult(ok=False, reason=reason)

    async def aclose(self) -> None:
        await self._client.aclose()


def _json_field(response: httpx.Response, name: str) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get(name) is not None:
        return str(data[name])
    return None
