from __future__ import annotations

import json

import httpx

from app.services.email import ResendEmailClient


def make_client(handler) -> ResendEmailClient:
    http_client = httpx.AsyncClient(
        base_url="https://api.resend.test",
        transport=httpx.MockTransport(handler),
    )
    return ResendEmailClient(api_key="re_test", sender="Journal <noreply@journal.test>", client=http_client)


async def test_send_posts_message_to_email_api() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "email_123"})

    client = make_client(handler)
    result = await client.send("ana@example.com", "Hello", "<p>Hi</p>")
    await client.aclose()

    assert result.ok
    assert result.message_id == "email_123"
    [request] = captured
    assert request.method == "POST"
    assert request.url.path == "/emails"
    assert request.headers["Authorization"] == "Bearer re_test"
    assert json.loads(request.content) == {
        "from": "Journal <noreply@journal.test>",
        "to": "ana@example.com",
        "subject": "Hello",
        "html": "<p>Hi</p>",
    }


async def test_api_error_is_reported_as_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"name": "validation_error", "message": "Invalid `to` field"})

    client = make_client(handler)
    result = await client.send("not-an-address", "Hello", "<p>Hi</p>")

    assert not result.ok
    assert result.reason == "Invalid `to` field"


async def test_transport_error_is_reported_as_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    result = await client.send("ana@example.com", "Hello", "<p>Hi</p>")

    assert not result.ok
    assert "connection refused" in (result.reason or "")
