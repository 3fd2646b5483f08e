import json

import pytest
import requests

from app.core.config import Settings
from app.core.exceptions import NotificationFailedError, NotificationUnavailableError
from app.services.notifier import WhatsAppNotifier, normalize_phone


def make_response(status_code: int, body) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.url = "https://api.ultramsg.test"
    response._content = (json.dumps(body) if not isinstance(body, str) else body).encode()
    return response


class FakeSession:
    """Stands in for requests.Session; replays a handler."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        return self.handler()


def make_notifier(handler, **overrides) -> WhatsAppNotifier:
    config = Settings(
        ULTRAMSG_INSTANCE=overrides.get("instance", "instance42"),
        ULTRAMSG_TOKEN=overrides.get("token", "secret"),
        ULTRAMSG_BASE_URL="https://api.ultramsg.test"
    )
    return WhatsAppNotifier(config, session=FakeSession(handler))


def test_normalize_phone():
    assert normalize_phone("+91 98123-45678") == "919812345678"
    assert normalize_phone("(555) 010 0199") == "5550100199"
    assert normalize_phone("") == ""
    assert normalize_phone(None) == ""


@pytest.mark.asyncio
async def test_send_posts_token_recipient_and_body():
    notifier = make_notifier(lambda: make_response(200, {"sent": "true", "message": "ok", "id": 7}))

    data = await notifier.send("+91 12345 67890", "hello")

    [call] = notifier.session.calls
    assert call["url"] == "https://api.ultramsg.test/instance42/messages/chat"
    assert call["json"] == {"token": "secret", "to": "911234567890", "body": "hello"}
    assert call["timeout"] == 15.0
    assert data["id"] == 7


@pytest.mark.asyncio
async def test_send_not_configured():
    def handler():
        raise AssertionError("no request expected")

    notifier = make_notifier(handler, token="")

    assert notifier.is_configured is False
    with pytest.raises(NotificationUnavailableError):
        await notifier.send("911234567890", "hello")


@pytest.mark.asyncio
async def test_send_invalid_phone():
    notifier = make_notifier(lambda: make_response(200, {}))

    with pytest.raises(NotificationFailedError):
        await notifier.send("not a number", "hello")
    assert notifier.session.calls == []


@pytest.mark.asyncio
async def test_send_provider_http_error():
    notifier = make_notifier(lambda: make_response(500, "boom"))

    with pytest.raises(NotificationFailedError) as exc_info:
        await notifier.send("911234567890", "hello")
    assert "500" in exc_info.value.message


@pytest.mark.asyncio
async def test_send_provider_error_field():
    notifier = make_notifier(lambda: make_response(200, {"error": "Wrong token"}))

    with pytest.raises(NotificationFailedError) as exc_info:
        await notifier.send("911234567890", "hello")
    assert "Wrong token" in exc_info.value.message


@pytest.mark.asyncio
async def test_send_non_json_reply():
    notifier = make_notifier(lambda: make_response(200, "queued"))

    assert await notifier.send("911234567890", "hello") == {"raw": "queued"}


@pytest.mark.asyncio
async def test_send_transport_error():
    def handler():
        raise requests.exceptions.ConnectTimeout("timed out")

    notifier = make_notifier(handler)

    with pytest.raises(NotificationFailedError):
        await notifier.send("911234567890", "hello")


@pytest.mark.asyncio
async def test_send_in_background_never_raises():
    failing = make_notifier(lambda: make_response(503, "down"))
    unconfigured = make_notifier(lambda: make_response(200, {}), instance="")

    await failing.send_in_background("911234567890", "hello")
    await unconfigured.send_in_background("911234567890", "hello")
