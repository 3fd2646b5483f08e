"""
WhatsApp delivery through the UltraMsg HTTP API.

`send` is for callers that wait for the provider and report its outcome.
`send_in_background` is for fire-and-forget dispatch: the result only
ends up in the logs.
"""
import re
from typing import Any, Dict, Optional

import requests
from fastapi.concurrency import run_in_threadpool

from app.core.config import Settings, settings
from app.core.exceptions import NotificationFailedError, NotificationUnavailableError
from app.core.logging import get_logger

log = get_logger(__name__)

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(value: Optional[str]) -> str:
    """Digits only, e.g. '+91 98123-45678' -> '919812345678'."""
    if not value:
        return ""
    return _NON_DIGITS.sub("", str(value))


class WhatsAppNotifier:
    """Outbound message client."""

    def __init__(self, config: Settings = settings, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session

    @property
    def is_configured(self) -> bool:
        return self.config.ultramsg_configured

    @property
    def url(self) -> str:
        base = self.config.ULTRAMSG_BASE_URL.rstrip("/")
        return f"{base}/{self.config.ULTRAMSG_INSTANCE}/messages/chat"

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        http = self.session or requests
        return http.post(self.url, json=payload, timeout=self.config.NOTIFY_TIMEOUT_SECONDS)

    async def send(self, to: str, body: str) -> Dict[str, Any]:
        """Send a chat message and return the provider's JSON reply."""
        if not self.is_configured:
            raise NotificationUnavailableError("UltraMsg not configured")

        phone = normalize_phone(to)
        if not phone:
            raise NotificationFailedError(f"Invalid phone number: {to!r}")

        payload = {"token": self.config.ULTRAMSG_TOKEN, "to": phone, "body": body}
        try:
            response = await run_in_threadpool(self._post, payload)
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            raise NotificationFailedError(
                f"Failed to send message: provider returned {exc.response.status_code} {exc.response.text}"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise NotificationFailedError(f"Failed to send message: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text}

        # UltraMsg reports some failures with a 200 and an "error" field
        if isinstance(data, dict) and data.get("error"):
            raise NotificationFailedError(f"Failed to send message: {data['error']}")

        log.info("whatsapp_sent", to=phone)
        return data

    async def send_in_background(self, to: str, body: str) -> None:
        """Send and log the outcome; never raises."""
        try:
            await self.send(to, body)
        except NotificationUnavailableError:
            log.warning("whatsapp_skipped", reason="ultramsg_not_configured")
        except NotificationFailedError as exc:
            log.error("whatsapp_background_failed", error=exc.message)
        except Exception:
            log.exception("whatsapp_background_unexpected_error")


def get_notifier() -> WhatsAppNotifier:
    """FastAPI dependency."""
    return WhatsAppNotifier(settings)
