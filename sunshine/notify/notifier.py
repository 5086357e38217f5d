"""Notifiers told that a fresh forecast was committed."""

import logging
from collections.abc import Callable
from typing import Protocol

import httpx

from sunshine.models.errors import NotifyError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Fresh weather forecast available"


class Notifier(Protocol):
    def notify(self) -> None: ...


class LogNotifier:
    """Writes the notification to the log. Used when no webhook is configured."""

    def __init__(self, message_source: Callable[[], str] | None = None):
        self.message_source = message_source

    def notify(self) -> None:
        message = self.message_source() if self.message_source else DEFAULT_MESSAGE
        logger.info("Notification: %s", message)


class WebhookNotifier:
    """POSTs a chat-style JSON payload to a webhook URL."""

    def __init__(
        self,
        webhook_url: str,
        message_source: Callable[[], str] | None = None,
        timeout: float = 10.0,
    ):
        self.webhook_url = webhook_url
        self.message_source = message_source
        self.timeout = timeout

    def notify(self) -> None:
        message = self.message_source() if self.message_source else DEFAULT_MESSAGE
        try:
            resp = httpx.post(
                self.webhook_url, json={"text": message}, timeout=self.timeout
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotifyError(
                f"Webhook returned {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise NotifyError(f"Webhook request failed: {e}") from e
