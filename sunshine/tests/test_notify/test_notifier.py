"""Tests for notifier implementations."""

import json
import logging

import httpx
import pytest
import respx

from sunshine.models.errors import NotifyError
from sunshine.notify.notifier import DEFAULT_MESSAGE, LogNotifier, WebhookNotifier

HOOK = "https://hooks.example.com/sunshine"


class TestLogNotifier:
    def test_logs_message(self, caplog):
        with caplog.at_level(logging.INFO, logger="sunshine.notify.notifier"):
            LogNotifier(lambda: "Today: Sunny").notify()
        assert "Today: Sunny" in caplog.text

    def test_default_message(self, caplog):
        with caplog.at_level(logging.INFO, logger="sunshine.notify.notifier"):
            LogNotifier().notify()
        assert DEFAULT_MESSAGE in caplog.text


class TestWebhookNotifier:
    @respx.mock
    def test_posts_message(self):
        route = respx.post(HOOK).mock(return_value=httpx.Response(204))
        WebhookNotifier(HOOK, lambda: "Today: Rain").notify()
        assert route.called
        assert json.loads(route.calls[0].request.content) == {"text": "Today: Rain"}

    @respx.mock
    def test_http_error(self):
        respx.post(HOOK).mock(return_value=httpx.Response(500))
        with pytest.raises(NotifyError, match="500"):
            WebhookNotifier(HOOK).notify()

    @respx.mock
    def test_request_error(self):
        respx.post(HOOK).mock(side_effect=httpx.ConnectTimeout("slow"))
        with pytest.raises(NotifyError):
            WebhookNotifier(HOOK).notify()
