"""
tests/unit/test_notification_service.py

Unit tests for services/notification_service.py.
Telegram calls are intercepted by respx.
"""

from __future__ import annotations

import json

import httpx
import pytest

from exceptions import NotificationError
from services.notification_service import TelegramNotifier, format_md2, render_message

_URL = "https://api.telegram.org/bot123:abc/sendMessage"


def test_render_message_includes_both_addresses():
    text = render_message("home.example.com", "9.9.9.9", "1.1.1.1")

    assert "Domain: home.example.com" in text
    assert "New IP: 9.9.9.9" in text
    assert "Old IP: 1.1.1.1" in text


def test_render_message_marks_missing_old_ip():
    assert "Old IP: (none)" in render_message("home.example.com", "9.9.9.9", "")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.2.3.4", "1\\.2\\.3\\.4"),
        ("my_host-1.example.com!", "my\\_host\\-1\\.example\\.com\\!"),
        ("(none) [x]", "\\(none\\) \\[x\\]"),
        ("plain", "plain"),
    ],
)
def test_format_md2_escapes_special_characters(text, expected):
    assert format_md2(text) == expected


@pytest.mark.asyncio
async def test_notify_posts_markdown_message(mock_http):
    route = mock_http.post(_URL).mock(return_value=httpx.Response(200, json={"ok": True}))
    async with httpx.AsyncClient() as client:
        await TelegramNotifier(client, "123:abc", "42").notify(
            "home.example.com", "9.9.9.9", "1.1.1.1"
        )

    payload = json.loads(route.calls.last.request.content)
    assert payload["chat_id"] == "42"
    assert payload["parse_mode"] == "MarkdownV2"
    assert "9\\.9\\.9\\.9" in payload["text"]


@pytest.mark.asyncio
async def test_notify_raises_when_telegram_refuses(mock_http):
    mock_http.post(_URL).mock(
        return_value=httpx.Response(200, json={"ok": False, "description": "chat not found"})
    )
    async with httpx.AsyncClient() as client:
        with pytest.raises(NotificationError, match="chat not found"):
            await TelegramNotifier(client, "123:abc", "42").notify("d.example.com", "1.1.1.1", "")


@pytest.mark.asyncio
async def test_notify_raises_on_http_error(mock_http):
    mock_http.post(_URL).mock(return_value=httpx.Response(401, text="Unauthorized"))
    async with httpx.AsyncClient() as client:
        with pytest.raises(NotificationError, match="401"):
            await TelegramNotifier(client, "123:abc", "42").notify("d.example.com", "1.1.1.1", "")


@pytest.mark.asyncio
async def test_notify_raises_on_network_error(mock_http):
    mock_http.post(_URL).mock(side_effect=httpx.ConnectError("refused"))
    async with httpx.AsyncClient() as client:
        with pytest.raises(NotificationError):
            await TelegramNotifier(client, "123:abc", "42").notify("d.example.com", "1.1.1.1", "")
