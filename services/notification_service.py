"""
services/notification_service.py

Responsibility: Renders the "IP changed" message and delivers it through the
Telegram Bot API.
Does NOT: decide when to notify, retry failed deliveries, or run hooks.
"""

from __future__ import annotations

import logging

import httpx
from jinja2 import Environment, StrictUndefined

from exceptions import NotificationError

logger = logging.getLogger(__name__)

_TELEGRAM_BASE = "https://api.telegram.org"

_MESSAGE_TEMPLATE = """\
DDNS record updated
Domain: {{ domain }}
New IP: {{ new_ip }}
Old IP: {{ old_ip or "(none)" }}"""

# Characters Telegram's MarkdownV2 parser rejects unless escaped
_MD2_SPECIAL = "_[]()-.!"

_env = Environment(autoescape=False, undefined=StrictUndefined)
_template = _env.from_string(_MESSAGE_TEMPLATE)


def render_message(domain: str, new_ip: str, old_ip: str) -> str:
    """Renders the plain-text notification body."""
    return _template.render(domain=domain, new_ip=new_ip, old_ip=old_ip)


def format_md2(text: str) -> str:
    """Escapes MarkdownV2 special characters with a backslash."""
    for char in _MD2_SPECIAL:
        text = text.replace(char, "\\" + char)
    return text


class TelegramNotifier:
    """
    Sends IP-change notifications to one Telegram chat.

    Collaborators:
        - httpx.AsyncClient: injected; may be configured with a proxy
    """

    def __init__(self, http_client: httpx.AsyncClient, bot_token: str, chat_id: str) -> None:
        """
        Args:
            http_client: The client used for Telegram calls only.
            bot_token: The bot token issued by BotFather.
            chat_id: The target chat id or @channel name.
        """
        self._client = http_client
        self._url = f"{_TELEGRAM_BASE}/bot{bot_token}/sendMessage"
        self._chat_id = chat_id

    async def notify(self, domain: str, new_ip: str, old_ip: str) -> None:
        """
        Sends the notification for one record change.

        Raises:
            NotificationError: If Telegram is unreachable or refuses the message.
        """
        payload = {
            "chat_id": self._chat_id,
            "text": format_md2(render_message(domain, new_ip, old_ip)),
            "parse_mode": "MarkdownV2",
        }
        try:
            response = await self._client.post(self._url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise NotificationError(
                f"Telegram returned status {exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.RequestError as exc:
            raise NotificationError(f"Could not reach Telegram: {exc}") from exc
        except ValueError as exc:
            raise NotificationError(f"Unreadable Telegram response: {exc}") from exc

        if not body.get("ok", False):
            raise NotificationError(f"Telegram rejected the message: {body.get('description')}")

        logger.info("Sent Telegram message for %s", domain)
