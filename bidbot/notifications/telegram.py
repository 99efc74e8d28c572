"""Telegram notifications for application submission outcomes."""

import html
from datetime import datetime
from typing import Optional, Union

import httpx

from bidbot.core.constants import NOTIFY_STATUS_SUCCESS
from bidbot.core.logging import get_logger
from bidbot.settings import Settings

logger = get_logger("notifications.telegram")

API_URL = "https://api.telegram.org/bot{token}"


def format_datetime(value: Union[datetime, str]) -> str:
    """Format a timestamp as dd.mm.YYYY HH:MM:SS."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    return value.strftime("%d.%m.%Y %H:%M:%S")


def build_application_message(
    announce_id: str,
    status: str,
    start_time: Union[datetime, str],
    end_time: Union[datetime, str],
    duration_ms: int,
    error_message: Optional[str] = None,
) -> str:
    """Render the HTML message for one submission attempt."""
    succeeded = status == NOTIFY_STATUS_SUCCESS
    icon = "✅" if succeeded else "❌"
    status_text = "Успешно" if succeeded else "Ошибка"

    lines = [
        f"{icon} <b>Обработка заявки завершена</b>",
        "",
        f"<b>ID объявления:</b> {html.escape(announce_id)}",
        f"<b>Статус:</b> {status_text}",
        f"<b>Время начала:</b> {format_datetime(start_time)}",
        f"<b>Время окончания:</b> {format_datetime(end_time)}",
        f"<b>Длительность:</b> {duration_ms / 1000:.2f} сек ({duration_ms / 60000:.2f} мин)",
    ]
    if error_message:
        lines.append("")
        lines.append(f"<b>Ошибка:</b> {html.escape(error_message)}")
    return "\n".join(lines)


class TelegramNotifier:
    """Best-effort delivery of messages to one Telegram chat."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._token = settings.telegram_bot_token
        self._chat_id = settings.telegram_chat_id
        self._enabled = settings.telegram_enabled
        self._timeout = settings.telegram_timeout_seconds
        self._transport = transport

        if self._enabled and (not self._token or not self._chat_id):
            logger.warning(
                "Telegram notifications enabled but TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID missing"
            )

    async def send_message(self, text: str, parse_mode: str = "HTML") -> bool:
        """Send a message to the configured chat.

        Returns:
            True if Telegram accepted the message
        """
        if not self._enabled:
            logger.debug("Telegram notifications disabled")
            return False
        if not self._token or not self._chat_id:
            logger.warning("Telegram token or chat id missing, message not sent")
            return False

        payload = {
            "chat_id": self._chat_id,
            "text": text,
            "parse_mode": parse_mode,
            "disable_web_page_preview": True,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{API_URL.format(token=self._token)}/sendMessage", json=payload
                )
            data = response.json()
            if data.get("ok"):
                logger.debug("Telegram message sent")
                return True
            logger.warning(
                "Telegram rejected message: %s", data.get("description", "unknown error")
            )
            return False
        except Exception as e:
            logger.error("Telegram delivery failed: %s", e)
            return False

    async def notify(
        self,
        announce_id: str,
        status: str,
        start_time: Union[datetime, str],
        end_time: Union[datetime, str],
        duration_ms: int,
        error_message: Optional[str] = None,
    ) -> bool:
        """Report the outcome of one submission attempt."""
        message = build_application_message(
            announce_id, status, start_time, end_time, duration_ms, error_message
        )
        return await self.send_message(message, "HTML")
