"""Telegram Bot API client used to announce new loss reports."""

from typing import Optional

import httpx

from loss_reports.models.report import Report
from loss_reports.utils.logger import get_logger

log = get_logger(__name__)


def format_amount(amount: int) -> str:
    """Group thousands with spaces: 1500 -> '1 500'."""
    return f"{int(amount):,}".replace(",", " ")


def render_report_message(report: Report, currency_symbol: str = "₸") -> str:
    """Render the chat message announcing a report."""
    return (
        "🚨 ОТЧЕТ ПО ПОТЕРЯМ\n\n"
        f"👤 Менеджер: {report.manager}\n"
        f"🏢 Ресторан: {report.restaurant}\n"
        f"⚠️ Причина: {report.reason}\n"
        f"💰 Сумма: {format_amount(report.amount)} {currency_symbol}\n\n"
        f"🕒 Начало: {report.start or '-'}\n"
        f"🕒 Конец: {report.end or '-'}\n\n"
        f"💬 Детали: {report.comment or '-'}"
    )


class TelegramNotifier:
    """Sends report announcements to one Telegram chat."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        api_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
        currency_symbol: str = "₸",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.currency_symbol = currency_symbol
        self._transport = transport

    @property
    def send_message_url(self) -> str:
        return f"{self.api_url}/bot{self.bot_token}/sendMessage"

    async def send_text(self, text: str) -> bool:
        """
        Post a message to the configured chat.

        Failures are logged, never raised.

        Returns:
            True if Telegram accepted the message
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.send_message_url,
                    json={"chat_id": self.chat_id, "text": text},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.warning(
                "telegram rejected message",
                status_code=e.response.status_code,
                chat_id=self.chat_id,
            )
            return False
        except httpx.HTTPError as e:
            log.warning("telegram send failed", error=str(e), error_type=type(e).__name__)
            return False

        log.debug("telegram message sent", chat_id=self.chat_id)
        return True

    async def notify_report_created(self, report: Report) -> None:
        """Hook for the "report created" event."""
        await self.send_text(render_report_message(report, self.currency_symbol))
