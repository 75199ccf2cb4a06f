"""Factory functions for external API clients."""

from typing import Optional

from loss_reports.config import Settings
from loss_reports.clients.telegram_client import TelegramNotifier


def build_telegram_notifier(settings: Settings) -> Optional[TelegramNotifier]:
    """
    Create the Telegram notifier if credentials are configured.

    Returns:
        TelegramNotifier instance, or None when notifications are disabled
    """
    if not settings.notifications_enabled:
        return None
    return TelegramNotifier(
        bot_token=settings.bot_token,
        chat_id=settings.tg_chat_id,
        api_url=settings.telegram_api_url,
        timeout=settings.notify_timeout_seconds,
        currency_symbol=settings.currency_symbol,
    )
