"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./data.sqlite"
    sql_echo: bool = False
    db_pool_recycle_seconds: int = 1800

    # Telegram notifications (enabled only when both are set)
    bot_token: Optional[str] = None
    tg_chat_id: Optional[str] = None
    telegram_api_url: str = "https://api.telegram.org"
    notify_timeout_seconds: float = 10.0

    # Export
    currency_symbol: str = "₸"
    export_filename_prefix: str = "KFC_Loss"

    # App
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: str = ""

    # Helper methods
    def get_cors_origins_list(self) -> List[str]:
        """Get list of allowed CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def notifications_enabled(self) -> bool:
        """Whether both Telegram credentials are configured."""
        return bool(self.bot_token and self.tg_chat_id)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
