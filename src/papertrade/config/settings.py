"""Application settings and configuration."""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PAPERTRADE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Paper Trading Ledger"
    app_version: str = "0.1.0"

    # Database
    database_url: str = "sqlite:///./papertrade.db"
    log_level: str = "INFO"

    # Ledger behavior
    initial_cash: Decimal = Decimal("100000")
    order_fee: Decimal = Decimal("0")
    order_history_limit: int = 50
    settlement_max_attempts: int = 3

    # Quote provider: "simulated", "http" or "yahoo"
    quote_provider: str = "simulated"
    quote_api_base_url: Optional[str] = None
    quote_api_key: Optional[str] = None
    quote_fetch_timeout_seconds: float = 10.0
    quote_cache_ttl_seconds: int = 60
    quote_cache_max_entries: int = 500

    # Simulated price feed (WebSocket)
    price_feed_enabled: bool = True
    price_tick_seconds: float = 5.0

    # Expired notification cleanup
    notification_purge_interval_seconds: float = 3600.0

    # Bearer token auth
    auth_secret_key: str = "change-me"
    auth_token_ttl_seconds: int = 60 * 60 * 24


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
