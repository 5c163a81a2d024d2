"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "Market Digest"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # LLM Providers
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    llm_primary_provider: str = "openai"  # Options: openai, anthropic
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-5-haiku-latest"
    llm_max_tokens: int = 3000
    llm_temperature: float = 0.7

    # Secondary quote provider (optional)
    finnhub_api_key: Optional[str] = None
    finnhub_base_url: str = "https://finnhub.io/api/v1"

    # Telegram
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    telegram_api_base: str = "https://api.telegram.org"

    # Data acquisition pacing
    quote_timeout_seconds: float = 8.0
    basket_delay_seconds: float = 1.0
    series_delay_seconds: float = 0.3
    series_lookback_days: int = 120
    indicator_mover_count: int = 10

    # Aggregation
    ranking_size: int = 5
    earnings_window_days: int = 7

    # Text generation
    generation_max_attempts: int = 3
    generation_backoff_seconds: float = 5.0
    report_language: str = "Traditional Chinese"

    # Delivery (Telegram hard limit is 4096 chars)
    message_max_length: int = 3800
    segment_delay_seconds: float = 1.2

    # Schedule
    enable_scheduler: bool = True
    report_timezone: str = "Asia/Taipei"
    report_time: str = "09:30"
    report_weekdays: str = "0,1,2,3,4"  # Monday=0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def weekday_set(self) -> set[int]:
        """Parsed report weekdays."""
        return {int(d) for d in self.report_weekdays.split(",") if d.strip()}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
