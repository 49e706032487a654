"""
CryptoPulse — Central Configuration
All settings are loaded from environment variables with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field
from typing import Optional


class AISettings(BaseSettings):
    """AI provider endpoints, models and sampling parameters."""
    default_provider: str = "gemini"

    # Environment-level fallback key for the default provider
    gemini_api_key: str = Field(
        default="", validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY")
    )
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.3
    gemini_max_retries: int = 3
    gemini_backoff_base_seconds: float = 1.0

    deepseek_base_url: str = "https://api.deepseek.com"
    deepseek_model: str = "deepseek-chat"
    chatgpt_base_url: str = "https://api.openai.com/v1"
    chatgpt_model: str = "gpt-4o"
    grok_base_url: str = "https://api.x.ai/v1"
    grok_model: str = "grok-beta"
    qwen_base_url: str = "https://dashscope.aliyuncs.com/compatible-mode/v1"
    qwen_model: str = "qwen-turbo"

    chat_temperature: float = 0.5
    request_timeout_seconds: float = 120.0
    report_language: str = "Simplified Chinese"

    model_config = SettingsConfigDict(
        env_prefix="AI_", env_file=".env", extra="ignore", populate_by_name=True
    )


class DataSourceSettings(BaseSettings):
    """Market data endpoints."""
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    top_coins_limit: int = 20
    poll_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class TelegramSettings(BaseSettings):
    """Telegram delivery configuration. Token and chat id are user-supplied."""
    api_base_url: str = "https://api.telegram.org/bot"
    summary_max_length: int = 300
    send_interval_seconds: float = 0.5  # pause between consecutive alerts

    model_config = SettingsConfigDict(env_prefix="TELEGRAM_", env_file=".env", extra="ignore")


class StorageSettings(BaseSettings):
    """Local persistence of user-supplied credentials."""
    storage_dir: str = ".cryptopulse"

    model_config = SettingsConfigDict(env_prefix="CRYPTOPULSE_", env_file=".env", extra="ignore")


class AppSettings(BaseSettings):
    """Top-level application settings."""
    app_name: str = "CryptoPulse"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    refresh_interval_seconds: float = 600.0
    settle_delay_seconds: float = 0.5

    ai: AISettings = AISettings()
    data: DataSourceSettings = DataSourceSettings()
    telegram: TelegramSettings = TelegramSettings()
    storage: StorageSettings = StorageSettings()

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Singleton
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings
