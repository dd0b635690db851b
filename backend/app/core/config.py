from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Trade Journal Notifications"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/journal"

    resend_api_key: SecretStr = SecretStr("")
    resend_api_url: str = "https://api.resend.com"
    email_from: str = "Trading Journal <noreply@example.com>"
    email_timeout: float = 10.0
    app_url: str = "https://example.com"
    brand_name: str = "Trading Journal"

    scheduler_enabled: bool = True
    scheduler_timezone: str = "America/New_York"
    win_rate_precision: int = 1

    verification_code_ttl_minutes: int = 10
    verification_max_attempts: int = 5
    verification_resend_cooldown_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
