# app/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    # Application Settings
    APP_NAME: str = "Ads Audit Leads API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./leads.db")

    # Security Settings
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    CRON_SECRET: str = ""

    # CORS Settings
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Rate Limiting
    REDIS_URL: Optional[str] = os.environ.get("REDIS_URL", None)
    PUBLIC_RATE_LIMIT_MAX: int = 5
    PUBLIC_RATE_LIMIT_WINDOW_SEC: int = 60
    OTP_IP_RATE_LIMIT_MAX: int = 2
    OTP_IP_RATE_LIMIT_WINDOW_SEC: int = 60
    OTP_PHONE_RATE_LIMIT_MAX: int = 3
    OTP_PHONE_RATE_LIMIT_WINDOW_SEC: int = 15 * 60

    # OTP / retrieval tokens
    OTP_EXPIRY_MINUTES: int = 5
    OTP_MAX_ATTEMPTS: int = 3
    OTP_COMPANY_NAME: str = "Google Ads System"
    RETRIEVAL_TOKEN_EXPIRY_MINUTES: int = 15

    # Form timing (anti-bot)
    FORM_MIN_FILL_MS: int = 2000
    FORM_MAX_FILL_MS: int = 10 * 60 * 1000

    # Bookings
    BOOKING_TIMEZONE: str = "Asia/Dubai"
    BOOKING_OPEN_HOUR: int = 8
    BOOKING_CLOSE_HOUR: int = 20
    BOOKING_SLOT_MINUTES: int = 15

    # SMS Settings
    SMS_PROVIDER: str = "mock"
    TWILIO_ACCOUNT_SID: str = os.environ.get("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.environ.get("TWILIO_AUTH_TOKEN", "")
    TWILIO_PHONE_NUMBER: str = os.environ.get("TWILIO_PHONE_NUMBER", "")

    # Email Settings
    EMAIL_PROVIDER: str = "development"
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = ""

    # Request limits
    MAX_REQUEST_BYTES: int = 64 * 1024

    # Suspicious event queue
    EVENT_QUEUE_SIZE: int = 1000

    # Helper methods for list envs
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    # Normalize ALLOWED_ORIGINS if provided as comma-separated string env var CORS_ORIGINS
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s

settings: Settings = get_settings()
