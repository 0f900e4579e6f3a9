"""
Application settings loaded from the environment (and an optional .env file).
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PAYPAL_LIVE_URL = "https://api-m.paypal.com"
PAYPAL_SANDBOX_URL = "https://api-m.sandbox.paypal.com"


class Settings(BaseSettings):
    """Environment-based configuration for the API and its edge functions."""

    # Supabase
    SUPABASE_URL: str = Field(default="", description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(default="", description="Service role key used by edge functions")
    SUPABASE_ANON_KEY: str = Field(default="", description="Public anon key")

    # PayPal
    PAYPAL_CLIENT_ID: Optional[str] = None
    PAYPAL_CLIENT_SECRET: Optional[str] = None
    PAYPAL_SANDBOX: bool = False

    # Resend
    RESEND_API_KEY: Optional[str] = None

    # Application
    ENVIRONMENT: str = "development"
    SITE_URL: str = "https://mystar.co.il"
    LOG_LEVEL: str = "INFO"
    DATA_DIR: str = "mystar_data"
    REALTIME_ENABLED: bool = False
    HTTP_TIMEOUT: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def paypal_api_url(self) -> str:
        return PAYPAL_SANDBOX_URL if self.PAYPAL_SANDBOX else PAYPAL_LIVE_URL


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance (also used as a FastAPI dependency)"""
    return Settings()
