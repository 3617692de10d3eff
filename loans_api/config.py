"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration loaded from LOANS_API_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="LOANS_API_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Remote API
    base_url: str = "http://localhost:3000/api/loans/v1"
    application_source: Optional[str] = None

    # Credentials
    login: Optional[str] = None
    password: Optional[str] = None
    session_token: Optional[str] = None

    # Service
    service_name: str = "loans-api-client"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0


settings = Settings()
