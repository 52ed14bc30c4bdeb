"""
Configuration management using pydantic-settings.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_name: str = "FormSink"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8000

    # CORS
    cors_origins: List[str] = ["*"]

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    orders_table: str = "EmailTest"
    leads_table: str = "Leads"

    # Google
    # Service account JSON, either raw or base64 encoded
    google_service_account_credentials: str | None = None
    google_credentials_file: str | None = None
    spreadsheet_id: str = ""
    sheet_range: str = "Sheet1"

    # Upper bound on a single product line's Quantity
    max_quantity: int = 1000

    # Per-call timeout for each sink
    sink_timeout_seconds: float = 30.0


@lru_cache
def get_settings() -> Settings:
    return Settings()
