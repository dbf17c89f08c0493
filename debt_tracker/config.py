"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Spreadsheet script endpoint (the remote store)
    sheet_script_url: str = ""
    sheet_pin: str = ""

    # Service
    service_name: str = "debt-tracker"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0

    # Write verification: the store applies POSTs eventually, so reads are polled
    verify_settle_seconds: float = 3.0
    verify_retry_settle_seconds: float = 6.0  # Must be longer than the first delay
    verification_tolerance: float = 0.5


settings = Settings()
