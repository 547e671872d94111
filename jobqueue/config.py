"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./jobqueue.sqlite"
    database_pool_size: int = 10
    database_max_overflow: int = 20
    database_busy_timeout_seconds: float = 30.0
    database_create_schema: bool = True

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Claim engine
    claim_max_retries: int = 5

    # Worker Configuration
    worker_name: str | None = None
    worker_poll_interval_seconds: float = 1.0

    # Observability
    tracing_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_service_name: str = "jobqueue"
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
