"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from the environment or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///./bookstore.db"

    # Static uploads (book covers and admin image uploads)
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    cors_origins: list[str] = ["*"]

    # JWT
    jwt_secret_key: str = "change-me-to-a-secret-that-is-at-least-32-bytes"
    jwt_issuer: str = "bookstore-api"
    jwt_audience: str = "bookstore-clients"
    jwt_expiration_hours: int = 24

    # OpenTelemetry
    otel_enabled: bool = False
    otel_service_name: str = "bookstore-api"
    otel_exporter_otlp_endpoint: str = "http://localhost:4318/v1/traces"
    otel_exporter_otlp_protocol: str = "http"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings."""
    return Settings()
