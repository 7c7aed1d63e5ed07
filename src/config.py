"""Configuration management for the application."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_SESSION_SECRET = "dev-secret-change-in-production"  # noqa: S105


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (unset -> in-memory stores)
    database_url: str | None = Field(default=None)

    # API
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    allowed_origins: str = Field(default="http://localhost:8081,http://localhost:5000")
    trust_proxy: bool = Field(default=True)

    # Sessions
    session_secret: str = Field(default=DEV_SESSION_SECRET)
    session_max_age_seconds: int = Field(default=7 * 24 * 60 * 60)

    # Google OAuth
    google_client_id: str | None = Field(default=None)
    google_client_secret: str | None = Field(default=None)
    google_callback_url: str = Field(default="/api/auth/google/callback")
    allowed_redirect_uris: str = Field(default="lavei://,exp://127.0.0.1:8081")

    # Expo push gateway
    expo_push_url: str = Field(default="https://exp.host/--/api/v2/push/send")
    expo_access_token: str | None = Field(default=None)

    # Rate limits (requests per window, window in seconds)
    general_rate_limit: int = Field(default=100)
    general_rate_window: int = Field(default=60)
    auth_rate_limit: int = Field(default=5)
    auth_rate_window: int = Field(default=15 * 60)
    notification_rate_limit: int = Field(default=10)
    notification_rate_window: int = Field(default=60)
    broadcast_rate_limit: int = Field(default=5)
    broadcast_rate_window: int = Field(default=60 * 60)
    create_resource_rate_limit: int = Field(default=30)
    create_resource_rate_window: int = Field(default=60)

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has secure settings."""
        if self.environment == "production":
            if self.session_secret == DEV_SESSION_SECRET:
                raise ValueError("SESSION_SECRET must be changed in production")
            if not self.database_url:
                raise ValueError("DATABASE_URL must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def uses_database(self) -> bool:
        """Whether the relational stores should back the API."""
        return bool(self.database_url)

    @property
    def google_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def cors_origins(self) -> list[str]:
        return _split_csv(self.allowed_origins)

    @property
    def redirect_uris(self) -> list[str]:
        return _split_csv(self.allowed_redirect_uris)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
