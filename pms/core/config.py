"""Configuration management for the PMS lifecycle service."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Configuration
    sqlite_db_path: str = Field(default="./pms_data/pms.db", description="SQLite database file path")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")

    # HTTP backend (used by the client-side lifecycle store)
    api_base_url: str = Field(default="http://127.0.0.1:8000", description="Base URL of the PMS REST API")
    api_token: str | None = Field(default=None, description="Bearer token sent by the HTTP backend (optional)")
    api_timeout_seconds: float = Field(default=30.0, description="Timeout for HTTP backend requests")

    # Final settlement
    gratuity_days_per_year: int = Field(
        default=15, description="Days of basic salary paid as gratuity per completed year of service"
    )
    working_days_per_month: int = Field(
        default=22, description="Working days per month used to value unused leave days"
    )

    # Notifications
    enable_notifications: bool = Field(default=True, description="Persist and fan out operator notifications")

    @property
    def is_production(self) -> bool:
        """Whether the service runs in production."""
        return self.environment.lower() == "production"


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_PREFIX: str = "/api"

    # HTTP Status Codes
    HTTP_FORBIDDEN: int = 403
    HTTP_NOT_FOUND: int = 404
    HTTP_CONFLICT: int = 409
    HTTP_UNPROCESSABLE: int = 422
    HTTP_BAD_GATEWAY: int = 502
    HTTP_SERVER_ERROR: int = 500

    # Final settlement
    DAYS_PER_SALARY_MONTH: int = 30

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
