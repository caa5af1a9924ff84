"""Configuration management for Card Payment Simulator."""

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

    # Database
    database_url: str = Field(
        default="sqlite:///./card_payments.db",
        description="SQLAlchemy database URL",
    )
    create_schema_on_startup: bool = Field(
        default=True,
        description="Create missing tables on startup (use Alembic in production)",
    )

    # Service Configuration
    debug: bool = Field(default=False, description="Debug mode (echo SQL, expose docs)")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format_json: bool = Field(
        default=False, description="Render logs as JSON instead of console output"
    )
    environment: str = Field(default="development", description="Environment name")
    service_name: str = Field(default="card-payment-simulator", description="Service name")


# Global settings instance
settings = Settings()
