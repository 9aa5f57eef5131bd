"""
Application Settings for the Membership Backend

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Identity is supplied by an external provider as signed JWTs;
    only the verification parameters live here.
    """

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # CORS Configuration
    allowed_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # Database Configuration (SQLModel/SQLAlchemy)
    database_url: Optional[str] = None
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    # Identity provider tokens
    auth_jwt_secret: Optional[str] = None
    auth_jwt_algorithm: str = "HS256"
    auth_jwt_audience: Optional[str] = None
    auth_jwt_issuer: Optional[str] = None

    # Admin API key for approval/rejection routes
    admin_api_key: Optional[str] = None

    # Subscription period rules
    default_period_length_days: int = 31
    session_period_days: int = 1
    default_payment_method: str = "counter"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_auth_config(self) -> "Settings":
        """Production deployments must be able to verify identity tokens."""
        if self.is_production and not self.auth_jwt_secret:
            raise ValueError("AUTH_JWT_SECRET required when ENVIRONMENT=production")

        if self.default_period_length_days < 1 or self.session_period_days < 1:
            raise ValueError("Subscription period lengths must be at least one day")

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()
