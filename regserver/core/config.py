"""
regserver/core/config.py

Purpose: Application configuration

- Loads environment variables (and .env)
- Centralizes config values (DB URI, timeouts, server address)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URI: Optional[str] = Field(
        default=None,
        description="MongoDB connection string (required)"
    )
    MONGODB_DB_NAME: str = Field(
        default="Goserver",
        description="MongoDB database name"
    )
    MONGODB_COLLECTION: str = Field(
        default="users",
        description="Collection holding registered users"
    )
    STORE_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="Upper bound for a single register/list operation against the store"
    )

    # Password hashing
    BCRYPT_ROUNDS: int = Field(
        default=12,
        description="bcrypt cost factor"
    )

    # Server
    HOST: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to"
    )
    PORT: int = Field(
        default=5001,
        description="Port the HTTP server listens on"
    )
    SHUTDOWN_TIMEOUT_SECONDS: int = Field(
        default=2,
        description="Grace period for in-flight requests on SIGINT/SIGTERM"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="JSON API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @validator("BCRYPT_ROUNDS")
    def validate_bcrypt_rounds(cls, v):
        """bcrypt only accepts cost factors between 4 and 31."""
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @validator("STORE_TIMEOUT_SECONDS")
    def validate_store_timeout(cls, v):
        if v <= 0:
            raise ValueError("STORE_TIMEOUT_SECONDS must be positive")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None):
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    config = config or settings
    errors = []

    # Validate MongoDB URI
    if not config.MONGODB_URI or not config.MONGODB_URI.strip():
        errors.append("MONGODB_URI is required")

    if not config.MONGODB_DB_NAME:
        errors.append("MONGODB_DB_NAME is required")

    if not config.MONGODB_COLLECTION:
        errors.append("MONGODB_COLLECTION is required")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
