"""
Configuration management for Calc Studio.

Handles loading configuration from environment variables and an optional
``.env`` file, and provides sensible defaults for all settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CALC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    app_name: str = "Calc Studio"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    # Engine settings
    history_capacity: int = Field(10, ge=1)
    factorial_limit: int = Field(170, ge=1)  # 171! overflows a double
    error_sentinel: str = Field("Error", min_length=1)

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    max_sessions: int = Field(1000, ge=1)
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )


# Global settings instance
settings = Settings()
