"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "PromptPub"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False, env="DEBUG")
    environment: str = Field(default="development", env="ENVIRONMENT")

    # Server
    host: str = Field(default="0.0.0.0", env="HOST")
    port: int = Field(default=7003, env="PORT")
    reload: bool = Field(default=False, env="RELOAD")

    # Security
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:7003", env="CORS_ORIGINS"
    )
    user_id_header: str = Field(default="X-User-Id", env="USER_ID_HEADER")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_format: str = Field(default="console", env="LOG_FORMAT")  # json or console
    log_file: Optional[str] = Field(default=None, env="LOG_FILE")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./promptpub.db",
        env="DATABASE_URL"
    )
    database_echo: bool = Field(default=False, env="DATABASE_ECHO")

    # Versioning
    default_changelog: str = Field(default="content updated", env="DEFAULT_CHANGELOG")

    # Upper bound on rows x columns of the LCS table for a single diff
    diff_max_cells: int = Field(default=4_000_000, env="DIFF_MAX_CELLS")

    @validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("log_format")
    def validate_log_format(cls, v):
        """Validate log format."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    @validator("diff_max_cells")
    def validate_diff_max_cells(cls, v):
        """Diff guard must allow at least a one-line comparison."""
        if v < 1:
            raise ValueError("diff_max_cells must be positive")
        return v

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return Settings()


# Global settings instance
settings = get_settings()
