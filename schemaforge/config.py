"""Configuration management for the schemaforge system."""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .types import Environment

TRUE_VALUES = ["true", "1", "yes", "on"]


class Settings(BaseModel):
    """Application settings."""

    # Environment
    version: str = Field(default="0.1.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production/testing)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    enable_file_logging: bool = Field(
        default=False, description="Whether log records are also written to a file"
    )
    log_dir: Path | None = Field(
        default=None, description="Directory for log files (defaults to ./logs)"
    )
    echo_sql: bool = Field(
        default=False,
        description="Log every executed DDL/catalog statement at INFO instead of DEBUG",
    )

    # Database
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL used by SQLAlchemyConnection.from_settings",
    )
    sqlite_path: Path | None = Field(
        default=None, description="SQLite database file used when no URL is given"
    )
    sqlite_timeout: float = Field(
        default=60.0, description="SQLite busy timeout in seconds"
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        # Tests always see the statements they trigger
        if self.environment == Environment.TESTING:
            self.echo_sql = True

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING


def load_settings() -> Settings:
    """Load settings from environment variables."""

    # Load .env file if it exists
    load_dotenv()

    sqlite_path_str = os.getenv("SCHEMAFORGE_SQLITE_PATH")
    log_dir_str = os.getenv("SCHEMAFORGE_LOG_DIR")

    return Settings(
        environment=Environment(os.getenv("SCHEMAFORGE_ENV", "development")),
        log_level=os.getenv("SCHEMAFORGE_LOG_LEVEL", "INFO").upper(),
        enable_file_logging=os.getenv("SCHEMAFORGE_FILE_LOGGING", "false").lower()
        in TRUE_VALUES,
        log_dir=Path(log_dir_str) if log_dir_str else None,
        echo_sql=os.getenv("SCHEMAFORGE_ECHO_SQL", "false").lower() in TRUE_VALUES,
        database_url=os.getenv("SCHEMAFORGE_DATABASE_URL") or None,
        sqlite_path=Path(sqlite_path_str) if sqlite_path_str else None,
        sqlite_timeout=float(os.getenv("SCHEMAFORGE_SQLITE_TIMEOUT", "60.0")),
    )


# Global settings instance
settings = load_settings()
