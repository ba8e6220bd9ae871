"""
Top-level settings for the ingest function app.

Built from environment variables once per worker and made of:
    - DatabaseConfig (PostgreSQL via SQLAlchemy)
    - QueueConfig (Service Bus queue + ingestion failure policy)

Exports:
    AppConfig: Main configuration class
"""

import os

from pydantic import BaseModel, Field, field_validator

from .database_config import DatabaseConfig
from .queue_config import QueueConfig
from .defaults import AppDefaults


class AppConfig(BaseModel):
    """Environment-wide flags plus the database and queue sections."""

    # ========================================================================
    # Core Application Settings
    # ========================================================================

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Deployment stage; echoed by /api/health",
        examples=["dev", "test", "prod"]
    )

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Include exception tracebacks in HTTP 500 responses"
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Default level for component loggers",
        examples=["DEBUG", "INFO", "WARNING", "ERROR"]
    )

    # ========================================================================
    # Domain Configurations
    # ========================================================================

    database: DatabaseConfig
    queues: QueueConfig

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value

    def debug_dict(self) -> dict:
        """Sanitized configuration for health output (secrets masked)."""
        return {
            "environment": self.environment,
            "debug_mode": self.debug_mode,
            "log_level": self.log_level,
            "database": self.database.debug_dict(),
            "queues": self.queues.debug_dict(),
        }

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """Load all configuration from environment variables."""
        return cls(
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            debug_mode=os.environ.get("DEBUG_MODE", "false").lower() == "true",
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
            database=DatabaseConfig.from_environment(),
            queues=QueueConfig.from_environment(),
        )


__all__ = ["AppConfig"]
