"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── database_config.py       # PostgreSQL via SQLAlchemy/psycopg
    ├── queue_config.py          # Service Bus queue + failure policy
    ├── defaults.py              # Default values
    └── env_validation.py        # Startup validation of env var formats

Usage:
    from config import get_config
    config = get_config()
    queue = config.queues.reports_queue

    from config import debug_config
    info = debug_config()  # Passwords masked
"""

from typing import Optional

from .database_config import DatabaseConfig
from .queue_config import QueueConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, or an error entry if loading failed
    """
    try:
        return get_config().debug_dict()
    except Exception as e:
        return {"error": f"Failed to load config: {e}"}


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "QueueConfig",
    "get_config",
    "reset_config",
    "debug_config",
]
