"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "DATABASE_URL", "DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD",
        "DB_SCHEMA", "DB_SSLMODE", "USE_MANAGED_IDENTITY", "DB_MANAGED_IDENTITY_NAME",
        "DB_MANAGED_IDENTITY_CLIENT_ID", "DB_CONNECTION_TIMEOUT", "DB_POOL_SIZE",
        "DB_CREATE_TABLES",
        "ServiceBusConnection", "SERVICE_BUS_NAMESPACE",
        "ServiceBusConnection__fullyQualifiedNamespace",
        "SERVICE_BUS_REPORTS_QUEUE", "SERVICE_BUS_RETRY_COUNT", "INGEST_FAILURE_POLICY",
        "ENVIRONMENT", "DEBUG_MODE", "LOG_LEVEL",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
