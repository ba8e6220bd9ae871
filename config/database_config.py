"""
PostgreSQL Database Configuration.

Provides configuration for the relational store that receives ingested
error and warning records. Connections are made through SQLAlchemy with the
psycopg 3 driver (``postgresql+psycopg``).

Authentication:
    - Password auth (local development): DB_USER + DB_PASSWORD
    - Managed identity (Azure): token injected per connection, see
      infrastructure/database.py
    - DATABASE_URL: complete SQLAlchemy URL, overrides everything else
      (used for SQLite in tests and ad-hoc local runs)

Exports:
    DatabaseConfig: Database configuration model
"""

import os
from typing import Optional

from pydantic import BaseModel, Field
from sqlalchemy.engine import URL, make_url

from .defaults import DatabaseDefaults, AzureDefaults


# ============================================================================
# DATABASE CONFIGURATION
# ============================================================================

class DatabaseConfig(BaseModel):
    """
    PostgreSQL configuration with managed identity support.
    """

    url: Optional[str] = Field(
        default=None,
        repr=False,
        description="Complete SQLAlchemy URL. When set, host/user/password fields are ignored.",
        examples=["sqlite:///./fleetlog.db"]
    )

    host: Optional[str] = Field(
        default=None,
        description="PostgreSQL server hostname",
        examples=["fleetlog.postgres.database.azure.com"]
    )

    port: int = Field(
        default=DatabaseDefaults.PORT,
        description="PostgreSQL server port number"
    )

    database: str = Field(
        default=DatabaseDefaults.DATABASE,
        description="PostgreSQL database name"
    )

    user: Optional[str] = Field(
        default=None,
        description="Username for password authentication (ignored with managed identity)"
    )

    password: Optional[str] = Field(
        default=None,
        repr=False,
        description="Password for password authentication"
    )

    db_schema: str = Field(
        default=DatabaseDefaults.SCHEMA,
        description="Schema holding the ErrorAndWarningsEntries table (PostgreSQL only)"
    )

    sslmode: str = Field(
        default=DatabaseDefaults.SSLMODE,
        description="libpq sslmode passed to psycopg"
    )

    use_managed_identity: bool = Field(
        default=False,
        description="""Enable Azure Managed Identity for passwordless PostgreSQL authentication.

        When True, an Entra ID access token is acquired for every new pooled
        connection and used as the password. Tokens expire after ~1 hour, so
        they are never cached in the URL.

        Environment Variable: USE_MANAGED_IDENTITY
        """
    )

    managed_identity_name: str = Field(
        default=AzureDefaults.MANAGED_IDENTITY_NAME,
        description="PostgreSQL role name matching the managed identity (case-sensitive)"
    )

    managed_identity_client_id: Optional[str] = Field(
        default=None,
        description="Client ID of a user-assigned managed identity (None = system-assigned)"
    )

    connection_timeout_seconds: int = Field(
        default=DatabaseDefaults.CONNECTION_TIMEOUT_SECONDS,
        ge=1,
        description="Connection timeout in seconds"
    )

    pool_size: int = Field(
        default=DatabaseDefaults.POOL_SIZE,
        ge=1,
        le=100,
        description="SQLAlchemy connection pool size per worker process"
    )

    create_tables: bool = Field(
        default=DatabaseDefaults.CREATE_TABLES,
        description="Create the records table at startup when it does not exist (dev only)"
    )

    @property
    def is_postgres(self) -> bool:
        """True unless DATABASE_URL points at another backend."""
        if self.url:
            return make_url(self.url).get_backend_name() == "postgresql"
        return True

    @property
    def effective_user(self) -> Optional[str]:
        """Managed identity name when passwordless, otherwise DB_USER."""
        if self.use_managed_identity:
            return self.managed_identity_name
        return self.user

    @property
    def sqlalchemy_url(self) -> URL:
        """
        Build the SQLAlchemy URL.

        With managed identity the password is omitted; it is supplied per
        connection by the engine's do_connect hook.
        """
        if self.url:
            return make_url(self.url)

        if not self.host:
            raise ValueError("DB_HOST (or DATABASE_URL) is required")
        if not self.use_managed_identity and not self.user:
            raise ValueError("DB_USER is required for password authentication")

        return URL.create(
            drivername="postgresql+psycopg",
            username=self.effective_user,
            password=None if self.use_managed_identity else self.password,
            host=self.host,
            port=self.port,
            database=self.database,
            query={"sslmode": self.sslmode},
        )

    def debug_dict(self) -> dict:
        """Debug output with masked secrets."""
        return {
            "url": "***MASKED***" if self.url else None,
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "user": self.effective_user,
            "password": "***MASKED***" if self.password else None,
            "schema": self.db_schema,
            "sslmode": self.sslmode,
            "managed_identity": self.use_managed_identity,
            "managed_identity_client_id": self.managed_identity_client_id[:8] + "..." if self.managed_identity_client_id else None,
            "pool_size": self.pool_size,
            "create_tables": self.create_tables,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            url=os.environ.get("DATABASE_URL") or None,
            host=os.environ.get("DB_HOST"),
            port=int(os.environ.get("DB_PORT", str(DatabaseDefaults.PORT))),
            database=os.environ.get("DB_NAME", DatabaseDefaults.DATABASE),
            user=os.environ.get("DB_USER"),
            password=os.environ.get("DB_PASSWORD"),
            db_schema=os.environ.get("DB_SCHEMA", DatabaseDefaults.SCHEMA),
            sslmode=os.environ.get("DB_SSLMODE", DatabaseDefaults.SSLMODE),
            use_managed_identity=os.environ.get("USE_MANAGED_IDENTITY", "false").lower() == "true",
            managed_identity_name=os.environ.get("DB_MANAGED_IDENTITY_NAME", AzureDefaults.MANAGED_IDENTITY_NAME),
            managed_identity_client_id=os.environ.get("DB_MANAGED_IDENTITY_CLIENT_ID"),
            connection_timeout_seconds=int(os.environ.get("DB_CONNECTION_TIMEOUT", str(DatabaseDefaults.CONNECTION_TIMEOUT_SECONDS))),
            pool_size=int(os.environ.get("DB_POOL_SIZE", str(DatabaseDefaults.POOL_SIZE))),
            create_tables=os.environ.get("DB_CREATE_TABLES", "false").lower() == "true",
        )


__all__ = ["DatabaseConfig"]
