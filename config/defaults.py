"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - DatabaseDefaults: PostgreSQL connection and table settings
    - QueueDefaults: Service Bus queue names and ingestion policy
    - AppDefaults: Environment, logging and debug settings
    - AzureDefaults: Azure AD scopes used for passwordless auth

Usage:
    from config.defaults import DatabaseDefaults, QueueDefaults

    # In Pydantic Field definitions:
    port: int = Field(default=DatabaseDefaults.PORT, ...)
"""


# =============================================================================
# AZURE DEFAULTS
# =============================================================================

class AzureDefaults:
    """Azure AD constants shared by the database and Service Bus adapters."""

    # Scope is fixed for all Azure Database for PostgreSQL Flexible Servers
    POSTGRES_TOKEN_SCOPE = "https://ossrdbms-aad.database.windows.net/.default"

    # Placeholder - override with DB_MANAGED_IDENTITY_NAME
    MANAGED_IDENTITY_NAME = "your-managed-identity-name"


# =============================================================================
# DATABASE DEFAULTS
# =============================================================================

class DatabaseDefaults:
    """Database configuration defaults."""

    PORT = 5432
    DATABASE = "fleetlog"
    SCHEMA = "app"
    SSLMODE = "require"
    CONNECTION_TIMEOUT_SECONDS = 30
    POOL_SIZE = 5
    MAX_OVERFLOW = 10
    CREATE_TABLES = False

    # Storage schema for ingested records
    RECORDS_TABLE = "ErrorAndWarningsEntries"
    SHIP_NAME_MAX_LENGTH = 256


# =============================================================================
# QUEUE DEFAULTS
# =============================================================================

class QueueDefaults:
    """Service Bus defaults."""

    CONNECTION_SETTING = "ServiceBusConnection"
    REPORTS_QUEUE = "errorsandwarnings"
    RETRY_COUNT = 3
    MESSAGE_TTL_HOURS = 24

    # log  = log and complete the message (failure is dropped)
    # raise = log and re-raise so the host abandons the message
    FAILURE_POLICY_LOG = "log"
    FAILURE_POLICY_RAISE = "raise"
    FAILURE_POLICY = FAILURE_POLICY_LOG
    FAILURE_POLICIES = (FAILURE_POLICY_LOG, FAILURE_POLICY_RAISE)


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Application-wide defaults."""

    ENVIRONMENT = "dev"
    DEBUG_MODE = False
    LOG_LEVEL = "INFO"

    # Read endpoint paging
    REPORTS_PAGE_SIZE = 50
    REPORTS_MAX_PAGE_SIZE = 500


__all__ = [
    "AzureDefaults",
    "DatabaseDefaults",
    "QueueDefaults",
    "AppDefaults",
]
