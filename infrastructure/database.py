# ============================================================================
# DATABASE ENGINE AND SESSIONS
# ============================================================================
# PURPOSE: SQLAlchemy engine, session factory and unit-of-work scope
# EXPORTS: get_engine, get_session_factory, session_scope, ensure_tables,
#          check_database, reset_engine
# DEPENDENCIES: sqlalchemy, psycopg (driver), azure-identity
# ============================================================================

"""
Database Engine and Sessions.

One engine per worker process, built lazily from DatabaseConfig. Every
handler invocation gets its own Session through session_scope(); sessions are
never shared across concurrent invocations.

Managed identity:
    The SQLAlchemy URL carries no password. A ``do_connect`` listener asks
    DefaultAzureCredential for an Entra ID token each time the pool opens a
    new DBAPI connection, so expired tokens are never reused.

Schema:
    The ORM model is schema-less. On PostgreSQL the engine maps it onto
    DB_SCHEMA with ``schema_translate_map``; SQLite (tests) ignores schemas.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, sessionmaker

from config import get_config, DatabaseConfig
from config.defaults import AzureDefaults, DatabaseDefaults
from core.models import Base
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "Database")


_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None
_credential = None
_lock = threading.Lock()


# ============================================================================
# MANAGED IDENTITY
# ============================================================================

def _get_credential(db_config: DatabaseConfig):
    """DefaultAzureCredential, created once per process (token cache lives on it)."""
    global _credential
    if _credential is None:
        from azure.identity import DefaultAzureCredential

        if db_config.managed_identity_client_id:
            logger.debug("🔐 Using user-assigned managed identity for PostgreSQL")
            _credential = DefaultAzureCredential(
                managed_identity_client_id=db_config.managed_identity_client_id
            )
        else:
            logger.debug("🔐 Using system-assigned managed identity for PostgreSQL")
            _credential = DefaultAzureCredential()
    return _credential


def _acquire_token(db_config: DatabaseConfig) -> str:
    token_response = _get_credential(db_config).get_token(AzureDefaults.POSTGRES_TOKEN_SCOPE)
    logger.debug(f"🔑 PostgreSQL access token acquired ({len(token_response.token)} chars)")
    return token_response.token


def _install_token_hook(engine: Engine, db_config: DatabaseConfig) -> None:
    @event.listens_for(engine, "do_connect")
    def provide_token(dialect, conn_rec, cargs, cparams):
        cparams["password"] = _acquire_token(db_config)


# ============================================================================
# ENGINE / SESSION FACTORY
# ============================================================================

def _build_engine(db_config: DatabaseConfig) -> Engine:
    try:
        url = db_config.sqlalchemy_url
    except (ValueError, ArgumentError) as e:
        raise ConfigurationError(f"Invalid database configuration: {e}") from e

    kwargs = {"pool_pre_ping": True}
    if db_config.is_postgres:
        kwargs.update(
            pool_size=db_config.pool_size,
            max_overflow=DatabaseDefaults.MAX_OVERFLOW,
            connect_args={"connect_timeout": db_config.connection_timeout_seconds},
            execution_options={"schema_translate_map": {None: db_config.db_schema}},
        )

    engine = create_engine(url, **kwargs)

    if db_config.is_postgres and db_config.use_managed_identity:
        _install_token_hook(engine, db_config)

    logger.info(
        f"✅ Database engine created: {url.render_as_string(hide_password=True)}",
        extra={"custom_dimensions": {"backend": url.get_backend_name()}}
    )
    return engine


def get_engine() -> Engine:
    """Process-wide engine, created on first use."""
    global _engine
    if _engine is None:
        with _lock:
            if _engine is None:
                _engine = _build_engine(get_config().database)
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        with _lock:
            if _session_factory is None:
                _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def reset_engine() -> None:
    """Dispose the cached engine (tests and config reloads)."""
    global _engine, _session_factory
    with _lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _session_factory = None


@contextmanager
def session_scope(session_factory: Optional[Callable[[], Session]] = None) -> Iterator[Session]:
    """
    Session for a single unit of work.

    Rolls back when the block raises and always closes the session. Committing
    is left to the caller so a failed commit surfaces from the caller's code.

    Usage:
        with session_scope() as session:
            session.add(record)
            session.commit()
    """
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        yield session
    except Exception:
        logger.debug("↩️ Rolling back session after error")
        session.rollback()
        raise
    finally:
        session.close()


# ============================================================================
# STARTUP / HEALTH
# ============================================================================

def ensure_tables(engine: Optional[Engine] = None) -> None:
    """Create missing tables (DB_CREATE_TABLES=true). Existing tables are left alone."""
    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("✅ Record tables verified")


def check_database(engine: Optional[Engine] = None) -> dict:
    """
    Round-trip ``SELECT 1`` against the store.

    Returns:
        {"status": "healthy"|"unhealthy", "backend": ..., "error": ...}
    """
    try:
        engine = engine or get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "healthy", "backend": engine.url.get_backend_name()}
    except Exception as e:
        logger.warning(f"⚠️ Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}


__all__ = [
    "get_engine",
    "get_session_factory",
    "session_scope",
    "ensure_tables",
    "check_database",
    "reset_engine",
]
