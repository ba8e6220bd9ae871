"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without PostgreSQL, Service Bus or Azure credentials. A file-backed SQLite
database per test stands in for PostgreSQL through the same ORM model.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'config', 'triggers', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Module level: trigger modules read config when they are imported during collection
_DEFAULT_ENV = {
    "DATABASE_URL": "sqlite://",
    "ENVIRONMENT": "test",
    "INGEST_FAILURE_POLICY": "log",
    "SERVICE_BUS_NAMESPACE": "test.servicebus.windows.net",
}
for _key, _value in _DEFAULT_ENV.items():
    os.environ.setdefault(_key, _value)


from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402


@pytest.fixture(autouse=True)
def reset_config_singleton():
    """Each test sees config built from its own environment."""
    from config import reset_config
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sqlite_engine(tmp_path):
    """File-backed SQLite engine with the records table created."""
    from core.models import Base

    engine = create_engine(f"sqlite:///{tmp_path / 'records.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return sessionmaker(bind=sqlite_engine, expire_on_commit=False)


@pytest.fixture
def repository(session_factory):
    from infrastructure.record_repository import ErrorWarningRepository
    return ErrorWarningRepository(session_factory=session_factory)


class FakeServiceBusMessage:
    """Stand-in for func.ServiceBusMessage exposing only what the handler reads."""

    def __init__(self, properties, message_id="msg-0001", delivery_count=1):
        self.application_properties = properties
        self.message_id = message_id
        self.delivery_count = delivery_count


@pytest.fixture
def make_message():
    """Factory fixture: wrap a property dict in a fake Service Bus message."""
    def _make(properties, **kwargs):
        return FakeServiceBusMessage(properties, **kwargs)
    return _make
