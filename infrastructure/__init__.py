"""
Infrastructure Package - Lazy Loading Implementation.

Imports are deferred until an attribute is accessed so that importing the
package never builds the database engine or a Service Bus client before the
Functions host has applied app settings.

Usage:
    from infrastructure import ErrorWarningRepository
    repo = ErrorWarningRepository()

Exports:
    ErrorWarningRepository: Record persistence and queries
    ServiceBusRepository: Error report publisher
    session_scope: Per-invocation SQLAlchemy session
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .record_repository import ErrorWarningRepository
    from .service_bus import ServiceBusRepository
    from .database import session_scope


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name == "ErrorWarningRepository":
        from .record_repository import ErrorWarningRepository
        return ErrorWarningRepository
    elif name == "ServiceBusRepository":
        from .service_bus import ServiceBusRepository
        return ServiceBusRepository
    elif name == "session_scope":
        from .database import session_scope
        return session_scope
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ErrorWarningRepository",
    "ServiceBusRepository",
    "session_scope",
]
